"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field

from config import config


class NewTrackerRequest(BaseModel):
    """Request to start a new counting session."""

    num_decks: int = Field(
        default=config.tracker.default_decks,
        ge=config.tracker.min_decks,
        le=config.tracker.max_decks,
        description="Number of 52-card decks in the shoe",
    )


class NewTrackerResponse(BaseModel):
    """Signed token identifying the new session."""

    session_id: str


class MarkRankRequest(BaseModel):
    """Mark one card of a rank bucket as seen."""

    rank: int = Field(..., ge=1, le=10, description="1 = Ace, 10 = any ten-value card")


class MarkCardRequest(BaseModel):
    """Mark a physical card, e.g. 'KH' or 'A♠'."""

    card: str = Field(..., min_length=2, max_length=3)


class DeckCountRequest(BaseModel):
    """Choose a new deck count (opens a pending reset)."""

    num_decks: int = Field(..., ge=config.tracker.min_decks, le=config.tracker.max_decks)


class RankCountResponse(BaseModel):
    """Remaining count and next-card probability for one rank."""

    rank: int
    label: str
    remaining: int
    initial: int
    probability: float


class BustProbabilityResponse(BaseModel):
    """Chance of busting with the next card."""

    score: int
    probability: float


class TrackerStateResponse(BaseModel):
    """Full read-only projection of a counting session."""

    state: str
    num_decks: int
    pending_decks: int | None
    reset_pending: bool
    total: int
    cards_seen: int
    decks_remaining: float
    ranks: list[RankCountResponse]
    blackjack_probability: float
    twenty_probability: float
    bust: list[BustProbabilityResponse]


class MarkResponse(BaseModel):
    """Result of marking a card."""

    marked: bool
    tracker: TrackerStateResponse
