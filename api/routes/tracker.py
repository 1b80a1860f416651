"""Shoe tracker API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Header, HTTPException, Query

from api.schemas import (
    BustProbabilityResponse,
    DeckCountRequest,
    MarkCardRequest,
    MarkRankRequest,
    MarkResponse,
    NewTrackerRequest,
    NewTrackerResponse,
    RankCountResponse,
    TrackerStateResponse,
)
from api.session import get_session_signer, load_counting_session, save_counting_session
from config import config
from core.cards import Card
from core.tracker import RANKS, CountingSession

logger = logging.getLogger(__name__)

router = APIRouter()

# Sessions already loaded by this process, keyed by session token
_sessions: dict[str, CountingSession] = {}

RANK_LABELS = {1: "A", 10: "10/J/Q/K"}

SessionHeader = Annotated[str, Header(alias="X-Session-ID")]


def _new_counting_session(num_decks: int) -> CountingSession:
    """Create a session whose first shoe is already built."""
    session = CountingSession(num_decks)
    session.confirm_reset()
    return session


async def _get_session(token: str) -> CountingSession:
    """
    Get the counting session for a session token.

    Tokens must carry a valid signature. A valid token whose session has
    expired from the store gets a fresh shoe.
    """
    if get_session_signer().verify(token) is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    if token in _sessions:
        return _sessions[token]

    session = await load_counting_session(token)
    if session is None:
        session = _new_counting_session(config.tracker.default_decks)
        await save_counting_session(token, session)

    _sessions[token] = session
    return session


def _state_response(session: CountingSession) -> TrackerStateResponse:
    """Project a counting session onto the response schema."""
    summary = session.summary(config.tracker.bust_scores)
    tracker = session.tracker

    return TrackerStateResponse(
        state=session.state.name,
        num_decks=session.num_decks,
        pending_decks=session.pending_decks,
        reset_pending=session.reset_pending,
        total=summary.total,
        cards_seen=tracker.cards_seen if tracker is not None else 0,
        decks_remaining=tracker.decks_remaining if tracker is not None else 0.0,
        ranks=[
            RankCountResponse(
                rank=rank,
                label=RANK_LABELS.get(rank, str(rank)),
                remaining=summary.counts[rank],
                initial=tracker.initial_count(rank) if tracker is not None else 0,
                probability=summary.probabilities[rank],
            )
            for rank in RANKS
        ],
        blackjack_probability=summary.blackjack,
        twenty_probability=summary.twenty,
        bust=[
            BustProbabilityResponse(score=score, probability=probability)
            for score, probability in summary.bust.items()
        ],
    )


async def _mark(session_id: str, session: CountingSession, rank: int) -> MarkResponse:
    """Mark a rank and persist the result."""
    if session.reset_pending:
        raise HTTPException(status_code=409, detail="Reset pending: confirm or cancel it first")

    marked = session.mark(rank)
    if marked:
        await save_counting_session(session_id, session)
    return MarkResponse(marked=marked, tracker=_state_response(session))


@router.post("/new")
async def new_tracker(request: NewTrackerRequest | None = None) -> NewTrackerResponse:
    """Start a new counting session with a full shoe."""
    num_decks = request.num_decks if request is not None else config.tracker.default_decks
    session_id = get_session_signer().issue()

    session = _new_counting_session(num_decks)
    _sessions[session_id] = session
    await save_counting_session(session_id, session)
    logger.info("Created counting session with %d deck(s)", num_decks)

    return NewTrackerResponse(session_id=session_id)


@router.get("/state")
async def get_state(session_id: SessionHeader) -> TrackerStateResponse:
    """Get the current counts and probabilities."""
    session = await _get_session(session_id)
    return _state_response(session)


@router.post("/mark")
async def mark_rank(request: MarkRankRequest, session_id: SessionHeader) -> MarkResponse:
    """Mark one card of a rank as seen."""
    session = await _get_session(session_id)
    return await _mark(session_id, session, request.rank)


@router.post("/card")
async def mark_card(request: MarkCardRequest, session_id: SessionHeader) -> MarkResponse:
    """Mark a physical card as seen."""
    try:
        card = Card.from_string(request.card)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    session = await _get_session(session_id)
    return await _mark(session_id, session, card.tracker_rank)


@router.post("/decks")
async def select_decks(request: DeckCountRequest, session_id: SessionHeader) -> TrackerStateResponse:
    """Choose a deck count; the shoe is rebuilt once the reset is confirmed."""
    session = await _get_session(session_id)
    session.select_decks(request.num_decks)
    await save_counting_session(session_id, session)
    return _state_response(session)


@router.post("/reset")
async def request_reset(session_id: SessionHeader) -> TrackerStateResponse:
    """Ask to rebuild the shoe."""
    session = await _get_session(session_id)
    session.request_reset()
    await save_counting_session(session_id, session)
    return _state_response(session)


@router.post("/reset/confirm")
async def confirm_reset(session_id: SessionHeader) -> TrackerStateResponse:
    """Confirm a pending reset."""
    session = await _get_session(session_id)
    if not session.confirm_reset():
        raise HTTPException(status_code=409, detail="No reset pending")
    await save_counting_session(session_id, session)
    return _state_response(session)


@router.post("/reset/cancel")
async def cancel_reset(session_id: SessionHeader) -> TrackerStateResponse:
    """Cancel a pending reset and keep the current counts."""
    session = await _get_session(session_id)
    if not session.cancel_reset():
        raise HTTPException(status_code=409, detail="No reset pending")
    await save_counting_session(session_id, session)
    return _state_response(session)


@router.get("/bust")
async def bust_probability(
    session_id: SessionHeader,
    score: Annotated[int, Query(ge=1, le=21)],
) -> BustProbabilityResponse:
    """Chance that the next card busts a hand at `score`."""
    session = await _get_session(session_id)
    tracker = session.tracker
    probability = tracker.bust_probability(score) if tracker is not None else 0.0
    return BustProbabilityResponse(score=score, probability=probability)
