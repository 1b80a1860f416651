"""Counting session: one shoe plus the confirm-before-reset flow."""

import logging
from typing import Any, Iterable, Mapping

from transitions import Machine

from core.cards import Card
from core.statistics.probability import DEFAULT_BUST_SCORES, ProbabilityEngine, ShoeSummary
from core.tracker.shoe import MIN_DECKS, RANKS, ShoeTracker, validate_deck_count
from core.tracker.state import TrackerState

logger = logging.getLogger(__name__)


class CountingSession:
    """
    Owns a ShoeTracker and gates every rebuild behind a confirmation.

    Choosing a deck count or asking for a reset only opens a pending reset;
    the shoe is rebuilt on `confirm_reset()` and left untouched on
    `cancel_reset()`. Cards can be marked only while the session is ACTIVE.

    Operations that are not allowed in the current state return False
    instead of raising.
    """

    # State machine states
    STATES = [s.name.lower() for s in TrackerState]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "open_reset", "source": ["uninitialized", "reset_pending", "active"], "dest": "reset_pending"},
        {"trigger": "apply_reset", "source": "reset_pending", "dest": "active"},
        {"trigger": "resume", "source": "reset_pending", "dest": "active"},
        {"trigger": "abandon", "source": "reset_pending", "dest": "uninitialized"},
        {"trigger": "record_card", "source": "active", "dest": "active"},
    ]

    def __init__(self, num_decks: int = MIN_DECKS) -> None:
        """
        Start a session and immediately ask to build the first shoe.

        Args:
            num_decks: Deck count for the first shoe (1-8)
        """
        self._num_decks = validate_deck_count(num_decks)
        self._pending_decks: int | None = None
        self._tracker: ShoeTracker | None = None

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="uninitialized",
            auto_transitions=False,
            model_attribute="_machine_state",
        )
        self.select_decks(num_decks)

    @property
    def state(self) -> TrackerState:
        """Get current session state as enum."""
        return TrackerState[self._machine_state.upper()]  # type: ignore

    @property
    def tracker(self) -> ShoeTracker | None:
        """Return the current shoe, or None before the first confirmed reset."""
        return self._tracker

    @property
    def num_decks(self) -> int:
        """Return the deck count of the current shoe (or of the first one to build)."""
        return self._num_decks

    @property
    def pending_decks(self) -> int | None:
        """Return the deck count the next confirmed reset will build, if one was chosen."""
        return self._pending_decks

    @property
    def reset_pending(self) -> bool:
        """Check whether a reset is waiting for confirmation."""
        return self.state == TrackerState.RESET_PENDING

    def select_decks(self, num_decks: int) -> None:
        """
        Choose a new deck count.

        Raises:
            ValueError: If `num_decks` is outside 1-8
        """
        self._pending_decks = validate_deck_count(num_decks)
        self.request_reset()

    def request_reset(self) -> None:
        """Open a reset that must be confirmed or cancelled."""
        self.open_reset()
        logger.debug("Reset pending (decks=%s)", self._pending_decks or self._num_decks)

    def confirm_reset(self) -> bool:
        """
        Rebuild the shoe with the pending deck count.

        Returns:
            False if no reset was pending
        """
        if self.state != TrackerState.RESET_PENDING:
            return False

        num_decks = self._pending_decks or self._num_decks
        if self._tracker is None:
            self._tracker = ShoeTracker(num_decks)
        else:
            self._tracker.set_deck_count(num_decks)
            self._tracker.reset()

        self._num_decks = num_decks
        self._pending_decks = None
        self.apply_reset()
        logger.info("Shoe rebuilt with %d deck(s)", num_decks)
        return True

    def cancel_reset(self) -> bool:
        """
        Drop the pending reset and keep the current shoe.

        A deck count chosen with `select_decks` stays selected and is
        used by the next confirmed reset.

        Returns:
            False if no reset was pending
        """
        if self.state != TrackerState.RESET_PENDING:
            return False

        if self._tracker is None:
            self.abandon()
        else:
            self.resume()
        logger.debug("Reset cancelled, state is now %s", self.state.name)
        return True

    def mark(self, rank: int) -> bool:
        """
        Mark one card of `rank` as seen.

        Returns:
            True if a card was removed. False while no shoe is active, or
            when the rank is unknown or exhausted.
        """
        if self.state != TrackerState.ACTIVE or self._tracker is None:
            return False
        if not self._tracker.decrement(rank):
            return False
        self.record_card()
        return True

    def mark_card(self, card: Card) -> bool:
        """Mark a physical card as seen."""
        return self.mark(card.tracker_rank)

    # Queries read through to the tracker; an absent shoe is empty.

    def count(self, rank: int) -> int:
        """Return the remaining count for `rank`."""
        return self._tracker.count(rank) if self._tracker is not None else 0

    def total(self) -> int:
        """Return the number of cards left."""
        return self._tracker.total() if self._tracker is not None else 0

    def summary(self, scores: Iterable[int] = DEFAULT_BUST_SCORES) -> ShoeSummary:
        """Snapshot counts and probabilities for display."""
        return ProbabilityEngine(self, RANKS).summary(scores)

    # Serialization

    def to_dict(self) -> dict[str, Any]:
        """Serialize the session for storage."""
        return {
            "state": self._machine_state,
            "num_decks": self._num_decks,
            "pending_decks": self._pending_decks,
            "shoe": self._tracker.to_dict() if self._tracker is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CountingSession":
        """
        Restore a session from `to_dict` output.

        Raises:
            ValueError: If the stored state is unknown or inconsistent
        """
        if not isinstance(data, Mapping):
            raise ValueError("Stored session must be a mapping")
        state_name = str(data.get("state")).upper()
        if state_name not in TrackerState.__members__:
            raise ValueError(f"Unknown session state: {data.get('state')}")
        state = TrackerState[state_name]

        try:
            num_decks = int(data["num_decks"])
            pending = data.get("pending_decks")
            pending = int(pending) if pending is not None else None
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Malformed stored session: {exc}") from exc

        shoe = data.get("shoe")
        tracker = ShoeTracker.from_dict(shoe) if shoe is not None else None
        if state == TrackerState.ACTIVE and tracker is None:
            raise ValueError("Active session has no shoe")
        if state == TrackerState.UNINITIALIZED and tracker is not None:
            raise ValueError("Uninitialized session already has a shoe")
        if tracker is not None and tracker.num_decks != num_decks:
            raise ValueError(
                f"Stored shoe has {tracker.num_decks} deck(s), session says {num_decks}"
            )

        session = cls(num_decks)
        session._pending_decks = validate_deck_count(pending) if pending is not None else None
        session._tracker = tracker
        session._machine_state = state.name.lower()
        return session

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(state={self.state.name}, num_decks={self._num_decks})"
