"""Remaining-card counts for a multi-deck shoe."""

import logging
from typing import Any, Iterable, Mapping

from core.cards import ACE_RANK, TEN_RANK, Card
from core.statistics.probability import DEFAULT_BUST_SCORES, ProbabilityEngine, ShoeSummary

logger = logging.getLogger(__name__)

MIN_DECKS = 1
MAX_DECKS = 8
CARDS_PER_DECK = 52
CARDS_PER_RANK = 4  # One per suit
TEN_VALUE_FACES = 4  # 10, J, Q, K
RANKS: tuple[int, ...] = tuple(range(ACE_RANK, TEN_RANK + 1))


def validate_deck_count(num_decks: int) -> int:
    """Return `num_decks` if it is a supported shoe size, else raise ValueError."""
    if not MIN_DECKS <= num_decks <= MAX_DECKS:
        raise ValueError(f"Deck count must be between {MIN_DECKS} and {MAX_DECKS}, got {num_decks}")
    return num_decks


def initial_count(rank: int, num_decks: int) -> int:
    """Number of cards of `rank` in a full shoe of `num_decks` decks."""
    if rank not in RANKS:
        return 0
    per_deck = CARDS_PER_RANK * TEN_VALUE_FACES if rank == TEN_RANK else CARDS_PER_RANK
    return per_deck * num_decks


class ShoeTracker:
    """
    Tracks how many cards of each rank are left in the shoe.

    Ranks are buckets 1-10: 1 is the Ace, 10 collects every ten-value
    card. A full shoe of n decks holds 4n of ranks 1-9 and 16n tens.

    The only mutations are `reset` and `decrement`; every other method is
    a query recomputed from the current counts.
    """

    def __init__(self, num_decks: int = MIN_DECKS) -> None:
        """
        Initialize a full shoe.

        Args:
            num_decks: Number of 52-card decks (1-8)
        """
        self._num_decks = validate_deck_count(num_decks)
        self._pending_decks: int | None = None
        self._counts: dict[int, int] = {}
        self.reset(num_decks)

    @property
    def num_decks(self) -> int:
        """Return the number of decks the shoe was built with."""
        return self._num_decks

    @property
    def pending_decks(self) -> int | None:
        """Deck count requested by `set_deck_count`, not yet applied."""
        return self._pending_decks

    def set_deck_count(self, num_decks: int) -> None:
        """
        Request a new shoe size.

        The new size takes effect on the next `reset()` call.
        """
        self._pending_decks = validate_deck_count(num_decks)
        logger.debug("Reset requested for %d deck(s)", num_decks)

    def reset(self, num_decks: int | None = None) -> None:
        """
        Rebuild a full shoe.

        Args:
            num_decks: Deck count to build with. Defaults to the pending
                count from `set_deck_count`, then the current count.
        """
        if num_decks is None:
            num_decks = self._pending_decks or self._num_decks
        self._num_decks = validate_deck_count(num_decks)
        self._pending_decks = None
        self._counts = {rank: initial_count(rank, self._num_decks) for rank in RANKS}
        logger.debug("Shoe reset to %d deck(s), %d cards", self._num_decks, self.total())

    def count(self, rank: int) -> int:
        """Return the remaining count for `rank`, 0 for unknown ranks."""
        return self._counts.get(rank, 0)

    def counts(self) -> dict[int, int]:
        """Return a copy of the rank -> remaining count mapping."""
        return dict(self._counts)

    def total(self) -> int:
        """Return the number of cards left in the shoe."""
        return sum(self._counts.values())

    def initial_count(self, rank: int) -> int:
        """Return the full-shoe count for `rank` at the current deck count."""
        return initial_count(rank, self._num_decks)

    @property
    def total_cards(self) -> int:
        """Return the size of a full shoe."""
        return self._num_decks * CARDS_PER_DECK

    @property
    def cards_seen(self) -> int:
        """Return how many cards have been marked since the last reset."""
        return self.total_cards - self.total()

    @property
    def decks_remaining(self) -> float:
        """Return the estimated number of decks left."""
        return self.total() / CARDS_PER_DECK

    def decrement(self, rank: int) -> bool:
        """
        Mark one card of `rank` as seen.

        Returns:
            True if a card was removed, False if the rank is unknown or
            already exhausted
        """
        current = self._counts.get(rank, 0)
        if current <= 0:
            logger.debug("Ignored decrement of rank %r (none left)", rank)
            return False
        self._counts[rank] = current - 1
        return True

    def mark_card(self, card: Card) -> bool:
        """Mark a physical card as seen."""
        return self.decrement(card.tracker_rank)

    # Queries

    @property
    def probabilities(self) -> ProbabilityEngine:
        """Return a probability engine reading this shoe."""
        return ProbabilityEngine(self, RANKS)

    def probability(self, rank: int) -> float:
        """Probability that the next card is `rank`; 0.0 for an empty shoe."""
        return self.probabilities.card_probability(rank)

    def bust_probability(self, score: int) -> float:
        """Probability that the next card busts a hand at `score`."""
        return self.probabilities.bust_probability(score)

    def blackjack_probability(self) -> float:
        """Probability that the next two cards are an Ace and a ten."""
        return self.probabilities.blackjack_probability()

    def twenty_probability(self) -> float:
        """Probability that the next two cards are both tens."""
        return self.probabilities.twenty_probability()

    def summary(self, scores: Iterable[int] = DEFAULT_BUST_SCORES) -> ShoeSummary:
        """Snapshot every query."""
        return self.probabilities.summary(scores)

    # Serialization

    def to_dict(self) -> dict[str, Any]:
        """Serialize counts for session storage."""
        return {
            "num_decks": self._num_decks,
            "counts": {str(rank): count for rank, count in self._counts.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ShoeTracker":
        """
        Restore a tracker from `to_dict` output.

        Every rank 1-10 must be present.

        Raises:
            ValueError: If the blob is malformed, a rank is missing or
                unknown, or a deck count or count is out of range
        """
        if not isinstance(data, Mapping) or not isinstance(data.get("counts"), Mapping):
            raise ValueError("Stored shoe must be a mapping with a 'counts' mapping")
        try:
            num_decks = int(data["num_decks"])
            counts = {int(key): int(value) for key, value in data["counts"].items()}
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Malformed stored shoe: {exc}") from exc

        unknown = sorted(set(counts) - set(RANKS))
        if unknown:
            raise ValueError(f"Unknown ranks in stored shoe: {unknown}")
        missing = sorted(set(RANKS) - set(counts))
        if missing:
            raise ValueError(f"Stored shoe is missing ranks: {missing}")

        tracker = cls(num_decks)
        for rank, count in counts.items():
            if not 0 <= count <= tracker.initial_count(rank):
                raise ValueError(f"Count {count} out of range for rank {rank}")
        tracker._counts = {rank: counts[rank] for rank in RANKS}
        return tracker

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(num_decks={self._num_decks}, total={self.total()})"
