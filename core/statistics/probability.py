"""Draw probabilities computed from the remaining shoe composition."""

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Protocol

from core.cards import ACE_RANK, TEN_RANK

BLACKJACK_TOTAL = 21
TWENTY_TOTAL = 20
DEFAULT_BUST_SCORES: tuple[int, ...] = (13, 14, 15, 16, 17)


class CountSource(Protocol):
    """Anything exposing per-rank remaining counts and their total."""

    def count(self, rank: int) -> int: ...

    def total(self) -> int: ...


@dataclass(frozen=True)
class ShoeSummary:
    """Point-in-time snapshot of every query on a shoe."""

    total: int
    counts: dict[int, int]
    probabilities: dict[int, float]
    blackjack: float
    twenty: float
    bust: dict[int, float] = field(default_factory=dict)


class ProbabilityEngine:
    """
    Finite-shoe probabilities for the next card(s) drawn.

    Every query reads the current counts from its source, so results always
    reflect the latest decrement. An empty shoe (or one too small for a
    two-card query) yields 0.0 rather than raising.
    """

    def __init__(self, source: CountSource, ranks: Iterable[int] = range(ACE_RANK, TEN_RANK + 1)) -> None:
        """
        Initialize the probability engine.

        Args:
            source: Object providing count(rank) and total()
            ranks: Rank buckets to consider when summing counts
        """
        self._source = source
        self._ranks = tuple(ranks)

    def card_probability(self, rank: int) -> float:
        """Probability that the next card is of the given rank."""
        total = self._source.total()
        if total <= 0:
            return 0.0
        return self._source.count(rank) / total

    def bust_probability(self, score: int) -> float:
        """
        Probability that the next single card busts a hand at `score`.

        Aces are counted as 1, so only ranks strictly above
        ``21 - score`` bust the hand.

        Args:
            score: Current hand total

        Returns:
            Probability of busting (0-1)
        """
        total = self._source.total()
        if total <= 0:
            return 0.0
        safe_limit = BLACKJACK_TOTAL - score
        busting = sum(self._source.count(rank) for rank in self._ranks if rank > safe_limit)
        return busting / total

    def blackjack_probability(self) -> float:
        """
        Probability that the next two cards form a natural (Ace + ten-value).

        Drawn without replacement, in either order.
        """
        total = self._source.total()
        if total <= 1:
            return 0.0
        aces = self._source.count(ACE_RANK)
        tens = self._source.count(TEN_RANK)
        return (aces / total) * (tens / (total - 1)) * 2

    def twenty_probability(self) -> float:
        """Probability that the next two cards are both ten-value."""
        total = self._source.total()
        tens = self._source.count(TEN_RANK)
        if total <= 1 or tens <= 1:
            return 0.0
        return (tens / total) * ((tens - 1) / (total - 1))

    def bust_table(self, scores: Iterable[int] = DEFAULT_BUST_SCORES) -> dict[int, float]:
        """Bust probability for each hand total in `scores`."""
        return {score: self.bust_probability(score) for score in scores}

    def summary(self, scores: Iterable[int] = DEFAULT_BUST_SCORES) -> ShoeSummary:
        """Take a snapshot of all queries at once."""
        counts: Mapping[int, int] = {rank: self._source.count(rank) for rank in self._ranks}
        return ShoeSummary(
            total=self._source.total(),
            counts=dict(counts),
            probabilities={rank: self.card_probability(rank) for rank in self._ranks},
            blackjack=self.blackjack_probability(),
            twenty=self.twenty_probability(),
            bust=self.bust_table(scores),
        )
