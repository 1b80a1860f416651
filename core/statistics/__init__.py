"""Statistical calculations over the remaining shoe."""

from core.statistics.probability import CountSource, ProbabilityEngine, ShoeSummary

__all__ = [
    "CountSource",
    "ProbabilityEngine",
    "ShoeSummary",
]
