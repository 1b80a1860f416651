"""Shoe tracking and the counting session built on it."""

from core.tracker.shoe import MAX_DECKS, MIN_DECKS, RANKS, ShoeTracker
from core.tracker.state import TrackerState
from core.tracker.session import CountingSession

__all__ = [
    "MAX_DECKS",
    "MIN_DECKS",
    "RANKS",
    "ShoeTracker",
    "TrackerState",
    "CountingSession",
]
