"""Shoe counting engine - 100% UI-agnostic."""

from core.cards import Card, Rank, Suit
from core.tracker import CountingSession, ShoeTracker, TrackerState

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "CountingSession",
    "ShoeTracker",
    "TrackerState",
]
