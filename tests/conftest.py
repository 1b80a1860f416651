"""Pytest fixtures for shoe counter tests."""

import pytest

from core.cards import Card, Rank, Suit
from core.tracker import CountingSession, ShoeTracker


@pytest.fixture
def full_deck():
    """All 52 cards of one deck."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


@pytest.fixture
def tracker():
    """A fresh single-deck shoe."""
    return ShoeTracker(num_decks=1)


@pytest.fixture
def six_deck_tracker():
    """A fresh six-deck shoe."""
    return ShoeTracker(num_decks=6)


@pytest.fixture
def empty_tracker():
    """A single-deck shoe with every card marked."""
    t = ShoeTracker(num_decks=1)
    for rank in range(1, 11):
        while t.decrement(rank):
            pass
    return t


@pytest.fixture
def session():
    """A counting session whose first shoe has been confirmed."""
    s = CountingSession(num_decks=1)
    s.confirm_reset()
    return s


@pytest.fixture
def pending_session():
    """A brand new session still waiting for its first confirmation."""
    return CountingSession(num_decks=2)
