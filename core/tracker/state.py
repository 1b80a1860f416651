"""Counting session state enumeration."""

from enum import Enum, auto


class TrackerState(Enum):
    """
    Counting session states.

    Flow: UNINITIALIZED → RESET_PENDING → ACTIVE → RESET_PENDING → ACTIVE ...
    """

    # No shoe built yet
    UNINITIALIZED = auto()

    # Waiting for the user to confirm or cancel a reset
    RESET_PENDING = auto()

    # Shoe built, cards may be marked
    ACTIVE = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()
