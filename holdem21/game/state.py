"""Game state enumeration."""

from enum import Enum, auto


class GameState(Enum):
    """
    Hand state machine states.

    Flow: DEALING → AWAITING_ACTION → ROUND_COMPLETE → DEALING → ... →
    SHOWDOWN → HAND_COMPLETE. Instant wins and eliminations jump straight to
    HAND_COMPLETE.
    """

    # Blinds, private cards or a community card being dealt
    DEALING = auto()

    # A seat owes a decision
    AWAITING_ACTION = auto()

    # Betting for the current round is settled
    ROUND_COMPLETE = auto()

    # Comparing totals
    SHOWDOWN = auto()

    # Pot paid out, ready for the next hand
    HAND_COMPLETE = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()
