"""Player actions, payloads and action results."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Action(Enum):
    """Possible player actions."""

    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    BET = "bet"
    RAISE = "raise"
    STAND = "stand"
    DOUBLE = "double"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: "Action | str") -> "Action | None":
        """Return the matching action, or None for anything unrecognised."""
        if isinstance(value, Action):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


# Actions a standing player may still take
STANDING_ACTIONS = frozenset({Action.FOLD, Action.CHECK, Action.CALL})

# Actions that may be combined with the stand-after flag
WAGER_ACTIONS = frozenset({Action.CALL, Action.BET, Action.RAISE})


class ActionSource(Enum):
    """Who submitted an action."""

    HUMAN = "human"
    BOT = "bot"


# Rejection reasons
HAND_NOT_ACTIVE = "Hand is not active."
NOT_HUMAN_TURN = "Not the human turn."
NOT_BOT_TURN = "Not the bot turn."
ACTION_NOT_ALLOWED = "Action not allowed."
INVALID_BET_AMOUNT = "Invalid bet amount."
DOUBLE_NOT_AVAILABLE = "Double Down is not available."


def coerce_amount(value: Any) -> int:
    """
    Convert a requested chip amount to a non-negative int.

    Anything that is not a finite number becomes 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return max(0, int(number))


@dataclass(frozen=True)
class ActionPayload:
    """Optional parameters of an action."""

    amount: Any = None
    stand_after: bool = False

    @property
    def chips(self) -> int:
        """Requested amount as whole chips."""
        return coerce_amount(self.amount)


@dataclass(frozen=True)
class ActionResult:
    """Outcome of submitting an action. Rejections never change state."""

    ok: bool
    reason: str | None = None

    @classmethod
    def accepted(cls) -> "ActionResult":
        return cls(ok=True)

    @classmethod
    def rejected(cls, reason: str) -> "ActionResult":
        return cls(ok=False, reason=reason)

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True)
class WagerOption:
    """
    A bet or raise preset.

    ``amount`` is what gets submitted (chips beyond the call for a raise);
    ``cost`` is the total the player pays for the action.
    """

    label: str
    amount: int
    cost: int
