"""Seat state for a 21 Hold'em table."""

from dataclasses import dataclass, field
from enum import Enum

from holdem21.cards import Card


class BotStyle(Enum):
    """Risk profiles a bot seat can play."""

    CONSERVATIVE = "conservative"
    AGGRESSIVE = "aggressive"
    HIGH_RISK = "high-risk"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SeatConfig:
    """Who sits in a seat when the table is created."""

    name: str
    is_human: bool
    bot_style: BotStyle | None = None


DEFAULT_SEATS: tuple[SeatConfig, ...] = (
    SeatConfig("You", is_human=True),
    SeatConfig("North Bot", is_human=False, bot_style=BotStyle.CONSERVATIVE),
    SeatConfig("East Bot", is_human=False, bot_style=BotStyle.AGGRESSIVE),
)


@dataclass
class Player:
    """A seat at the table. Chips carry over between hands; the rest is per hand."""

    id: int
    name: str
    is_human: bool
    bot_style: BotStyle | None = None
    chips: int = 0
    hand: list[Card] = field(default_factory=list)
    folded: bool = False
    busted: bool = False
    standing: bool = False
    double_down: bool = False
    raise_locked: bool = False
    # Community cards this seat still counts once it folds or stands
    locked_community_count: int | None = None
    round_bet: int = 0
    total_bet: int = 0
    has_acted: bool = False
    last_action: str = "Waiting"

    @property
    def is_contender(self) -> bool:
        """Neither folded nor busted."""
        return not self.folded and not self.busted

    @property
    def can_wager(self) -> bool:
        """A contender with chips behind."""
        return self.is_contender and self.chips > 0

    def reset_for_hand(self) -> None:
        """Clear everything that only lives for one hand."""
        self.hand = []
        self.folded = False
        self.busted = False
        self.standing = False
        self.double_down = False
        self.raise_locked = False
        self.locked_community_count = None
        self.round_bet = 0
        self.total_bet = 0
        self.has_acted = False
        self.last_action = "Waiting"

    @classmethod
    def from_seat(cls, seat_id: int, seat: SeatConfig, chips: int) -> "Player":
        return cls(
            id=seat_id,
            name=seat.name,
            is_human=seat.is_human,
            bot_style=seat.bot_style,
            chips=chips,
        )
