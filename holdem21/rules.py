"""21 Hold'em table rules."""

from dataclasses import dataclass

SMALL_BLIND = 1
BIG_BLIND = 2
STARTING_STACK = 100
MIN_BUY_IN_MULTIPLIER = 10
LOG_LIMIT = 24

ROUND_SEQUENCE: tuple[str, ...] = (
    "Pre-Action",
    "Action",
    "Stage",
    "Show",
    "Caboose",
)


@dataclass(frozen=True)
class TableRules:
    """
    Table configuration.

    Everything the engine needs to size blinds, top up short stacks and
    name the betting rounds.
    """

    small_blind: int = SMALL_BLIND
    big_blind: int = BIG_BLIND
    starting_stack: int = STARTING_STACK

    # Stacks below big_blind * multiplier are topped up at hand start
    min_buy_in_multiplier: int = MIN_BUY_IN_MULTIPLIER

    # Newest-first text log length
    log_limit: int = LOG_LIMIT

    round_sequence: tuple[str, ...] = ROUND_SEQUENCE

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        if self.small_blind < 1:
            raise ValueError("small_blind must be at least 1")
        if self.big_blind <= self.small_blind:
            raise ValueError("big_blind must exceed small_blind")
        if self.starting_stack < 1:
            raise ValueError("starting_stack must be at least 1")
        if self.min_buy_in_multiplier < 1:
            raise ValueError("min_buy_in_multiplier must be at least 1")
        if self.log_limit < 1:
            raise ValueError("log_limit must be at least 1")
        if len(self.round_sequence) < 2:
            raise ValueError("round_sequence needs at least two rounds")

    @property
    def min_buy_in(self) -> int:
        """Minimum stack a player may start a hand with."""
        return self.big_blind * self.min_buy_in_multiplier

    @property
    def final_round_index(self) -> int:
        """Index of the last betting round."""
        return len(self.round_sequence) - 1

    @classmethod
    def low(cls) -> "TableRules":
        """1 / 2 blinds."""
        return cls(small_blind=1, big_blind=2)

    @classmethod
    def mid(cls) -> "TableRules":
        """2 / 4 blinds."""
        return cls(small_blind=2, big_blind=4)

    @classmethod
    def high(cls) -> "TableRules":
        """5 / 10 blinds."""
        return cls(small_blind=5, big_blind=10)


BLIND_PRESETS: dict[str, TableRules] = {
    "low": TableRules.low(),
    "mid": TableRules.mid(),
    "high": TableRules.high(),
}
