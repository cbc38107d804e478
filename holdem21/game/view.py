"""Read-only views of the table for renderers and bots."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from holdem21.cards import Card
from holdem21.game.actions import Action, WagerOption
from holdem21.game.player import BotStyle

if TYPE_CHECKING:
    from holdem21.game.engine import Holdem21Game


@dataclass(frozen=True)
class PlayerView:
    """Snapshot of one seat."""

    id: int
    name: str
    is_human: bool
    bot_style: BotStyle | None
    chips: int
    hand: tuple[Card, ...]
    folded: bool
    busted: bool
    standing: bool
    double_down: bool
    raise_locked: bool
    locked_community_count: int | None
    round_bet: int
    total_bet: int
    total: int
    last_action: str


@dataclass(frozen=True)
class TableSnapshot:
    """
    Everything a renderer may depend on.

    Built from copies only; holding a snapshot never exposes engine state.
    """

    hand_number: int
    round_index: int
    round_name: str
    starting_stack: int
    min_buy_in: int
    small_blind_amount: int
    big_blind_amount: int
    next_small_blind: int
    next_big_blind: int
    dealer_index: int
    small_blind_index: int
    big_blind_index: int
    current_turn_index: int | None
    current_bet: int
    pot: int
    community: tuple[Card, ...]
    hand_complete: bool
    hand_result: str
    players: tuple[PlayerView, ...]
    log: tuple[str, ...]

    @property
    def current_player(self) -> PlayerView | None:
        """The seat that owes a decision, if any."""
        if self.current_turn_index is None:
            return None
        return self.players[self.current_turn_index]


class TableQueries:
    """
    Query-only capability over a game.

    Bots receive this instead of the engine so they can look but never write.
    Seats are addressed by index.
    """

    __slots__ = ("_game",)

    def __init__(self, game: "Holdem21Game") -> None:
        self._game = game

    @property
    def big_blind_amount(self) -> int:
        return self._game.big_blind_amount

    @property
    def pot(self) -> int:
        return self._game.pot

    @property
    def round_index(self) -> int:
        return self._game.round_index

    @property
    def starting_stack(self) -> int:
        return self._game.rules.starting_stack

    @property
    def current_turn_index(self) -> int | None:
        return self._game.current_turn_index

    def get_available_actions(self, seat: int) -> list[Action]:
        return self._game.get_available_actions(self._game.players[seat])

    def get_to_call(self, seat: int) -> int:
        return self._game.get_to_call(self._game.players[seat])

    def get_player_total(self, seat: int) -> int:
        return self._game.get_player_total(self._game.players[seat])

    def get_wager_options(self, action: Action, seat: int) -> list[WagerOption]:
        return self._game.get_wager_options(action, self._game.players[seat])

    def get_chips(self, seat: int) -> int:
        return self._game.players[seat].chips

    def get_private_cards(self, seat: int) -> tuple[Card, ...]:
        return tuple(self._game.players[seat].hand)

    def get_bot_style(self, seat: int) -> BotStyle | None:
        return self._game.players[seat].bot_style
