"""Rule-driven bot decisions for 21 Hold'em."""

from dataclasses import dataclass
from random import Random
from typing import Literal, Protocol

from holdem21.game.actions import Action
from holdem21.game.player import BotStyle
from holdem21.game.view import TableQueries
from holdem21.hand import opening_value

WagerPreference = Literal["min", "medium", "max"]

# Style overrides
SHORT_STACK_BLINDS = 15
SHORT_STACK_FRACTION = 0.4
DEEP_STACK_BLINDS = 30
HEAVY_PRESSURE = 0.6


class RandomSource(Protocol):
    """Anything with a ``random()`` returning floats in [0, 1)."""

    def random(self) -> float: ...


@dataclass(frozen=True)
class BotDecision:
    """A chosen action and, for bets and raises, the preset amount."""

    action: Action
    amount: int | None = None


@dataclass(frozen=True)
class Situation:
    """What a bot knows when it has to decide."""

    seat: int
    actions: tuple[Action, ...]
    to_call: int
    total: int
    pressure: float
    opening_value: int
    in_pre_action: bool

    def can(self, action: Action) -> bool:
        return action in self.actions


def pick_fallback_action(actions: tuple[Action, ...], to_call: int) -> BotDecision:
    """Call if owing, else check, else fold, else whatever is first."""
    if to_call > 0 and Action.CALL in actions:
        return BotDecision(Action.CALL)
    if Action.CHECK in actions:
        return BotDecision(Action.CHECK)
    if Action.FOLD in actions:
        return BotDecision(Action.FOLD)
    return BotDecision(actions[0] if actions else Action.CHECK)


class BotStrategy:
    """
    Decision maker for bot seats.

    Reads the table only through ``TableQueries``. Every probabilistic
    branch draws from the injected random source, and only once the
    branch's other conditions hold, so a scripted source gives exact
    decisions in tests.
    """

    def __init__(self, rng: RandomSource | None = None) -> None:
        """
        Initialize the strategy.

        Args:
            rng: Source of uniform draws (a fresh ``Random`` if not provided)
        """
        self._rng = rng or Random()

    def decide(self, table: TableQueries, seat: int) -> BotDecision:
        """Choose an action for ``seat``."""
        actions = tuple(table.get_available_actions(seat))
        if not actions:
            return BotDecision(Action.CHECK)

        to_call = table.get_to_call(seat)
        cards = table.get_private_cards(seat)
        situation = Situation(
            seat=seat,
            actions=actions,
            to_call=to_call,
            total=table.get_player_total(seat),
            pressure=self.pressure(table, to_call),
            opening_value=opening_value(cards),
            in_pre_action=table.round_index == 0 and len(cards) == 1,
        )
        style = self.resolve_style(table, seat, situation.pressure)

        if style is BotStyle.CONSERVATIVE:
            return self._decide_conservative(table, situation)
        if style is BotStyle.HIGH_RISK:
            return self._decide_high_risk(table, situation)
        return self._decide_aggressive(table, situation)

    @staticmethod
    def pressure(table: TableQueries, to_call: int) -> float:
        """Cost of calling relative to the stakes."""
        return to_call / max(table.big_blind_amount, table.pot, 1)

    @staticmethod
    def resolve_style(table: TableQueries, seat: int, pressure: float) -> BotStyle:
        """
        Style actually played this decision.

        Short stacks always gamble; deep stacks facing a big bet tighten up.
        """
        chips = table.get_chips(seat)
        big_blind = table.big_blind_amount
        short_stack = max(big_blind * SHORT_STACK_BLINDS, table.starting_stack * SHORT_STACK_FRACTION)
        if chips <= short_stack:
            return BotStyle.HIGH_RISK
        if pressure > HEAVY_PRESSURE and chips > big_blind * DEEP_STACK_BLINDS:
            return BotStyle.CONSERVATIVE
        return table.get_bot_style(seat) or BotStyle.AGGRESSIVE

    def _chance(self, probability: float) -> bool:
        return self._rng.random() < probability

    @staticmethod
    def _wager(
        table: TableQueries,
        action: Action,
        seat: int,
        preference: WagerPreference = "medium",
    ) -> BotDecision | None:
        options = table.get_wager_options(action, seat)
        if not options:
            return None
        if preference == "min":
            choice = options[0]
        elif preference == "max":
            choice = options[-1]
        else:
            choice = options[min(len(options) - 1, 1)]
        return BotDecision(action, choice.amount)

    def _decide_conservative(self, table: TableQueries, s: Situation) -> BotDecision:
        if s.to_call > 0:
            if s.can(Action.CALL):
                if s.in_pre_action or s.total >= 16 or s.pressure <= 0.28:
                    return BotDecision(Action.CALL)
                if s.total >= 13 and s.pressure <= 0.45:
                    return BotDecision(Action.CALL)
            if s.can(Action.FOLD) and not s.in_pre_action:
                if s.total <= 10 or (s.total <= 12 and s.pressure > 0.55):
                    return BotDecision(Action.FOLD)
            if s.can(Action.CALL):
                return BotDecision(Action.CALL)
            return pick_fallback_action(s.actions, s.to_call)

        if s.can(Action.STAND) and s.total >= 17:
            return BotDecision(Action.STAND)

        if s.can(Action.DOUBLE) and s.opening_value >= 10 and self._chance(0.16):
            return BotDecision(Action.DOUBLE)

        if s.can(Action.BET) and s.total >= 18 and self._chance(0.35):
            wager = self._wager(table, Action.BET, s.seat, "medium" if s.total >= 19 else "min")
            if wager:
                return wager

        return pick_fallback_action(s.actions, s.to_call)

    def _decide_aggressive(self, table: TableQueries, s: Situation) -> BotDecision:
        if s.to_call > 0:
            if (
                s.can(Action.RAISE)
                and s.total >= 15
                and s.pressure < 0.55
                and self._chance(0.42)
            ):
                wager = self._wager(table, Action.RAISE, s.seat, "max" if s.total >= 18 else "medium")
                if wager:
                    return wager
            if s.can(Action.CALL):
                if s.in_pre_action or s.total >= 12 or s.pressure <= 0.62:
                    return BotDecision(Action.CALL)
            if (
                s.can(Action.FOLD)
                and not s.in_pre_action
                and s.total <= 9
                and s.pressure > 0.72
            ):
                return BotDecision(Action.FOLD)
            if s.can(Action.CALL):
                return BotDecision(Action.CALL)
            return pick_fallback_action(s.actions, s.to_call)

        if s.can(Action.STAND) and s.total >= 18:
            return BotDecision(Action.STAND)

        if s.can(Action.DOUBLE) and s.opening_value >= 9 and self._chance(0.24):
            return BotDecision(Action.DOUBLE)

        if s.can(Action.BET) and s.total >= 14 and self._chance(0.7):
            wager = self._wager(table, Action.BET, s.seat, "max" if s.total >= 18 else "medium")
            if wager:
                return wager

        return pick_fallback_action(s.actions, s.to_call)

    def _decide_high_risk(self, table: TableQueries, s: Situation) -> BotDecision:
        if s.to_call > 0:
            if (
                s.can(Action.RAISE)
                and s.total >= 13
                and s.pressure < 0.9
                and self._chance(0.62)
            ):
                wager = self._wager(table, Action.RAISE, s.seat, "max")
                if wager:
                    return wager
            if s.can(Action.CALL):
                if s.in_pre_action or s.total >= 10 or s.pressure < 0.85:
                    return BotDecision(Action.CALL)
            if (
                s.can(Action.FOLD)
                and not s.in_pre_action
                and s.total <= 8
                and s.pressure > 0.9
            ):
                return BotDecision(Action.FOLD)
            if s.can(Action.CALL):
                return BotDecision(Action.CALL)
            return pick_fallback_action(s.actions, s.to_call)

        if s.can(Action.STAND) and s.total >= 18 and self._chance(0.74):
            return BotDecision(Action.STAND)

        if s.can(Action.DOUBLE) and s.opening_value >= 8 and self._chance(0.35):
            return BotDecision(Action.DOUBLE)

        if s.can(Action.BET) and s.total >= 12 and self._chance(0.82):
            wager = self._wager(table, Action.BET, s.seat, "max" if s.total >= 17 else "medium")
            if wager:
                return wager

        return pick_fallback_action(s.actions, s.to_call)
