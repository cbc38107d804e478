"""21 Hold'em game engine with state machine."""

from dataclasses import replace
from random import Random
from typing import Callable, Sequence

from transitions import Machine

from holdem21.cards import Card, Deck
from holdem21.hand import BLACKJACK_TOTAL, best_total, is_blackjack, is_busted
from holdem21.rules import BIG_BLIND, SMALL_BLIND, TableRules
from holdem21.game.actions import (
    ACTION_NOT_ALLOWED,
    DOUBLE_NOT_AVAILABLE,
    HAND_NOT_ACTIVE,
    INVALID_BET_AMOUNT,
    NOT_BOT_TURN,
    NOT_HUMAN_TURN,
    STANDING_ACTIONS,
    WAGER_ACTIONS,
    Action,
    ActionPayload,
    ActionResult,
    ActionSource,
    WagerOption,
    coerce_amount,
)
from holdem21.game.events import EventEmitter, EventType, GameEvent, TableLog
from holdem21.game.player import DEFAULT_SEATS, Player, SeatConfig
from holdem21.game.state import GameState
from holdem21.game.view import PlayerView, TableQueries, TableSnapshot
from holdem21.strategy.bots import BotStrategy

DeckFactory = Callable[[], Deck]

MAX_NAME_LENGTH = 12
DEFAULT_PLAYER_NAME = "PLAYER"


class Holdem21Game:
    """
    21 Hold'em table engine using a state machine.

    Owns every piece of hand and table state. Drivers read through
    ``get_visible_state`` and the query methods and write only through
    ``perform_action``, ``start_new_hand``, ``set_blind_structure`` and
    ``set_player_name``. Rejected actions come back as ``ActionResult``
    values and never change state.
    """

    # State machine states
    STATES = [s.name.lower() for s in GameState]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "begin_hand", "source": "*", "dest": "dealing"},
        {"trigger": "open_betting", "source": "dealing", "dest": "awaiting_action"},
        {
            "trigger": "close_round",
            "source": ["awaiting_action", "dealing"],
            "dest": "round_complete",
        },
        {"trigger": "deal_community", "source": "round_complete", "dest": "dealing"},
        {"trigger": "call_showdown", "source": "round_complete", "dest": "showdown"},
        {"trigger": "settle", "source": "*", "dest": "hand_complete"},
    ]

    def __init__(
        self,
        rules: TableRules | None = None,
        seats: Sequence[SeatConfig] = DEFAULT_SEATS,
        rng: Random | None = None,
        deck_factory: DeckFactory | None = None,
        bot_strategy: BotStrategy | None = None,
        auto_start: bool = True,
    ) -> None:
        """
        Initialize a table.

        Args:
            rules: Blinds, stacks and round names (defaults if not provided)
            seats: Seat line-up, seat 0 first
            rng: Random number generator for reproducible shuffles and bots
            deck_factory: Builds the deck for each hand (shuffled deck by default)
            bot_strategy: Decision maker for bot seats
            auto_start: Deal the first hand immediately
        """
        self.rules = rules or TableRules()
        self._rng = rng or Random()
        self._deck_factory = deck_factory or (lambda: Deck.shuffled(self._rng))
        self.bot_strategy = bot_strategy or BotStrategy(rng=self._rng)
        self.events = EventEmitter()
        self._log = TableLog(self.events, self.rules.log_limit)

        self.players = [
            Player.from_seat(index, seat, self.rules.starting_stack)
            for index, seat in enumerate(seats)
        ]
        self.hand_number = 0
        self.dealer_index = -1
        self.small_blind_index = 0
        self.big_blind_index = 1
        self.round_index = 0
        self.community: list[Card] = []
        self.deck = Deck.from_cards([])
        self.current_bet = 0
        self.pot = 0
        self.current_turn_index: int | None = None
        self.hand_complete = True
        self.hand_result = ""
        self._pending_blinds: tuple[int, int] | None = None

        # Initialize state machine
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="hand_complete",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

        if auto_start:
            self.start_new_hand()

    @property
    def state(self) -> GameState:
        """Get current game state as enum."""
        return GameState[self._machine_state.upper()]  # type: ignore

    @property
    def small_blind_amount(self) -> int:
        return self.rules.small_blind

    @property
    def big_blind_amount(self) -> int:
        return self.rules.big_blind

    @property
    def next_blinds(self) -> tuple[int, int]:
        """Blinds the next hand will post."""
        if self._pending_blinds is not None:
            return self._pending_blinds
        return self.small_blind_amount, self.big_blind_amount

    @property
    def round_name(self) -> str:
        return self.rules.round_sequence[self.round_index]

    @property
    def final_round_index(self) -> int:
        return self.rules.final_round_index

    @property
    def log(self) -> list[str]:
        """Text log of the current hand, newest first."""
        return self._log.lines

    @property
    def current_player(self) -> Player | None:
        """The seat that owes a decision, if any."""
        if self.current_turn_index is None:
            return None
        return self.players[self.current_turn_index]

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    def queries(self) -> TableQueries:
        """Read-only view handed to bot strategies."""
        return TableQueries(self)

    # Table settings

    def set_blind_structure(self, small_blind: object, big_blind: object) -> None:
        """
        Change the blinds; the new level applies from the next hand.

        Missing or zero values fall back to the default blinds and the big
        blind is forced above the small blind. Between hands the level is
        applied at once; during a hand it waits in ``next_blinds``.
        """
        sb = max(1, coerce_amount(small_blind) or SMALL_BLIND)
        bb = max(sb + 1, coerce_amount(big_blind) or BIG_BLIND)
        self._pending_blinds = (sb, bb)
        if self.hand_complete:
            self._apply_pending_blinds()
        self._log_event(
            f"Blind level updated to {sb}/{bb}.",
            EventType.BLINDS_CHANGED,
            small_blind=sb,
            big_blind=bb,
        )

    def set_player_name(self, name: object) -> None:
        """Rename the human seat, keeping printable characters only."""
        text = "".join(ch for ch in str(name or "") if ch.isprintable()).strip()
        clean = text[:MAX_NAME_LENGTH].strip()
        self._human_player().name = clean or DEFAULT_PLAYER_NAME

    def get_min_buy_in(self) -> int:
        return self.rules.min_buy_in

    def _apply_pending_blinds(self) -> None:
        if self._pending_blinds is None:
            return
        sb, bb = self._pending_blinds
        self.rules = replace(self.rules, small_blind=sb, big_blind=bb)
        self._pending_blinds = None

    # Hand lifecycle

    def start_new_hand(self) -> None:
        """Rotate the button, shuffle, post blinds and deal one card each."""
        self.begin_hand()

        self.hand_number += 1
        self.dealer_index = self._next_index(self.dealer_index)
        self.small_blind_index = self._next_index(self.dealer_index)
        self.big_blind_index = self._next_index(self.small_blind_index)
        self.deck = self._deck_factory()
        self.community = []
        self.round_index = 0
        self.current_bet = 0
        self.pot = 0
        self.current_turn_index = None
        self.hand_complete = False
        self.hand_result = ""
        self._log.clear()
        self._apply_pending_blinds()

        min_buy_in = self.get_min_buy_in()
        for player in self.players:
            if player.chips < min_buy_in:
                previous = player.chips
                player.chips = max(self.rules.starting_stack, min_buy_in)
                self.events.emit_new(
                    EventType.PLAYER_TOPPED_UP,
                    seat=player.id,
                    previous=previous,
                    chips=player.chips,
                )
            player.reset_for_hand()

        self.events.emit_new(EventType.DECK_SHUFFLED, cards_remaining=len(self.deck))
        dealer = self.players[self.dealer_index]
        self._log_event(
            f"Hand {self.hand_number} begins. Dealer: {dealer.name}. "
            f"Blinds {self.small_blind_amount}/{self.big_blind_amount}.",
            EventType.HAND_STARTED,
            hand_number=self.hand_number,
            dealer_index=self.dealer_index,
        )
        self._post_blind(self.small_blind_index, self.small_blind_amount, "SB")
        self._post_blind(self.big_blind_index, self.big_blind_amount, "BB")
        self.current_bet = max(player.round_bet for player in self.players)

        deal_index = self._next_index(self.big_blind_index)
        for _ in range(len(self.players)):
            self._deal_private_card(self.players[deal_index])
            deal_index = self._next_index(deal_index)

        self.current_turn_index = self._find_next_player_to_act(
            self._next_index(self.big_blind_index)
        )
        self._log_event(
            f"{self.round_name} round starts.",
            EventType.ROUND_STARTED,
            round_index=self.round_index,
            round_name=self.round_name,
        )

        if self.current_turn_index is None:
            self._finish_round()
        else:
            self.open_betting()

    def _post_blind(self, player_index: int, amount: int, label: str) -> None:
        player = self.players[player_index]
        posted = self._apply_contribution(player, amount)
        player.last_action = f"{label} {posted}"
        self._log_event(
            f"{player.name} posts {label} ({posted}).",
            EventType.BLIND_POSTED,
            seat=player.id,
            blind=label,
            amount=posted,
        )

    # Queries

    def get_cards_for_player(self, player: Player) -> list[Card]:
        """Private cards plus the community cards this seat may count."""
        if player.locked_community_count is None:
            count = 0 if player.folded else len(self.community)
        else:
            count = min(player.locked_community_count, len(self.community))
        return [*player.hand, *self.community[:count]]

    def get_player_total(self, player: Player) -> int:
        return best_total(self.get_cards_for_player(player))

    def get_to_call(self, player: Player) -> int:
        return max(0, self.current_bet - player.round_bet)

    def active_contenders(self) -> list[Player]:
        """Players neither folded nor busted."""
        return [player for player in self.players if player.is_contender]

    def is_round_complete(self) -> bool:
        """
        Check whether the current betting round is settled.

        Settled means at most one contender is left, or every contender with
        chips behind owes nothing and has acted.
        """
        contenders = self.active_contenders()
        if len(contenders) <= 1:
            return True

        for player in contenders:
            if player.chips <= 0:
                continue
            if self.get_to_call(player) > 0 or not player.has_acted:
                return False

        return True

    def get_available_actions(self, player: Player | None = None) -> list[Action]:
        """
        Legal actions for a player (the current actor by default).

        Standing players are limited to fold, check and call.
        """
        if player is None:
            player = self.current_player
        if player is None or self.hand_complete or not player.is_contender:
            return []

        actions: list[Action] = []
        to_call = self.get_to_call(player)

        if len(self.active_contenders()) > 1:
            actions.append(Action.FOLD)

        actions.append(Action.CALL if to_call > 0 else Action.CHECK)

        if player.standing:
            return [action for action in actions if action in STANDING_ACTIONS]

        if self.round_index < self.final_round_index:
            actions.append(Action.STAND)

        if to_call == 0 and player.chips > 0:
            actions.append(Action.BET)

        if to_call > 0 and player.chips > to_call and not player.raise_locked:
            actions.append(Action.RAISE)

        if (
            self.round_index == 0
            and len(player.hand) == 1
            and not player.double_down
            and player.chips > 0
        ):
            actions.append(Action.DOUBLE)

        return actions

    def get_wager_options(
        self,
        action: Action | str,
        player: Player | None = None,
    ) -> list[WagerOption]:
        """
        Min, half-pot and pot presets for a bet or raise.

        Presets are clipped to what the player can afford; duplicates and
        empty amounts are dropped.
        """
        parsed = Action.parse(action)
        if player is None:
            player = self.current_player
        if player is None or player.chips <= 0 or parsed not in (Action.BET, Action.RAISE):
            return []

        big_blind = self.big_blind_amount
        presets = (
            ("Min", big_blind),
            ("1/2 Pot", max(big_blind, (self.pot + 1) // 2)),
            ("Pot", max(big_blind, self.pot)),
        )
        to_call = self.get_to_call(player)

        options: list[WagerOption] = []
        seen: set[int] = set()
        for label, base in presets:
            if parsed is Action.BET:
                amount = min(player.chips, base)
                cost = amount
            else:
                max_raise = player.chips - to_call
                if max_raise <= 0:
                    continue
                amount = min(max_raise, max(big_blind, base))
                cost = to_call + amount

            if amount <= 0 or amount in seen:
                continue
            seen.add(amount)
            options.append(WagerOption(label=label, amount=amount, cost=cost))

        return options

    # Actions

    def perform_action(
        self,
        action: Action | str,
        payload: ActionPayload | None = None,
        source: ActionSource | str = ActionSource.HUMAN,
    ) -> ActionResult:
        """
        Validate and apply an action for the seat whose turn it is.

        Args:
            action: The action to take
            payload: Wager amount and the stand-after flag
            source: Whether a human or a bot submitted the action

        Returns:
            ActionResult; a rejection leaves the table untouched
        """
        payload = payload or ActionPayload()
        if self.hand_complete or self.current_turn_index is None:
            return self._reject(HAND_NOT_ACTIVE)

        player = self.players[self.current_turn_index]
        try:
            source = ActionSource(source)
        except ValueError:
            return self._reject(ACTION_NOT_ALLOWED)
        if source is ActionSource.HUMAN and not player.is_human:
            return self._reject(NOT_HUMAN_TURN)
        if source is ActionSource.BOT and player.is_human:
            return self._reject(NOT_BOT_TURN)

        parsed = Action.parse(action)
        if parsed is None or parsed not in self.get_available_actions(player):
            return self._reject(ACTION_NOT_ALLOWED)

        to_call = self.get_to_call(player)
        acting_index = self.current_turn_index
        stand_after = (
            bool(payload.stand_after)
            and parsed in WAGER_ACTIONS
            and not player.standing
            and self.round_index < self.final_round_index
        )

        handlers = {
            Action.FOLD: self._fold,
            Action.CHECK: self._check,
            Action.CALL: self._call,
            Action.BET: self._bet,
            Action.RAISE: self._raise,
            Action.STAND: self._stand,
            Action.DOUBLE: self._double,
        }
        rejection = handlers[parsed](player, to_call, payload)
        if rejection is not None:
            return self._reject(rejection)

        if stand_after and player.is_contender:
            self._lock_standing(player, after=parsed)

        self._refresh_busts()

        if self._resolve_instant_wins():
            return ActionResult.accepted()
        if self._maybe_end_by_last_player():
            return ActionResult.accepted()

        if self.is_round_complete():
            self._finish_round()
            return ActionResult.accepted()

        self.current_turn_index = self._find_next_player_to_act(
            self._next_index(acting_index)
        )
        if self.current_turn_index is None:
            self._finish_round()

        return ActionResult.accepted()

    def perform_human_action(
        self,
        action: Action | str,
        payload: ActionPayload | None = None,
    ) -> ActionResult:
        """Submit an action on behalf of the human seat."""
        return self.perform_action(action, payload, ActionSource.HUMAN)

    def play_bot_turn(self) -> ActionResult | None:
        """
        Let the bot strategy act for the current seat.

        Returns None when no bot is due to act.
        """
        player = self.current_player
        if self.hand_complete or player is None or player.is_human:
            return None
        decision = self.bot_strategy.decide(self.queries(), player.id)
        return self.perform_action(
            decision.action,
            ActionPayload(amount=decision.amount),
            ActionSource.BOT,
        )

    def play_until_human(self, max_turns: int = 100) -> list[ActionResult]:
        """
        Run bot turns until the human must act or the hand is over.

        Stops early on a rejected bot action.
        """
        results: list[ActionResult] = []
        for _ in range(max_turns):
            result = self.play_bot_turn()
            if result is None:
                break
            results.append(result)
            if not result.ok:
                break
        return results

    def _fold(self, player: Player, to_call: int, payload: ActionPayload) -> str | None:
        player.folded = True
        player.locked_community_count = len(self.community)
        player.has_acted = True
        player.last_action = "Fold"
        self._log_event(f"{player.name} folds.", EventType.PLAYER_FOLD, seat=player.id)
        return None

    def _check(self, player: Player, to_call: int, payload: ActionPayload) -> str | None:
        player.has_acted = True
        player.last_action = "Check"
        self._log_event(f"{player.name} checks.", EventType.PLAYER_CHECK, seat=player.id)
        return None

    def _call(self, player: Player, to_call: int, payload: ActionPayload) -> str | None:
        paid = self._apply_contribution(player, to_call)
        player.has_acted = True
        if paid < to_call:
            player.last_action = f"Call {paid} (all-in)"
        else:
            player.last_action = f"Call {paid}"
        self._log_event(
            f"{player.name} calls {paid}.",
            EventType.PLAYER_CALL,
            seat=player.id,
            amount=paid,
            all_in=player.chips == 0,
        )
        return None

    def _bet(self, player: Player, to_call: int, payload: ActionPayload) -> str | None:
        wager = max(self.big_blind_amount, payload.chips)
        paid = self._apply_contribution(player, wager)
        if paid <= 0:
            return INVALID_BET_AMOUNT
        player.has_acted = True
        player.last_action = f"Bet {paid}"
        self.current_bet = max(self.current_bet, player.round_bet)
        self._reset_round_acted(player.id)
        self._log_event(
            f"{player.name} bets {paid}.",
            EventType.PLAYER_BET,
            seat=player.id,
            amount=paid,
        )
        return None

    def _raise(self, player: Player, to_call: int, payload: ActionPayload) -> str | None:
        raise_by = max(self.big_blind_amount, payload.chips)
        paid = self._apply_contribution(player, to_call + raise_by)
        player.has_acted = True

        if player.round_bet > self.current_bet:
            self.current_bet = player.round_bet
            self._reset_round_acted(player.id)

        # A raise capped at the call amount is reported as a call
        if paid <= to_call:
            player.last_action = f"Call {paid}"
            self._log_event(
                f"{player.name} calls {paid}.",
                EventType.PLAYER_CALL,
                seat=player.id,
                amount=paid,
                all_in=player.chips == 0,
            )
        else:
            by_amount = paid - to_call
            player.last_action = f"Raise {by_amount}"
            self._log_event(
                f"{player.name} raises by {by_amount}.",
                EventType.PLAYER_RAISE,
                seat=player.id,
                amount=by_amount,
                cost=paid,
            )
        return None

    def _stand(self, player: Player, to_call: int, payload: ActionPayload) -> str | None:
        player.has_acted = True
        self._lock_standing(player)
        return None

    def _double(self, player: Player, to_call: int, payload: ActionPayload) -> str | None:
        stake = max(1, self.pot)
        paid = self._apply_contribution(player, stake)
        if paid <= 0:
            return DOUBLE_NOT_AVAILABLE
        player.double_down = True
        player.raise_locked = True
        player.standing = True
        player.locked_community_count = 0
        player.has_acted = True
        if player.round_bet > self.current_bet:
            self.current_bet = player.round_bet
            self._reset_round_acted(player.id)

        drawn = self._deal_private_card(player)
        player.last_action = f"Double {paid}"
        drawn_name = drawn.display_name if drawn else "a card"
        self._log_event(
            f"{player.name} Double Downs for {paid} and draws {drawn_name}.",
            EventType.PLAYER_DOUBLE,
            seat=player.id,
            amount=paid,
            card=drawn.id if drawn else None,
        )
        return None

    def _lock_standing(self, player: Player, after: Action | None = None) -> None:
        if player.standing:
            return
        player.standing = True
        player.locked_community_count = len(self.community)
        total = self.get_player_total(player)
        if after is not None:
            player.last_action = f"{player.last_action} + Stand"
            message = f"{player.name} stands after {after} and locks {total}."
        else:
            player.last_action = f"Stand ({total})"
            message = f"{player.name} stands on {total}."
        self._log_event(message, EventType.PLAYER_STAND, seat=player.id, total=total)

    def _reject(self, reason: str) -> ActionResult:
        self.events.emit_new(EventType.INVALID_ACTION, message=reason)
        return ActionResult.rejected(reason)

    # Betting bookkeeping

    def _apply_contribution(self, player: Player, raw_amount: object) -> int:
        """Move chips from a player into the pot, capped at the stack."""
        amount = coerce_amount(raw_amount)
        paid = min(player.chips, amount)
        if paid <= 0:
            return 0
        player.chips -= paid
        player.round_bet += paid
        player.total_bet += paid
        self.pot += paid
        return paid

    def _reset_round_acted(self, exempt_player_id: int) -> None:
        """Reopen the betting for everyone but the player who raised it."""
        for player in self.players:
            if player.id == exempt_player_id or not player.can_wager:
                continue
            player.has_acted = False

    def _player_needs_action(self, player: Player) -> bool:
        if not player.can_wager:
            return False
        if self.get_to_call(player) > 0:
            return True
        return not player.has_acted

    def _find_next_player_to_act(self, start_index: int) -> int | None:
        index = start_index
        for _ in range(len(self.players)):
            if self._player_needs_action(self.players[index]):
                return index
            index = self._next_index(index)
        return None

    # Hand resolution

    def _mark_bust(self, player: Player) -> bool:
        if not player.is_contender:
            return False
        cards = self.get_cards_for_player(player)
        if is_busted(cards):
            total = best_total(cards)
            player.busted = True
            player.last_action = f"Bust ({total})"
            self._log_event(
                f"{player.name} busts with {total}.",
                EventType.PLAYER_BUSTS,
                seat=player.id,
                total=total,
            )
            return True
        return False

    def _refresh_busts(self) -> bool:
        changed = False
        for player in self.players:
            if self._mark_bust(player):
                changed = True
        return changed

    def _resolve_instant_wins(self) -> bool:
        """Pay out a round-0 natural or a doubled 21 immediately."""
        if self.round_index != 0:
            return False

        winners = []
        for player in self.active_contenders():
            cards = self.get_cards_for_player(player)
            if len(cards) != 2:
                continue
            if player.double_down and best_total(cards) == BLACKJACK_TOTAL:
                winners.append(player)
            elif is_blackjack(cards):
                winners.append(player)

        if not winners:
            return False

        if len(winners) == 1:
            summary = f"{winners[0].name} hits instant 21."
        else:
            summary = "Multiple instant 21 hands split the pot."
        self.events.emit_new(
            EventType.INSTANT_WIN,
            winners=[player.id for player in winners],
        )
        self.payout_winners(winners, summary)
        return True

    def _maybe_end_by_last_player(self) -> bool:
        contenders = self.active_contenders()
        if len(contenders) == 1:
            self.payout_winners(contenders, f"{contenders[0].name} wins by elimination.")
            return True
        if not contenders:
            self.payout_winners([], "All players busted. Pot has no winner.")
            return True
        return False

    def _all_active_players_standing(self) -> bool:
        contenders = self.active_contenders()
        if not contenders:
            return False
        return all(player.standing for player in contenders)

    def _finish_round(self) -> None:
        """
        Close the betting round and move the hand forward.

        Rounds nobody can bet in are skipped without waiting for input, so
        one call can run through every remaining round to the showdown.
        """
        for _ in range(len(self.rules.round_sequence)):
            if self.hand_complete:
                return
            self.close_round()

            if self._maybe_end_by_last_player():
                return

            if self._all_active_players_standing():
                self._log_event(
                    "All remaining players are standing. Skipping to showdown.",
                    EventType.ROUND_SKIPPED,
                    round_index=self.round_index,
                )
                self._go_to_showdown()
                return

            if self.round_index >= self.final_round_index:
                self._go_to_showdown()
                return

            self.deal_community()
            card = self._draw_card()
            if card is None:
                # Deck ran dry: no later round can open
                self.close_round()
                self._go_to_showdown()
                return

            self.community.append(card)
            self.round_index += 1
            self._log_event(
                f"{self.round_name} card: {card.display_name}.",
                EventType.COMMUNITY_DEALT,
                card=card.id,
                round_index=self.round_index,
            )

            self._refresh_busts()
            if self._maybe_end_by_last_player():
                return

            for player in self.players:
                player.round_bet = 0
                if player.is_contender:
                    player.has_acted = False
            self.current_bet = 0

            self.current_turn_index = self._find_next_player_to_act(
                self._next_index(self.dealer_index)
            )
            if self.current_turn_index is not None:
                self._log_event(
                    f"{self.round_name} betting begins.",
                    EventType.ROUND_STARTED,
                    round_index=self.round_index,
                    round_name=self.round_name,
                )
                self.open_betting()
                return

            self._log_event(
                "No betting decisions available. Advancing.",
                EventType.ROUND_SKIPPED,
                round_index=self.round_index,
            )

        # Loop bound exhausted
        if not self.hand_complete:
            self.close_round()
            self._go_to_showdown()

    def _go_to_showdown(self) -> None:
        self.call_showdown()
        totals = {player.id: self.get_player_total(player) for player in self.active_contenders()}
        self.events.emit_new(EventType.SHOWDOWN, totals=totals)

        finalists = [
            player for player in self.active_contenders()
            if totals[player.id] <= BLACKJACK_TOTAL
        ]
        if not finalists:
            self.payout_winners([], "Showdown: all remaining players are bust.")
            return

        best = max(totals[player.id] for player in finalists)
        winners = [player for player in finalists if totals[player.id] == best]
        if len(winners) == 1:
            result_text = f"{winners[0].name} wins showdown with {best}."
        else:
            result_text = f"Split pot with {best}."
        self.payout_winners(winners, result_text)

    def payout_winners(self, winners: Sequence[Player], reason: str) -> None:
        """
        Split the pot between ``winners`` and end the hand.

        Odd chips go one at a time to the winners in the order given. With no
        winners the hand still ends and the pot is not paid to anyone.
        """
        if self.hand_complete:
            return

        if winners:
            split, remainder = divmod(self.pot, len(winners))
            for player in winners:
                player.chips += split
                player.last_action = "Winner"
            pointer = 0
            while remainder > 0:
                winners[pointer % len(winners)].chips += 1
                pointer += 1
                remainder -= 1

        self.hand_complete = True
        self.hand_result = reason
        self.current_turn_index = None
        self.current_bet = 0
        self.settle()
        self._log_event(
            reason,
            EventType.PLAYER_WINS if winners else EventType.NO_WINNER,
            winners=[player.id for player in winners],
            pot=self.pot,
        )
        self.events.emit_new(
            EventType.HAND_ENDED,
            hand_number=self.hand_number,
            result=reason,
        )

    # Snapshot

    def get_visible_state(self) -> TableSnapshot:
        """Immutable copy of everything a renderer needs."""
        return TableSnapshot(
            hand_number=self.hand_number,
            round_index=self.round_index,
            round_name=self.round_name,
            starting_stack=self.rules.starting_stack,
            min_buy_in=self.get_min_buy_in(),
            small_blind_amount=self.small_blind_amount,
            big_blind_amount=self.big_blind_amount,
            next_small_blind=self.next_blinds[0],
            next_big_blind=self.next_blinds[1],
            dealer_index=self.dealer_index,
            small_blind_index=self.small_blind_index,
            big_blind_index=self.big_blind_index,
            current_turn_index=self.current_turn_index,
            current_bet=self.current_bet,
            pot=self.pot,
            community=tuple(self.community),
            hand_complete=self.hand_complete,
            hand_result=self.hand_result,
            players=tuple(self._player_view(player) for player in self.players),
            log=tuple(self.log),
        )

    def _player_view(self, player: Player) -> PlayerView:
        return PlayerView(
            id=player.id,
            name=player.name,
            is_human=player.is_human,
            bot_style=player.bot_style,
            chips=player.chips,
            hand=tuple(player.hand),
            folded=player.folded,
            busted=player.busted,
            standing=player.standing,
            double_down=player.double_down,
            raise_locked=player.raise_locked,
            locked_community_count=player.locked_community_count,
            round_bet=player.round_bet,
            total_bet=player.total_bet,
            total=self.get_player_total(player),
            last_action=player.last_action,
        )

    # Helpers

    def _next_index(self, index: int) -> int:
        return (index + 1) % len(self.players)

    def _human_player(self) -> Player:
        for player in self.players:
            if player.is_human:
                return player
        return self.players[0]

    def _draw_card(self) -> Card | None:
        try:
            return self.deck.draw()
        except IndexError:
            return None

    def _deal_private_card(self, player: Player) -> Card | None:
        card = self._draw_card()
        if card is not None:
            player.hand.append(card)
        return card

    def _log_event(self, message: str, event_type: EventType, **data: object) -> None:
        self._log.record(message, event_type, **data)
