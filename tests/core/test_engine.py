"""Tests for the 21 Hold'em engine."""

import pytest
from hypothesis import given, settings, strategies as st
from random import Random
from transitions import MachineError

from holdem21.cards import Card
from holdem21.game import (
    Action,
    ActionPayload,
    ActionSource,
    EventType,
    GameState,
    Holdem21Game,
)
from holdem21.game.actions import (
    ACTION_NOT_ALLOWED,
    HAND_NOT_ACTIVE,
    NOT_BOT_TURN,
    NOT_HUMAN_TURN,
    STANDING_ACTIONS,
)
from holdem21.rules import TableRules

BOT = ActionSource.BOT


def chips_in_play(game: Holdem21Game) -> int:
    return sum(p.chips for p in game.players) + game.pot


class TestHandStart:
    """Tests for dealing a new hand."""

    def test_first_hand_layout(self, quiet_game):
        game = quiet_game
        assert game.hand_number == 1
        assert game.dealer_index == 0
        assert game.small_blind_index == 1
        assert game.big_blind_index == 2
        assert game.pot == 3
        assert game.current_bet == 2
        assert [p.chips for p in game.players] == [100, 99, 98]
        assert all(len(p.hand) == 1 for p in game.players)
        assert game.current_turn_index == 0
        assert game.state == GameState.AWAITING_ACTION

    def test_private_cards_dealt_after_big_blind(self, quiet_game):
        hands = [p.hand[0] for p in quiet_game.players]
        assert hands == [Card.from_string(c) for c in ("5S", "6H", "4D")]

    def test_log_is_newest_first(self, quiet_game):
        assert quiet_game.log[0] == "Pre-Action round starts."
        assert quiet_game.log[-1] == "Hand 1 begins. Dealer: You. Blinds 1/2."
        assert "North Bot posts SB (1)." in quiet_game.log
        assert "East Bot posts BB (2)." in quiet_game.log

    def test_button_rotates(self, quiet_game):
        quiet_game.start_new_hand()
        assert quiet_game.hand_number == 2
        assert quiet_game.dealer_index == 1
        assert quiet_game.small_blind_index == 2
        assert quiet_game.big_blind_index == 0
        assert quiet_game.current_turn_index == 1

    def test_short_stack_topped_up(self, quiet_game):
        topped = []
        quiet_game.subscribe(topped.append, EventType.PLAYER_TOPPED_UP)
        quiet_game.players[0].chips = 5

        quiet_game.start_new_hand()

        # Seat 0 is the big blind in hand two
        assert quiet_game.players[0].chips == 100 - 2
        assert len(topped) == 1
        assert topped[0].data["previous"] == 5

    def test_top_up_respects_min_buy_in(self, make_game):
        rules = TableRules(small_blind=5, big_blind=10, starting_stack=50)
        game = make_game("5S", "6H", "4D", rules=rules)
        # Stacks start at the configured stack, then top up to 10 big blinds
        assert game.get_min_buy_in() == 100
        assert game.players[0].chips == 100

    def test_no_auto_start(self):
        game = Holdem21Game(rng=Random(1), auto_start=False)
        assert game.hand_complete
        assert game.hand_number == 0
        assert game.state == GameState.HAND_COMPLETE


class TestEndToEnd:
    """A full first betting round."""

    def test_first_round_closes_and_deals_community(self, quiet_game):
        game = quiet_game

        assert game.perform_human_action(Action.CALL).ok
        assert game.get_visible_state().pot == 5
        assert game.current_turn_index == 1

        # The small blind still owes one chip
        result = game.perform_action(Action.CHECK, source=BOT)
        assert not result.ok
        assert result.reason == ACTION_NOT_ALLOWED

        assert game.perform_action(Action.CALL, source=BOT).ok
        assert game.current_turn_index == 2
        assert game.perform_action(Action.CHECK, source=BOT).ok

        state = game.get_visible_state()
        assert state.pot == 6
        assert len(state.community) == 1
        assert state.round_index == 1
        assert state.round_name == "Action"
        assert state.current_bet == 0
        assert all(p.round_bet == 0 for p in state.players)
        assert state.current_turn_index == 1
        assert game.state == GameState.AWAITING_ACTION
        assert game.log[0] == "Action betting begins."
        assert game.log[1] == "Action card: 2 of Clubs."

    def test_totals_include_community(self, quiet_game):
        game = quiet_game
        game.perform_human_action(Action.CALL)
        game.perform_action(Action.CALL, source=BOT)
        game.perform_action(Action.CHECK, source=BOT)

        assert [game.get_player_total(p) for p in game.players] == [7, 8, 6]


class TestConservation:
    """Chips are never created or destroyed mid-hand."""

    def test_pot_matches_contributions(self, quiet_game):
        game = quiet_game
        start = chips_in_play(game)
        game.perform_human_action(Action.RAISE, ActionPayload(amount=6))
        game.perform_action(Action.CALL, source=BOT)
        game.perform_action(Action.CALL, source=BOT)

        assert chips_in_play(game) == start
        assert game.pot == sum(p.total_bet for p in game.players)

    @settings(max_examples=25, deadline=None)
    @given(st.integers(min_value=0, max_value=2**32 - 1))
    def test_random_play(self, seed):
        """Random legal play keeps every table invariant."""
        rng = Random(seed)
        game = Holdem21Game(rng=Random(seed))

        for _ in range(6):
            start = chips_in_play(game)
            guard = 0
            while not game.hand_complete and guard < 200:
                guard += 1
                game.play_until_human()
                if game.hand_complete:
                    break

                actions = game.get_available_actions()
                assert actions
                action = rng.choice(actions)
                options = game.get_wager_options(action)
                amount = rng.choice(options).amount if options else None
                result = game.perform_human_action(
                    action, ActionPayload(amount=amount, stand_after=rng.random() < 0.3)
                )
                assert result.ok

                if not game.hand_complete:
                    assert chips_in_play(game) == start
                    assert game.pot == sum(p.total_bet for p in game.players)
                    assert game.current_turn_index is not None
                    assert not game.is_round_complete()

            assert game.hand_complete
            assert game.state == GameState.HAND_COMPLETE
            assert game.current_turn_index is None
            game.start_new_hand()


class TestAvailableActions:
    """Tests for action eligibility."""

    def test_opening_actions(self, quiet_game):
        assert quiet_game.get_available_actions() == [
            Action.FOLD,
            Action.CALL,
            Action.STAND,
            Action.RAISE,
            Action.DOUBLE,
        ]

    def test_folded_player_has_no_actions(self, quiet_game):
        human = quiet_game.players[0]
        quiet_game.perform_human_action(Action.FOLD)
        assert human.folded
        assert quiet_game.get_available_actions(human) == []
        assert quiet_game.get_cards_for_player(human) == human.hand

    def test_busted_player_has_no_actions(self, quiet_game):
        human = quiet_game.players[0]
        human.busted = True
        assert quiet_game.get_available_actions(human) == []

    def test_standing_player_limited(self, quiet_game):
        game = quiet_game
        human = game.players[0]
        game.perform_human_action(Action.STAND)
        assert human.standing
        assert human.locked_community_count == 0
        assert game.log[0] == "You stands on 5."

        game.perform_action(Action.CALL, source=BOT)
        game.perform_action(Action.CHECK, source=BOT)

        # Standing does not settle the blind that is still owed
        assert game.current_turn_index == 0
        actions = game.get_available_actions(human)
        assert set(actions) <= STANDING_ACTIONS
        assert actions == [Action.FOLD, Action.CALL]

    def test_standing_player_keeps_locked_total(self, quiet_game):
        game = quiet_game
        game.perform_human_action(Action.CALL, ActionPayload(stand_after=True))
        assert game.log[0] == "You stands after call and locks 5."
        game.perform_action(Action.CALL, source=BOT)
        game.perform_action(Action.CHECK, source=BOT)

        assert len(game.community) == 1
        assert game.get_player_total(game.players[0]) == 5

    def test_bet_only_when_nothing_owed(self, quiet_game):
        game = quiet_game
        game.perform_human_action(Action.CALL)
        game.perform_action(Action.CALL, source=BOT)
        game.perform_action(Action.CHECK, source=BOT)

        actions = game.get_available_actions()
        assert Action.BET in actions
        assert Action.CHECK in actions
        assert Action.RAISE not in actions
        # Double Down is a first-round play only
        assert Action.DOUBLE not in actions

    def test_no_stand_in_final_round(self, make_game):
        game = make_game("5S", "6H", "4D", "2C", "3S", "2H", "3D")
        game.perform_human_action(Action.CALL)
        game.perform_action(Action.CALL, source=BOT)
        game.perform_action(Action.CHECK, source=BOT)
        for _ in range(9):
            source = ActionSource.HUMAN if game.current_player.is_human else BOT
            game.perform_action(Action.CHECK, source=source)

        assert game.round_index == game.final_round_index
        assert Action.STAND not in game.get_available_actions()

    def test_fold_allowed_heads_up(self, quiet_game):
        game = quiet_game
        game.perform_human_action(Action.FOLD)
        assert Action.FOLD in game.get_available_actions()


class TestWagerOptions:
    """Tests for bet and raise presets."""

    def test_raise_presets_deduplicated(self, quiet_game):
        options = quiet_game.get_wager_options(Action.RAISE)
        assert [(o.label, o.amount, o.cost) for o in options] == [
            ("Min", 2, 4),
            ("Pot", 3, 5),
        ]

    def test_bet_presets(self, quiet_game):
        game = quiet_game
        game.perform_human_action(Action.CALL)
        game.perform_action(Action.CALL, source=BOT)
        game.perform_action(Action.CHECK, source=BOT)

        options = game.get_wager_options(Action.BET)
        assert [(o.label, o.amount) for o in options] == [
            ("Min", 2),
            ("1/2 Pot", 3),
            ("Pot", 6),
        ]

    def test_presets_clipped_to_stack(self, quiet_game):
        quiet_game.players[0].chips = 4
        options = quiet_game.get_wager_options(Action.RAISE)
        assert [(o.amount, o.cost) for o in options] == [(2, 4)]

    def test_no_presets_for_other_actions(self, quiet_game):
        assert quiet_game.get_wager_options(Action.CALL) == []
        assert quiet_game.get_wager_options("nonsense") == []


class TestBetting:
    """Tests for bets and raises."""

    def test_raise_reopens_betting(self, quiet_game):
        game = quiet_game
        game.perform_human_action(Action.RAISE, ActionPayload(amount=4))
        assert game.current_bet == 6
        assert game.players[0].last_action == "Raise 4"
        assert game.log[0] == "You raises by 4."
        assert game.get_to_call(game.players[1]) == 5

    def test_raise_below_big_blind_uses_big_blind(self, quiet_game):
        quiet_game.perform_human_action(Action.RAISE, ActionPayload(amount=0))
        assert quiet_game.current_bet == 4

    def test_raise_capped_at_stack(self, quiet_game):
        game = quiet_game
        game.perform_human_action(Action.RAISE, ActionPayload(amount=90))
        # Seat 1 has 99 chips and owes 91, so it can raise by at most 8
        game.perform_action(Action.RAISE, ActionPayload(amount=50), source=BOT)
        assert game.players[1].chips == 0
        assert game.players[1].last_action == "Raise 8"
        assert game.current_bet == 100

    def test_bad_amount_is_coerced(self, quiet_game):
        game = quiet_game
        game.perform_human_action(Action.RAISE, ActionPayload(amount=float("nan")))
        assert game.current_bet == 4

    def test_call_all_in(self, quiet_game):
        game = quiet_game
        game.perform_human_action(Action.RAISE, ActionPayload(amount=20))
        game.players[1].chips = 3
        game.perform_action(Action.CALL, source=BOT)
        assert game.players[1].chips == 0
        assert game.players[1].last_action == "Call 3 (all-in)"


class TestRejections:
    """Rejected actions never change state."""

    def test_bot_cannot_act_for_human(self, quiet_game):
        before = quiet_game.get_visible_state()
        result = quiet_game.perform_action(Action.CALL, source=BOT)
        assert result.reason == NOT_BOT_TURN
        assert quiet_game.get_visible_state() == before

    def test_human_cannot_act_for_bot(self, quiet_game):
        quiet_game.perform_human_action(Action.CALL)
        before = quiet_game.get_visible_state()
        result = quiet_game.perform_human_action(Action.CALL)
        assert result.reason == NOT_HUMAN_TURN
        assert quiet_game.get_visible_state() == before

    @pytest.mark.parametrize("action", ["hit", "check", "bet", None])
    def test_unavailable_action(self, quiet_game, action):
        before = quiet_game.get_visible_state()
        result = quiet_game.perform_human_action(action)
        assert not result
        assert result.reason == ACTION_NOT_ALLOWED
        assert quiet_game.get_visible_state() == before

    def test_hand_not_active(self, quiet_game):
        quiet_game.perform_human_action(Action.FOLD)
        quiet_game.perform_action(Action.FOLD, source=BOT)
        assert quiet_game.hand_complete
        result = quiet_game.perform_human_action(Action.CHECK)
        assert result.reason == HAND_NOT_ACTIVE

    def test_unknown_source(self, quiet_game):
        assert quiet_game.perform_action(Action.CALL, source="robot").reason == ACTION_NOT_ALLOWED

    def test_rejection_emits_event(self, quiet_game):
        seen = []
        quiet_game.subscribe(seen.append, EventType.INVALID_ACTION)
        quiet_game.perform_human_action("hit")
        assert seen[0].data["message"] == ACTION_NOT_ALLOWED


class TestHandEnd:
    """Tests for payouts and the ways a hand can end."""

    def test_payout_split_remainder(self, quiet_game):
        game = quiet_game
        p0, p1, p2 = game.players
        before = [p.chips for p in game.players]
        game.pot = 10

        game.payout_winners([p0, p1, p2], "Split pot with 10.")

        assert [p.chips - b for p, b in zip(game.players, before)] == [4, 3, 3]
        assert game.hand_complete
        assert game.hand_result == "Split pot with 10."
        assert game.state == GameState.HAND_COMPLETE

    def test_remainder_follows_declared_order(self, quiet_game):
        game = quiet_game
        p0, p1, p2 = game.players
        before = [p.chips for p in game.players]
        game.pot = 10

        game.payout_winners([p2, p0, p1], "Split pot with 10.")

        assert [p.chips - b for p, b in zip(game.players, before)] == [3, 3, 4]

    def test_payout_only_once(self, quiet_game):
        game = quiet_game
        human = game.players[0]
        game.payout_winners([human], "first")
        chips = human.chips
        game.payout_winners([human], "second")
        assert human.chips == chips
        assert game.hand_result == "first"

    def test_win_by_elimination(self, quiet_game):
        game = quiet_game
        game.perform_human_action(Action.FOLD)
        game.perform_action(Action.FOLD, source=BOT)

        assert game.hand_complete
        assert game.hand_result == "East Bot wins by elimination."
        assert game.players[2].chips == 98 + 3
        assert game.players[2].last_action == "Winner"

    def test_no_winner_keeps_pot_out_of_play(self, quiet_game):
        game = quiet_game
        for player in game.players:
            player.busted = True
        game.payout_winners([], "All players busted. Pot has no winner.")

        assert [p.chips for p in game.players] == [100, 99, 98]
        assert game.pot == 3
        assert game.hand_complete

    def test_double_down_instant_win(self, make_game):
        game = make_game("AS", "6H", "4D", "KH")
        human = game.players[0]

        assert game.perform_human_action(Action.DOUBLE).ok

        assert human.double_down
        assert human.standing
        assert len(human.hand) == 2
        assert game.hand_complete
        assert game.hand_result == "You hits instant 21."
        # Doubled for the pot of 3, then won the pot of 6
        assert human.chips == 100 - 3 + 6
        assert game.community == []

    def test_double_down_without_21_keeps_playing(self, make_game):
        game = make_game("5S", "6H", "4D", "9H")
        human = game.players[0]

        game.perform_human_action(Action.DOUBLE)

        assert not game.hand_complete
        assert human.raise_locked
        assert human.locked_community_count == 0
        assert game.get_player_total(human) == 14
        assert game.current_bet == 3
        assert game.current_turn_index == 1
        assert game.log[0] == "You Double Downs for 3 and draws 9 of Hearts."

    def test_everyone_standing_skips_to_showdown(self, quiet_game):
        game = quiet_game
        game.perform_human_action(Action.CALL, ActionPayload(stand_after=True))
        game.perform_action(Action.CALL, ActionPayload(stand_after=True), source=BOT)
        game.perform_action(Action.STAND, source=BOT)

        assert game.hand_complete
        assert game.community == []
        assert "All remaining players are standing. Skipping to showdown." in game.log
        assert game.hand_result == "North Bot wins showdown with 6."
        assert game.players[1].chips == 98 + 6

    def test_empty_deck_goes_to_showdown(self, make_game):
        # Only the private cards: nothing left for the community
        game = make_game("5S", "6H", "4D")
        game.perform_human_action(Action.CALL)
        game.perform_action(Action.CALL, source=BOT)
        game.perform_action(Action.CHECK, source=BOT)

        assert game.hand_complete
        assert game.state == GameState.HAND_COMPLETE
        assert game.community == []
        assert game.round_index == 0
        assert game.hand_result == "North Bot wins showdown with 6."
        assert [p.chips for p in game.players] == [98, 104, 98]

    def test_all_in_runs_every_round(self, make_game):
        rules = TableRules(starting_stack=20)
        game = make_game("5S", "6H", "4D", "2C", "3S", "2H", "3D", rules=rules)
        skipped = []
        game.subscribe(skipped.append, EventType.ROUND_SKIPPED)

        game.perform_human_action(Action.RAISE, ActionPayload(amount=18))
        game.perform_action(Action.CALL, source=BOT)
        game.perform_action(Action.CALL, source=BOT)

        assert game.hand_complete
        assert len(game.community) == 4
        assert len(skipped) == 4
        assert game.hand_result == "North Bot wins showdown with 16."
        assert [p.chips for p in game.players] == [0, 60, 0]

    def test_bust_on_community_card(self, make_game):
        game = make_game("KS", "6H", "4D", "5C", "QH", "2C")
        game.perform_human_action(Action.CALL)
        game.perform_action(Action.CALL, source=BOT)
        game.perform_action(Action.CHECK, source=BOT)

        # Action round: seat 1, seat 2, then the human
        game.perform_action(Action.CHECK, source=BOT)
        game.perform_action(Action.CHECK, source=BOT)
        game.perform_human_action(Action.CHECK)

        human = game.players[0]
        assert human.busted
        assert human.last_action == "Bust (25)"
        assert "You busts with 25." in game.log
        assert game.get_available_actions(human) == []
        assert not game.hand_complete
        assert game.current_turn_index == 1

    def test_split_pot_showdown(self, make_game):
        game = make_game("5S", "5H", "4D")
        game.perform_human_action(Action.CALL, ActionPayload(stand_after=True))
        game.perform_action(Action.CALL, ActionPayload(stand_after=True), source=BOT)
        game.perform_action(Action.FOLD, source=BOT)

        assert game.hand_result == "Split pot with 5."
        assert [p.chips for p in game.players] == [101, 101, 98]


class TestSettings:
    """Tests for blinds and names."""

    def test_blind_change_applies_next_hand(self, quiet_game):
        quiet_game.set_blind_structure(5, 10)
        assert quiet_game.pot == 3
        assert quiet_game.log[0] == "Blind level updated to 5/10."
        assert (quiet_game.small_blind_amount, quiet_game.big_blind_amount) == (1, 2)
        assert quiet_game.next_blinds == (5, 10)

        quiet_game.start_new_hand()
        assert quiet_game.pot == 15
        assert quiet_game.current_bet == 10
        assert (quiet_game.small_blind_amount, quiet_game.big_blind_amount) == (5, 10)

    def test_blind_change_keeps_current_hand_wagers(self, quiet_game):
        game = quiet_game
        before = [(o.label, o.amount) for o in game.get_wager_options(Action.RAISE)]
        assert before == [("Min", 2), ("Pot", 3)]

        game.set_blind_structure(5, 10)
        after = [(o.label, o.amount) for o in game.get_wager_options(Action.RAISE)]
        assert after == before
        assert game.get_visible_state().big_blind_amount == 2
        assert game.get_visible_state().next_big_blind == 10

        game.perform_human_action(Action.RAISE, ActionPayload(amount=0))
        assert game.current_bet == 4

    def test_blind_change_between_hands_applies_at_once(self, make_game):
        game = make_game("5S", "6H", "4D", "2C", "3S", "2H", "3D")
        game.perform_human_action(Action.FOLD)
        game.perform_action(Action.FOLD, source=BOT)
        assert game.hand_complete

        game.set_blind_structure(2, 4)
        assert (game.small_blind_amount, game.big_blind_amount) == (2, 4)
        assert game.get_min_buy_in() == 40

    @pytest.mark.parametrize(
        "small, big, expected",
        [
            (0, None, (1, 2)),
            ("x", "y", (1, 2)),
            (5, 3, (5, 6)),
            (2.7, 4.9, (2, 4)),
        ],
    )
    def test_blind_sanitizing(self, quiet_game, small, big, expected):
        quiet_game.set_blind_structure(small, big)
        assert quiet_game.next_blinds == expected

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("  Alexandra the Great  ", "Alexandra th"),
            ("Sam\x00\x07", "Sam"),
            ("\x00\x01", "PLAYER"),
            (None, "PLAYER"),
            ("   ", "PLAYER"),
        ],
    )
    def test_player_name(self, quiet_game, name, expected):
        quiet_game.set_player_name(name)
        assert quiet_game.players[0].name == expected

    def test_log_bounded(self, make_game):
        game = make_game("5S", "6H", "4D", rules=TableRules(log_limit=3))
        assert len(game.log) == 3
        game.set_blind_structure(2, 4)
        assert len(game.log) == 3
        assert game.log[0] == "Blind level updated to 2/4."


class TestSnapshot:
    """Tests for read-only state."""

    def test_snapshot_is_detached(self, quiet_game):
        snapshot = quiet_game.get_visible_state()
        quiet_game.perform_human_action(Action.CALL)
        assert snapshot.pot == 3
        assert snapshot.players[0].chips == 100
        assert snapshot.current_player.name == "You"

    def test_snapshot_is_frozen(self, quiet_game):
        snapshot = quiet_game.get_visible_state()
        with pytest.raises(AttributeError):
            snapshot.pot = 50
        assert isinstance(snapshot.players[0].hand, tuple)

    def test_queries_cannot_act(self, quiet_game):
        queries = quiet_game.queries()
        assert not hasattr(queries, "perform_action")
        assert queries.get_to_call(1) == 1
        assert queries.get_chips(2) == 98
        assert queries.get_private_cards(0) == (Card.from_string("5S"),)


class TestStateMachine:
    def test_hand_complete_after_payout(self, quiet_game):
        quiet_game.perform_human_action(Action.FOLD)
        quiet_game.perform_action(Action.FOLD, source=BOT)
        assert quiet_game.state == GameState.HAND_COMPLETE

    def test_new_hand_from_any_state(self, quiet_game):
        assert quiet_game.state == GameState.AWAITING_ACTION
        quiet_game.start_new_hand()
        assert quiet_game.hand_number == 2
        assert quiet_game.state == GameState.AWAITING_ACTION

    def test_showdown_only_after_round_closes(self, quiet_game):
        with pytest.raises(MachineError):
            quiet_game.call_showdown()
        with pytest.raises(MachineError):
            quiet_game.deal_community()
        assert quiet_game.state == GameState.AWAITING_ACTION

    def test_betting_only_opens_while_dealing(self):
        game = Holdem21Game(rng=Random(3), auto_start=False)
        with pytest.raises(MachineError):
            game.open_betting()
        assert game.state == GameState.HAND_COMPLETE
