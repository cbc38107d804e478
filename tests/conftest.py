"""Pytest fixtures for 21 Hold'em tests."""

import pytest
from random import Random

from holdem21.cards import Card, Deck
from holdem21.game import Holdem21Game
from holdem21.rules import TableRules
from holdem21.strategy import BotStrategy


def rigged_deck(*cards: str) -> Deck:
    """Deck that deals ``cards`` in the order given, then runs dry."""
    return Deck.from_cards(reversed([Card.from_string(c) for c in cards]))


class ScriptedRandom(Random):
    """Random whose ``random()`` replays a fixed sequence, then repeats the last draw."""

    def __init__(self, draws):
        super().__init__(0)
        self._draws = list(draws) or [0.99]
        self.calls = 0

    def random(self):
        self.calls += 1
        if len(self._draws) == 1:
            return self._draws[0]
        return self._draws.pop(0)


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def deck(rng):
    """A shuffled deck."""
    d = Deck(rng=rng)
    d.shuffle()
    return d


@pytest.fixture
def rules():
    """Default table rules."""
    return TableRules()


@pytest.fixture
def scripted_rng():
    """Factory for random sources with fixed draws."""
    return ScriptedRandom


@pytest.fixture
def make_game():
    """
    Factory for tables that deal fixed cards every hand.

    Hand one has seat 0 on the button, seat 1 in the small blind and seat 2
    in the big blind, so private cards go to seats 0, 1, 2 in that order and
    the community cards follow. Bots draw 0.99 by default, which turns down
    every optional play.
    """
    def _make(*cards: str, rules: TableRules | None = None, draws=(0.99,)) -> Holdem21Game:
        return Holdem21Game(
            rules=rules,
            deck_factory=lambda: rigged_deck(*cards),
            bot_strategy=BotStrategy(rng=ScriptedRandom(draws)),
        )

    return _make


@pytest.fixture
def game(rng):
    """A seeded table with the first hand dealt."""
    return Holdem21Game(rng=rng)


@pytest.fixture
def quiet_game(make_game):
    """
    A table with low cards so nobody busts or hits 21 early.

    Private cards: seat 0 gets 5, seat 1 gets 6, seat 2 gets 4.
    Community cards: 2, 3, 2, 3.
    """
    return make_game("5S", "6H", "4D", "2C", "3S", "2H", "3D")
