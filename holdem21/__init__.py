"""21 Hold'em engine - 100% UI-agnostic."""

from holdem21.cards import Card, Deck, Rank, Suit
from holdem21.hand import best_total, is_blackjack
from holdem21.rules import TableRules
from holdem21.game import Holdem21Game

__all__ = [
    "Card",
    "Deck",
    "Rank",
    "Suit",
    "best_total",
    "is_blackjack",
    "TableRules",
    "Holdem21Game",
]
