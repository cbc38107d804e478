"""Hand evaluation for 21 Hold'em."""

from typing import Sequence

from holdem21.cards import Card

BLACKJACK_TOTAL = 21


def best_total(cards: Sequence[Card]) -> int:
    """
    Calculate the best blackjack total for a set of cards.

    Aces start at 11 and drop to 1 one at a time while the total is over 21.
    Returns the lowest bust value when no ace can be reduced any further.
    """
    total = 0
    aces = 0

    for card in cards:
        if card.is_ace:
            aces += 1
            total += 11
        else:
            total += card.value

    # Reduce aces from 11 to 1 as needed
    while total > BLACKJACK_TOTAL and aces > 0:
        total -= 10
        aces -= 1

    return total


def is_busted(cards: Sequence[Card]) -> bool:
    """Check if the cards total more than 21."""
    return best_total(cards) > BLACKJACK_TOTAL


def is_blackjack(cards: Sequence[Card]) -> bool:
    """Check for a natural: exactly two cards, an ace and a ten-valued card."""
    if len(cards) != 2:
        return False
    has_ace = any(card.is_ace for card in cards)
    has_ten = any(card.is_ten_value for card in cards)
    return has_ace and has_ten


def opening_value(cards: Sequence[Card]) -> int:
    """Value of the first card alone (Ace = 11, ten-valued = 10), 0 if empty."""
    if not cards:
        return 0
    return cards[0].value
