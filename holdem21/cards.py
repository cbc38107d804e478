"""Cards and the 52-card deck used by every hand."""

from dataclasses import dataclass
from enum import Enum
from random import Random
from typing import Iterable, Iterator

CARD_ASSET_DIR = "assets/images/playing-cards/Cards (large)"

_SUIT_SYMBOLS = {"spades": "♠", "hearts": "♥", "diamonds": "♦", "clubs": "♣"}
_FACE_LABELS = {11: "J", 12: "Q", 13: "K", 14: "A"}


class Suit(Enum):
    """Card suits, in deck-building order."""

    SPADES = "spades"
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"

    def __str__(self) -> str:
        return _SUIT_SYMBOLS[self.value]

    @property
    def title(self) -> str:
        """Capitalized name, e.g. "Hearts"."""
        return self.value.capitalize()


class Rank(Enum):
    """Card ranks, 2 through Ace high."""

    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    def __str__(self) -> str:
        return _FACE_LABELS.get(self.value, str(self.value))

    @property
    def blackjack_value(self) -> int:
        """Points before ace reduction: faces count 10, an ace 11."""
        if self is Rank.ACE:
            return 11
        return min(self.value, 10)

    @property
    def is_ace(self) -> bool:
        return self is Rank.ACE

    @property
    def is_ten_value(self) -> bool:
        return self.blackjack_value == 10

    @property
    def image_token(self) -> str:
        """Rank as it appears in card image file names ("07", "10", "Q")."""
        return f"{self.value:02d}" if self.value <= 10 else str(self)


# Accepted spellings for Card.from_string
_RANK_TOKENS = {str(rank): rank for rank in Rank} | {"T": Rank.TEN}
_SUIT_TOKENS = {suit.name[0]: suit for suit in Suit} | {str(suit): suit for suit in Suit}


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def value(self) -> int:
        return self.rank.blackjack_value

    @property
    def is_ace(self) -> bool:
        return self.rank.is_ace

    @property
    def is_ten_value(self) -> bool:
        return self.rank.is_ten_value

    @property
    def id(self) -> str:
        """Stable identifier such as 'hearts-K'."""
        return f"{self.suit.value}-{self.rank}"

    @property
    def display_name(self) -> str:
        """Readable name such as 'K of Hearts'."""
        return f"{self.rank} of {self.suit.title}"

    @property
    def image(self) -> str:
        """Path of the face image; only renderers use it."""
        return f"{CARD_ASSET_DIR}/card_{self.suit.value}_{self.rank.image_token}.png"

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """
        Parse a card such as 'AS', '10h', 'Td' or 'K♥'.

        Raises:
            ValueError: for unknown ranks or suits
        """
        text = s.strip().upper()
        if len(text) < 2:
            raise ValueError(f"Invalid card string: {s!r}")

        rank = _RANK_TOKENS.get(text[:-1])
        suit = _SUIT_TOKENS.get(text[-1])
        if rank is None:
            raise ValueError(f"Invalid rank: {text[:-1]}")
        if suit is None:
            raise ValueError(f"Invalid suit: {text[-1]}")
        return cls(rank, suit)


def is_ten_value(card: Card) -> bool:
    """True for 10, J, Q and K."""
    return card.is_ten_value


class Deck:
    """The 52 distinct cards; draws come off the end of the list."""

    def __init__(self, rng: Random | None = None) -> None:
        self._rng = rng or Random()
        self._cards: list[Card] = []
        self.reset()

    def reset(self) -> None:
        """Restore all 52 cards in suit-then-rank order."""
        self._cards = [Card(rank, suit) for suit in Suit for rank in Rank]

    def shuffle(self) -> None:
        self._rng.shuffle(self._cards)

    def draw(self) -> Card:
        """
        Take the top card.

        Raises:
            IndexError: when the deck is empty
        """
        if not self._cards:
            raise IndexError("Cannot draw from empty deck")
        return self._cards.pop()

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    @property
    def cards_remaining(self) -> int:
        return len(self._cards)

    @classmethod
    def shuffled(cls, rng: Random | None = None) -> "Deck":
        """A freshly shuffled deck."""
        deck = cls(rng=rng)
        deck.shuffle()
        return deck

    @classmethod
    def from_cards(cls, cards: Iterable[Card]) -> "Deck":
        """
        A deck holding exactly ``cards``; the last one is drawn first.

        Used to replay fixed deals.
        """
        deck = cls()
        deck._cards = list(cards)
        return deck


def build_shuffled_deck(rng: Random | None = None) -> list[Card]:
    """The 52 cards as a uniformly shuffled list."""
    return list(Deck.shuffled(rng))
