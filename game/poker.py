"""Poker card and deck implementation."""

import random
from dataclasses import dataclass
from typing import List, Optional

from .errors import DeckExhausted


SUITS = ['hearts', 'diamonds', 'clubs', 'spades']
RANKS = ['2', '3', '4', '5', '6', '7', '8', '9', '10', 'J', 'Q', 'K', 'A']
RANK_VALUES = {rank: i for i, rank in enumerate(RANKS, 2)}
SUIT_SYMBOLS = {
    'hearts': '♥',
    'diamonds': '♦',
    'clubs': '♣',
    'spades': '♠'
}
SYMBOL_SUITS = {symbol: suit for suit, symbol in SUIT_SYMBOLS.items()}

_system_random = random.SystemRandom()


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self):
        if self.rank not in RANKS:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def value(self) -> int:
        return RANK_VALUES[self.rank]

    @classmethod
    def parse(cls, label: str) -> 'Card':
        """Parse the display form used on the wire, e.g. 'A♠' or '10♥'."""
        if len(label) < 2 or label[-1] not in SYMBOL_SUITS:
            raise ValueError(f"Invalid card label: {label}")
        return cls(rank=label[:-1], suit=SYMBOL_SUITS[label[-1]])

    def __str__(self) -> str:
        return f"{self.rank}{SUIT_SYMBOLS[self.suit]}"

    def __repr__(self) -> str:
        return str(self)


def parse_cards(labels: str) -> List[Card]:
    """Parse a space separated list of card labels."""
    return [Card.parse(label) for label in labels.split()]


class Deck:
    """A 52 card deck owned by a single hand."""

    def __init__(self, seed: Optional[int] = None):
        self.cards: List[Card] = []
        self.shuffle(seed)

    def shuffle(self, seed: Optional[int] = None):
        """Rebuild and shuffle the full deck.

        Without a seed the permutation comes from the operating system's
        CSPRNG. A seed gives a reproducible order for replays.
        """
        self.cards = [Card(rank, suit) for suit in SUITS for rank in RANKS]
        rng = _system_random if seed is None else random.Random(seed)
        rng.shuffle(self.cards)

    def draw(self, count: int = 1) -> List[Card]:
        """Remove and return cards from the front of the deck."""
        if count > len(self.cards):
            raise DeckExhausted(
                f"Not enough cards in deck. Requested {count}, have {len(self.cards)}"
            )
        dealt = self.cards[:count]
        del self.cards[:count]
        return dealt

    def draw_one(self) -> Card:
        return self.draw(1)[0]

    def __len__(self) -> int:
        return len(self.cards)
