from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .errors import DeckExhaustedError

RANKS = "23456789TJQKA"
SUITS = "hdcs"
RANK_VALUE = {rank: idx for idx, rank in enumerate(RANKS, start=2)}
RANK_CHAR = {value: rank for rank, value in RANK_VALUE.items()}


@dataclass(frozen=True)
class Card:
    rank: int
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in RANK_CHAR:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def label(self) -> str:
        return f"{RANK_CHAR[self.rank]}{self.suit}"

    def __str__(self) -> str:
        return self.label


def new_deck() -> List[Card]:
    return [Card(RANK_VALUE[rank], suit) for suit in SUITS for rank in RANKS]


def shuffle(deck: Sequence[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """Return a uniformly random permutation of ``deck``; the input is left alone."""
    shuffled = list(deck)
    (rng or random.Random()).shuffle(shuffled)
    return shuffled


def build_deck(seed: Optional[int] = None) -> List[Card]:
    """Shuffled deck; a seed makes the order reproducible, no seed draws from the OS."""
    rng = random.Random(seed) if seed is not None else random.SystemRandom()
    return shuffle(new_deck(), rng)


def deal(deck: List[Card], count: int) -> List[Card]:
    if len(deck) < count:
        raise DeckExhaustedError("Not enough cards left in deck")
    cards = deck[:count]
    del deck[:count]
    return cards


def burn(deck: List[Card]) -> None:
    deal(deck, 1)


def deal_community(deck: List[Card], count: int) -> List[Card]:
    return deal(deck, count)


def cards_to_labels(cards: Sequence[Card]) -> List[str]:
    return [card.label for card in cards]


def parse_label(label: str) -> Card:
    if len(label) != 2:
        raise ValueError(f"Invalid card label: {label}")
    rank = RANK_VALUE.get(label[0].upper())
    if rank is None:
        raise ValueError(f"Invalid rank: {label[0]}")
    return Card(rank, label[1].lower())


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]
