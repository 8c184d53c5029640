from __future__ import annotations

import itertools
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from .cards import Card

HIGH_CARD = 0
PAIR = 1
TWO_PAIR = 2
THREE_OF_A_KIND = 3
STRAIGHT = 4
FLUSH = 5
FULL_HOUSE = 6
FOUR_OF_A_KIND = 7
STRAIGHT_FLUSH = 8

HAND_NAMES = {
    HIGH_CARD: "High Card",
    PAIR: "Pair",
    TWO_PAIR: "Two Pair",
    THREE_OF_A_KIND: "Three of a Kind",
    STRAIGHT: "Straight",
    FLUSH: "Flush",
    FULL_HOUSE: "Full House",
    FOUR_OF_A_KIND: "Four of a Kind",
    STRAIGHT_FLUSH: "Straight Flush",
}

WHEEL = (14, 5, 4, 3, 2)
WHEEL_KICKERS = (5, 4, 3, 2, 1)


@dataclass(frozen=True, order=True)
class HandScore:
    """Comparable hand strength. Ordering uses ``tier`` then ``kickers``; ``label`` is display only."""

    tier: int
    kickers: Tuple[int, ...]
    label: str = field(default="", compare=False)


INCOMPLETE = HandScore(-1, (), "Incomplete")


def evaluate_best(cards: Sequence[Card]) -> HandScore:
    """Return the best score over every 5-card subset of up to 7 cards. Higher is better."""
    if len(cards) < 5:
        return INCOMPLETE
    if len(cards) > 7:
        raise ValueError(f"Expected at most 7 cards, got {len(cards)}")
    best: Optional[HandScore] = None
    for combo in itertools.combinations(cards, 5):
        score = evaluate_five(combo)
        if best is None or score > best:
            best = score
    assert best is not None
    return best


def evaluate_hand(hole: Sequence[Card], community: Sequence[Card]) -> HandScore:
    return evaluate_best(list(hole) + list(community))


def compare_hands(a: HandScore, b: HandScore) -> int:
    if a > b:
        return 1
    if a < b:
        return -1
    return 0


def evaluate_five(cards: Iterable[Card]) -> HandScore:
    cards = list(cards)
    if len(cards) != 5:
        raise ValueError(f"Expected 5 cards, got {len(cards)}")
    ranks = tuple(sorted((card.rank for card in cards), reverse=True))
    is_flush = len({card.suit for card in cards}) == 1
    straight = _straight_kickers(ranks)

    # (rank, count) sorted by count desc, then rank desc
    groups = sorted(Counter(ranks).items(), key=lambda item: (item[1], item[0]), reverse=True)
    counts = [count for _, count in groups]

    if straight and is_flush:
        return _score(STRAIGHT_FLUSH, straight)
    if counts[0] == 4:
        return _score(FOUR_OF_A_KIND, (groups[0][0], groups[1][0]))
    if counts[0] == 3 and counts[1] == 2:
        return _score(FULL_HOUSE, (groups[0][0], groups[1][0]))
    if is_flush:
        return _score(FLUSH, ranks)
    if straight:
        return _score(STRAIGHT, straight)
    if counts[0] == 3:
        return _score(THREE_OF_A_KIND, (groups[0][0],) + _singles(groups))
    if counts[0] == 2 and counts[1] == 2:
        return _score(TWO_PAIR, (groups[0][0], groups[1][0]) + _singles(groups))
    if counts[0] == 2:
        return _score(PAIR, (groups[0][0],) + _singles(groups))
    return _score(HIGH_CARD, ranks)


def _score(tier: int, kickers: Tuple[int, ...]) -> HandScore:
    return HandScore(tier, tuple(kickers), HAND_NAMES[tier])


def _singles(groups: List[Tuple[int, int]]) -> Tuple[int, ...]:
    return tuple(rank for rank, count in groups if count == 1)


def _straight_kickers(ranks: Tuple[int, ...]) -> Optional[Tuple[int, ...]]:
    if len(set(ranks)) != 5:
        return None
    if ranks == WHEEL:  # Ace plays low
        return WHEEL_KICKERS
    if ranks[0] - ranks[4] == 4:
        return ranks
    return None
