from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .cards import cards_to_labels
from .evaluator import HandScore, evaluate_hand
from .models import GameState, Phase, Player, PlayerStatus, Pot

LOGGER = logging.getLogger(__name__)

# Pot resolution runs on the state copy the betting machine is building, so
# everything here mutates the state it is handed.


def compute_side_pots(players: Sequence[Player]) -> List[Pot]:
    """Split every player's ``total_committed`` into a main pot and side pots.

    Each distinct commitment level L (ascending) produces a slice of
    ``(L - previous level) * number of players committed >= L``. Folded
    players feed the slices they reached but are never eligible to win them.
    A slice nobody is eligible for is folded into the pot below it.
    """
    contributors = [player for player in players if player.total_committed > 0]
    levels = sorted({player.total_committed for player in contributors})

    pots: List[Pot] = []
    carry = 0
    previous = 0
    for level in levels:
        members = [player for player in contributors if player.total_committed >= level]
        amount = (level - previous) * len(members)
        previous = level
        eligible = tuple(player.seat for player in members if player.status != PlayerStatus.FOLDED)
        if not eligible:
            if pots:
                pots[-1] = Pot(pots[-1].amount + amount, pots[-1].eligible)
            else:
                carry += amount
            continue
        pots.append(Pot(amount + carry, eligible))
        carry = 0
    return pots


def award_pots(
    players: Sequence[Player],
    pots: Sequence[Pot],
    scores: Mapping[int, HandScore],
    dealer: int,
) -> List[Tuple[int, int, int]]:
    """Return ``(pot_index, seat, amount)`` awards, smallest pot level first.

    Tied winners split evenly; odd chips go one at a time to the tied winners
    walking clockwise from the seat left of the dealer.
    """
    awards: List[Tuple[int, int, int]] = []
    seat_count = len(players)
    for pot_index, pot in enumerate(pots):
        best = max(scores[seat] for seat in pot.eligible)
        winners = [seat for seat in pot.eligible if scores[seat] == best]
        share, remainder = divmod(pot.amount, len(winners))
        payouts: Dict[int, int] = {seat: share for seat in winners}

        seat = (dealer + 1) % seat_count
        while remainder > 0:
            if seat in payouts:
                payouts[seat] += 1
                remainder -= 1
            seat = (seat + 1) % seat_count

        for winner in winners:
            awards.append((pot_index, winner, payouts[winner]))
    return awards


def resolve_showdown(state: GameState) -> None:
    """Score every live hand, build the pots and pay them out."""
    board = cards_to_labels(state.community)
    for player in state.players:
        if not player.in_hand:
            continue
        score = evaluate_hand(player.hole_cards, state.community)
        state.hand_scores[player.seat] = score
        state.events.append(
            {
                "ev": "SHOWDOWN",
                "seat": player.seat,
                "hand": cards_to_labels(player.hole_cards),
                "board": board,
                "rank": score.label,
            }
        )

    state.pots = compute_side_pots(state.players)
    awards = award_pots(state.players, state.pots, state.hand_scores, state.dealer)
    for pot_index, seat, amount in awards:
        _pay(state, seat, amount, pot_index)
    _finish_hand(state)


def settle_uncontested(state: GameState, seat: int) -> None:
    """Everyone else folded: ``seat`` takes every committed chip without a showdown."""
    state.pots = compute_side_pots(state.players)
    _pay(state, seat, state.pot_total, None)
    _finish_hand(state)


def _pay(state: GameState, seat: int, amount: int, pot_index: Optional[int]) -> None:
    state.players[seat].stack += amount
    if seat not in state.winners:
        state.winners.append(seat)
    state.events.append({"ev": "POT_AWARD", "seat": seat, "amount": amount, "pot": pot_index})
    LOGGER.debug("Hand %s: seat %s wins %s (pot %s)", state.hand_number, seat, amount, pot_index)


def _finish_hand(state: GameState) -> None:
    state.phase = Phase.SHOWDOWN
    state.hand_over = True
    state.betting.current_actor = None
    for player in state.players:
        if player.stack == 0 and player.status != PlayerStatus.ELIMINATED:
            player.status = PlayerStatus.ELIMINATED
            state.events.append({"ev": "ELIMINATED", "seat": player.seat})
    LOGGER.debug(
        "Hand %s complete: winners=%s stacks=%s",
        state.hand_number,
        state.winners,
        [player.stack for player in state.players],
    )
