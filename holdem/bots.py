from __future__ import annotations

import random
from typing import Callable, Optional, Sequence, Tuple

from .cards import Card
from .game import legal_actions
from .models import ActionType, GameState, Phase

Decision = Tuple[ActionType, Optional[int]]
Strategy = Callable[[GameState, int], Decision]

_RNG = random.Random()


def passive_strategy(state: GameState, seat: int) -> Decision:
    """Check if possible, otherwise call, then fold."""
    window = legal_actions(state, seat)
    if window.can_check:
        return ActionType.CHECK, None
    if window.can_call:
        return ActionType.CALL, None
    return ActionType.FOLD, None


def _rough_hand_strength(hole: Sequence[Card]) -> int:
    """Very rough proxy for hand quality used to drive aggression choices."""
    if len(hole) < 2:
        return 0

    values = [card.rank for card in hole]
    score = sum(values)
    if values[0] == values[1]:
        score += 14  # pairs are quite strong pre-flop
    else:
        gap = abs(values[0] - values[1])
        if gap == 1:
            score += 4
        elif gap == 2:
            score += 2
    if hole[0].suit == hole[1].suit:
        score += 3
    if min(values) >= 11:
        score += 2
    return score


def _should_raise(strength: int, phase: Phase, facing_bet: bool, rng: random.Random) -> bool:
    base = 0.2 if facing_bet else 0.35
    phase_bonus = {
        Phase.PRE_FLOP: 0.0,
        Phase.FLOP: 0.05,
        Phase.TURN: 0.1,
        Phase.RIVER: 0.12,
    }.get(phase, 0.0)
    scaled_strength = min(strength / 45.0, 0.45)
    probability = min(0.85, base + phase_bonus + scaled_strength)

    # Always attack with premium holdings.
    if strength >= 36:
        return True
    return rng.random() < probability


def _choose_total(min_total: int, max_total: int, facing_bet: bool, rng: random.Random) -> int:
    if max_total <= min_total:
        return max_total

    span = max_total - min_total
    roll = rng.random()
    if facing_bet:
        if roll < 0.2:
            return min_total
        if roll > 0.85:
            return max_total
    else:
        if roll < 0.35:
            return min_total
        if roll > 0.9:
            return max_total
    return min_total + int(span * rng.random())


def baseline_strategy(state: GameState, seat: int, rng: Optional[random.Random] = None) -> Decision:
    """Aggressive demo bot: mixes in random bets and raises, biased toward stronger holdings."""
    rng = rng or _RNG
    window = legal_actions(state, seat)
    player = state.players[seat]
    facing_bet = window.call_amount > 0
    strength = _rough_hand_strength(player.hole_cards)

    wants_pressure = _should_raise(strength, state.phase, facing_bet, rng)
    if wants_pressure and (window.can_bet or window.can_raise):
        total = _choose_total(window.min_total_bet, window.max_total_bet, facing_bet, rng)
        if total >= window.max_total_bet:
            return ActionType.ALL_IN, None
        return (ActionType.BET if window.can_bet else ActionType.RAISE), total

    if window.can_call:
        return ActionType.CALL, None
    if window.can_check:
        return ActionType.CHECK, None
    return ActionType.FOLD, None
