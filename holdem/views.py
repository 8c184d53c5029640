from __future__ import annotations

from typing import Dict, List, Optional

from .cards import cards_to_labels
from .game import legal_actions, next_actor
from .models import GameState, Phase, PlayerStatus

# Read-only dict snapshots for whatever renders the table. Building one never
# touches the state it reads.


def _pot(state: GameState) -> int:
    return 0 if state.hand_over else state.pot_total


def _shows_cards(state: GameState, seat: int) -> bool:
    player = state.players[seat]
    return state.phase == Phase.SHOWDOWN and player.status != PlayerStatus.FOLDED and seat in state.hand_scores


def _player_rows(state: GameState, viewer: Optional[int]) -> List[Dict[str, object]]:
    rows = []
    for player in state.players:
        visible = viewer is None or player.seat == viewer or _shows_cards(state, player.seat)
        rows.append(
            {
                "seat": player.seat,
                "name": player.name,
                "stack": player.stack,
                "status": player.status.value,
                "current_bet": player.current_bet,
                "total_committed": player.total_committed,
                "hole": cards_to_labels(player.hole_cards) if visible else [],
                "is_dealer": player.seat == state.dealer,
            }
        )
    return rows


def seat_view(state: GameState, seat: int) -> Dict[str, object]:
    """What one player is allowed to see; opponents' hole cards stay hidden until showdown."""
    player = state.players[seat]
    actor = next_actor(state)
    payload: Dict[str, object] = {
        "hand": state.hand_number,
        "phase": state.phase.value,
        "pot": _pot(state),
        "current_bet": state.betting.highest_bet,
        "you": {
            "seat": seat,
            "hole": cards_to_labels(player.hole_cards),
            "stack": player.stack,
            "to_call": max(state.betting.highest_bet - player.current_bet, 0),
        },
        "players": _player_rows(state, seat),
        "community": cards_to_labels(state.community),
        "next_actor": actor,
        "sb": state.sb,
        "bb": state.bb,
    }
    if actor == seat:
        window = legal_actions(state, seat)
        payload["legal"] = [action.value for action in window.legal]
        payload["call_amount"] = window.call_amount
        payload["min_total_bet"] = window.min_total_bet
        payload["max_total_bet"] = window.max_total_bet
    return payload


def spectator_view(state: GameState) -> Dict[str, object]:
    """Omniscient view: every hole card, the pots and the winners once the hand is over."""
    return {
        "hand": state.hand_number,
        "phase": state.phase.value,
        "pot": _pot(state),
        "current_bet": state.betting.highest_bet,
        "community": cards_to_labels(state.community),
        "players": _player_rows(state, None),
        "next_actor": next_actor(state),
        "pots": [{"amount": pot.amount, "eligible": list(pot.eligible)} for pot in state.pots],
        "winners": list(state.winners),
        "ranks": {seat: score.label for seat, score in state.hand_scores.items()},
        "sb": state.sb,
        "bb": state.bb,
    }
