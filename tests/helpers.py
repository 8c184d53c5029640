from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from holdem.cards import new_deck, parse_cards
from holdem.game import apply_action, create_initial_game_state, create_players, legal_actions, start_hand
from holdem.models import ActionType, GameState


def new_table(
    *,
    seats: int = 4,
    starting_stack: int = 1_000,
    sb: int = 10,
    bb: int = 20,
    dealer: int = 0,
    stacks: Optional[Sequence[int]] = None,
) -> GameState:
    """Idle table; ``stacks`` overrides the starting stack per seat."""
    players = create_players(seats, starting_stack)
    if stacks is not None:
        for player, stack in zip(players, stacks):
            player.stack = stack
    return create_initial_game_state(players, sb, bb, dealer=dealer)


def stacked_deck(labels: Sequence[str]) -> List:
    """Deck with ``labels`` on top (dealt first) and the rest of the cards after them."""
    top = parse_cards(labels)
    rest = [card for card in new_deck() if card not in top]
    return top + rest


def stack_deck(monkeypatch, labels: Sequence[str]) -> None:
    deck = stacked_deck(labels)
    monkeypatch.setattr("holdem.game.build_deck", lambda seed=None: list(deck))


def act(state: GameState, seat: int, action: ActionType, amount: Optional[int] = None) -> GameState:
    """Apply an action that must be accepted."""
    result = apply_action(state, seat, action, amount)
    assert result.ok, f"seat {seat} {action} rejected: {result.rejection}"
    return result.state


def perform_actions(state: GameState, actions: Iterable[Tuple[int, ActionType, Optional[int]]]) -> GameState:
    """Apply a scripted sequence of actions (seat, action, amount)."""
    for seat, action, amount in actions:
        state = act(state, seat, action, amount)
    return state


def passive_step(state: GameState) -> GameState:
    seat = state.betting.current_actor
    assert seat is not None
    window = legal_actions(state, seat)
    if window.can_check:
        return act(state, seat, ActionType.CHECK)
    if window.can_call:
        return act(state, seat, ActionType.CALL)
    return act(state, seat, ActionType.FOLD)


def auto_complete_hand(state: GameState) -> GameState:
    """Check or call every decision until the hand is over."""
    while not state.hand_over:
        state = passive_step(state)
    return state


def start(state: GameState, seed: int = 42) -> GameState:
    return start_hand(state, seed=seed)


def total_chips(state: GameState) -> int:
    # Once paid out, committed chips already sit in the winners' stacks.
    if state.hand_over:
        return sum(player.stack for player in state.players)
    return sum(player.stack + player.total_committed for player in state.players)
