from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Sequence

from .cards import build_deck, burn, cards_to_labels, deal, deal_community
from .errors import EngineError
from .models import (
    ActionResult,
    ActionType,
    BettingRound,
    GameState,
    LegalActions,
    Phase,
    Player,
    PlayerStatus,
    Rejection,
)
from .pots import resolve_showdown, settle_uncontested

LOGGER = logging.getLogger(__name__)

# Every public operation takes a GameState and hands back a new one. The
# prior state is never touched: transitions work on ``state.clone()`` and
# only return the copy once the action has been applied in full.

# 52 cards must cover two hole cards per seat, five board cards and three burns.
MAX_SEATS = 22


# Table setup -----------------------------------------------------------

def create_players(count: int, starting_stack: int, names: Optional[Sequence[str]] = None) -> List[Player]:
    if not 2 <= count <= MAX_SEATS:
        raise ValueError(f"Seat count must be between 2 and {MAX_SEATS}")
    if starting_stack < 0:
        raise ValueError("Starting stack cannot be negative")
    names = list(names or [])
    return [
        Player(seat=idx, stack=starting_stack, name=names[idx] if idx < len(names) else f"Player{idx}")
        for idx in range(count)
    ]


def create_initial_game_state(players: Sequence[Player], sb: int, bb: int, dealer: int = 0) -> GameState:
    if not 2 <= len(players) <= MAX_SEATS:
        raise ValueError(f"Seat count must be between 2 and {MAX_SEATS}")
    if any(player.seat != idx for idx, player in enumerate(players)):
        raise ValueError("Players must be listed in seat order")
    if not 0 <= dealer < len(players):
        raise ValueError(f"Dealer seat {dealer} is not at the table")
    return GameState(
        players=[replace(player, hole_cards=list(player.hole_cards)) for player in players],
        sb=sb,
        bb=bb,
        dealer=dealer,
        betting=BettingRound(min_raise=bb, last_full_raise=bb),
    )


def rotate_dealer(state: GameState) -> GameState:
    """Move the button to the next seat that still has chips."""
    if state.in_progress:
        raise EngineError("Cannot move the button during a hand")
    seat = _next_seat(state, state.dealer, lambda player: player.stack > 0)
    if seat is None:
        raise EngineError("No seat left with chips")
    nxt = state.clone()
    nxt.dealer = seat
    return nxt


# Hand lifecycle --------------------------------------------------------

def start_hand(state: GameState, seed: Optional[int] = None) -> GameState:
    if state.in_progress:
        raise EngineError("Hand already in progress")
    if state.sb <= 0 or state.bb <= 0:
        raise EngineError("Blinds are not configured")
    if sum(1 for player in state.players if player.stack > 0) < 2:
        raise EngineError("Not enough active players to start a hand")

    nxt = state.clone()
    for player in nxt.players:
        player.reset_for_hand()
    nxt.hand_number += 1
    nxt.seed = seed
    nxt.deck = build_deck(seed)
    nxt.community = []
    nxt.phase = Phase.PRE_FLOP
    nxt.pots = []
    nxt.winners = []
    nxt.hand_over = False
    nxt.hand_scores = {}
    nxt.events = [{"ev": "START_HAND", "hand": nxt.hand_number, "dealer": nxt.dealer, "seed": seed}]

    _deal_hole_cards(nxt)
    _post_blinds(nxt)
    LOGGER.debug("Hand %s started, dealer seat %s", nxt.hand_number, nxt.dealer)

    # Blinds alone can put everyone but one player all-in.
    if _round_complete(nxt):
        _advance_street(nxt)
    return nxt


def _deal_hole_cards(state: GameState) -> None:
    seat_count = len(state.players)
    order = [
        (state.dealer + offset) % seat_count
        for offset in range(1, seat_count + 1)
        if state.players[(state.dealer + offset) % seat_count].status == PlayerStatus.ACTIVE
    ]
    for _ in range(2):
        for seat in order:
            state.players[seat].hole_cards.extend(deal(state.deck, 1))


def _post_blinds(state: GameState) -> None:
    def live(player: Player) -> bool:
        return player.status == PlayerStatus.ACTIVE

    heads_up = sum(1 for player in state.players if live(player)) == 2
    if heads_up and live(state.players[state.dealer]):
        sb_seat = state.dealer
    else:
        sb_seat = _next_seat(state, state.dealer, live)
    bb_seat = None if sb_seat is None else _next_seat(state, sb_seat, live)
    if sb_seat is None or bb_seat is None or sb_seat == bb_seat:
        raise EngineError("Not enough active players to post blinds")

    sb_player = state.players[sb_seat]
    bb_player = state.players[bb_seat]
    sb_posted = sb_player.commit(state.sb)
    bb_posted = bb_player.commit(state.bb)

    state.betting = BettingRound(
        highest_bet=max(sb_player.current_bet, bb_player.current_bet),
        min_raise=state.bb,
        last_full_raise=state.bb,
        reopener=bb_seat,
    )
    first = _next_to_act(state, bb_seat)
    state.betting.starting_seat = first
    state.betting.current_actor = first
    state.events.append(
        {"ev": "POST_BLINDS", "sb_seat": sb_seat, "bb_seat": bb_seat, "sb": sb_posted, "bb": bb_posted}
    )


# Queries ---------------------------------------------------------------

def legal_actions(state: GameState, seat: int) -> LegalActions:
    """Everything ``seat`` may do right now.

    Only the seat on the clock gets a window. Any other seat, even one that
    will act later this street, gets an empty ``LegalActions``.
    """
    player = _player(state, seat)
    betting = state.betting
    if not state.in_progress or betting.current_actor != seat or not player.can_act:
        return LegalActions()

    highest = betting.highest_bet
    call_amount = max(0, highest - player.current_bet)
    max_total = player.current_bet + player.stack
    can_raise = highest > 0 and seat not in betting.acted_since_full_raise and max_total > highest
    # Going all-in over the current bet is a raise and needs the right to raise.
    can_all_in = player.stack > 0 and (highest == 0 or max_total <= highest or can_raise)

    return LegalActions(
        can_fold=True,
        can_check=call_amount == 0,
        can_call=call_amount > 0 and player.stack > 0,
        can_bet=highest == 0 and player.stack > 0,
        can_raise=can_raise,
        can_all_in=can_all_in,
        call_amount=call_amount,
        min_total_bet=highest + betting.min_raise,
        max_total_bet=max_total,
    )


def next_actor(state: GameState) -> Optional[int]:
    return state.betting.current_actor if state.in_progress else None


def is_hand_complete(state: GameState) -> bool:
    return state.hand_over


# Action handling -------------------------------------------------------

def apply_action(
    state: GameState,
    seat: int,
    action: ActionType,
    amount: Optional[int] = None,
) -> ActionResult:
    """Apply one player decision.

    Illegal decisions come back as a rejected ``ActionResult`` carrying the
    untouched ``state``; only caller bugs (unknown seat, unknown action kind)
    raise.
    """
    player = _player(state, seat)
    try:
        action = ActionType(action)
    except ValueError:
        raise ValueError(f"Unsupported action {action}") from None

    if not state.in_progress:
        return _reject(state, seat, action, Rejection.HAND_NOT_IN_PROGRESS)
    if state.betting.current_actor != seat:
        return _reject(state, seat, action, Rejection.OUT_OF_TURN)
    if not player.can_act:
        return _reject(state, seat, action, Rejection.CANNOT_ACT)

    window = legal_actions(state, seat)
    nxt = state.clone()
    rejection = _HANDLERS[action](nxt, seat, window, amount)
    if rejection is not None:
        return _reject(state, seat, action, rejection)

    _after_action(nxt, seat)
    return ActionResult(state=nxt, events=tuple(nxt.events[len(state.events):]))


def _reject(state: GameState, seat: int, action: ActionType, rejection: Rejection) -> ActionResult:
    LOGGER.debug("Rejected %s from seat %s: %s", action.value, seat, rejection.value)
    return ActionResult(state=state, rejection=rejection)


def _fold(state: GameState, seat: int, window: LegalActions, amount: Optional[int]) -> Optional[Rejection]:
    state.players[seat].status = PlayerStatus.FOLDED
    _record(state, "FOLD", seat)
    return None


def _check(state: GameState, seat: int, window: LegalActions, amount: Optional[int]) -> Optional[Rejection]:
    if not window.can_check:
        return Rejection.CANNOT_CHECK
    _record(state, "CHECK", seat)
    return None


def _call(state: GameState, seat: int, window: LegalActions, amount: Optional[int]) -> Optional[Rejection]:
    if not window.can_call:
        return Rejection.NOTHING_TO_CALL
    return _commit_call(state, seat, window)


def _bet(state: GameState, seat: int, window: LegalActions, amount: Optional[int]) -> Optional[Rejection]:
    if not window.can_bet:
        return Rejection.CANNOT_BET
    if amount is None:
        return Rejection.AMOUNT_REQUIRED
    target = min(int(amount), window.max_total_bet)
    # Under-sized opening bets are refused unless they put the whole stack in.
    if target < state.bb and target < window.max_total_bet:
        return Rejection.BET_BELOW_MINIMUM
    return _commit_bet(state, seat, target)


def _raise(state: GameState, seat: int, window: LegalActions, amount: Optional[int]) -> Optional[Rejection]:
    if not window.can_raise:
        return Rejection.CANNOT_RAISE
    if amount is None:
        return Rejection.AMOUNT_REQUIRED
    return _commit_raise(state, seat, window, min(int(amount), window.max_total_bet))


def _all_in(state: GameState, seat: int, window: LegalActions, amount: Optional[int]) -> Optional[Rejection]:
    if not window.can_all_in:
        return Rejection.CANNOT_RAISE
    highest = state.betting.highest_bet
    if highest == 0:
        return _commit_bet(state, seat, window.max_total_bet)
    if window.max_total_bet <= highest:
        return _commit_call(state, seat, window)
    return _commit_raise(state, seat, window, window.max_total_bet)


def _commit_call(state: GameState, seat: int, window: LegalActions) -> Optional[Rejection]:
    # A short call puts the player all-in but never reopens the betting.
    player = state.players[seat]
    paid = player.commit(window.call_amount)
    _record(state, "CALL", seat, amount=paid, all_in=player.status == PlayerStatus.ALL_IN)
    return None


def _commit_bet(state: GameState, seat: int, target: int) -> Optional[Rejection]:
    player = state.players[seat]
    betting = state.betting
    committed = player.commit(target - player.current_bet)
    betting.highest_bet = player.current_bet
    betting.min_raise = committed
    betting.last_full_raise = committed
    betting.acted_since_full_raise = {seat}
    betting.reopener = seat
    _record(state, "BET", seat, amount=committed, all_in=player.status == PlayerStatus.ALL_IN)
    return None


def _commit_raise(state: GameState, seat: int, window: LegalActions, target: int) -> Optional[Rejection]:
    player = state.players[seat]
    betting = state.betting
    if target <= betting.highest_bet:
        return Rejection.RAISE_NOT_ABOVE_BET
    all_in = target == window.max_total_bet
    raise_size = target - betting.highest_bet
    full_raise = raise_size >= betting.last_full_raise
    if not full_raise and not all_in:
        return Rejection.RAISE_BELOW_MINIMUM

    player.commit(target - player.current_bet)
    betting.highest_bet = target
    if full_raise:
        betting.last_full_raise = raise_size
        betting.min_raise = raise_size
        betting.acted_since_full_raise = {seat}
        betting.reopener = seat
    # A short all-in leaves the acted set alone: seats that already acted
    # may call or fold the extra chips but not raise again.
    _record(state, "RAISE", seat, to=target, full=full_raise, all_in=all_in)
    return None


_HANDLERS: Dict[ActionType, Callable[[GameState, int, LegalActions, Optional[int]], Optional[Rejection]]] = {
    ActionType.FOLD: _fold,
    ActionType.CHECK: _check,
    ActionType.CALL: _call,
    ActionType.BET: _bet,
    ActionType.RAISE: _raise,
    ActionType.ALL_IN: _all_in,
}


def _record(state: GameState, ev: str, seat: int, **data: object) -> None:
    event: Dict[str, object] = {"ev": ev, "seat": seat, "phase": state.phase.value}
    event.update(data)
    state.events.append(event)


def _after_action(state: GameState, seat: int) -> None:
    betting = state.betting
    betting.acted_since_full_raise.add(seat)
    betting.has_acted = True

    contenders = [player for player in state.players if player.in_hand]
    if len(contenders) == 1:
        settle_uncontested(state, contenders[0].seat)
        return

    if _round_complete(state):
        _advance_street(state)
    else:
        betting.current_actor = _next_to_act(state, seat)


def _round_complete(state: GameState) -> bool:
    """True once no seat owes the current street a decision.

    Action has come back around to the end seat (the reopener after a bet or
    raise, the first seat to act otherwise) exactly when every seat that can
    still act has matched the highest bet and acted since the last full raise.
    """
    betting = state.betting
    live = [player for player in state.players if player.can_act]
    if not live:
        return True
    if any(player.current_bet != betting.highest_bet for player in live):
        return False
    if len(live) == 1:
        # Nobody left to bet against.
        return True
    if not betting.has_acted:
        return False
    return all(player.seat in betting.acted_since_full_raise for player in live)


def _advance_street(state: GameState) -> None:
    # Keeps dealing while fewer than two players can bet (all-in run-out).
    while True:
        if state.phase == Phase.RIVER:
            resolve_showdown(state)
            return
        _deal_street(state)
        for player in state.players:
            player.reset_for_round()
        state.betting = BettingRound(min_raise=state.bb, last_full_raise=state.bb)
        first = _next_to_act(state, state.dealer)
        state.betting.starting_seat = first
        state.betting.current_actor = first
        if not _round_complete(state):
            return


def _deal_street(state: GameState) -> None:
    burn(state.deck)
    if state.phase == Phase.PRE_FLOP:
        cards = deal_community(state.deck, 3)
        state.phase = Phase.FLOP
        state.events.append({"ev": "FLOP", "cards": cards_to_labels(cards)})
    elif state.phase == Phase.FLOP:
        cards = deal_community(state.deck, 1)
        state.phase = Phase.TURN
        state.events.append({"ev": "TURN", "card": cards[0].label})
    elif state.phase == Phase.TURN:
        cards = deal_community(state.deck, 1)
        state.phase = Phase.RIVER
        state.events.append({"ev": "RIVER", "card": cards[0].label})
    else:
        raise EngineError(f"No street follows {state.phase.value}")
    state.community.extend(cards)
    LOGGER.debug("Hand %s: %s %s", state.hand_number, state.phase.value, cards_to_labels(state.community))


# Seat helpers ----------------------------------------------------------

def _player(state: GameState, seat: int) -> Player:
    if not 0 <= seat < len(state.players):
        raise EngineError(f"Unknown seat {seat}")
    return state.players[seat]


def _next_seat(state: GameState, start: int, predicate: Callable[[Player], bool]) -> Optional[int]:
    seat_count = len(state.players)
    for offset in range(1, seat_count + 1):
        seat = (start + offset) % seat_count
        if predicate(state.players[seat]):
            return seat
    return None


def _next_to_act(state: GameState, start: int) -> Optional[int]:
    """First seat clockwise of ``start`` that still owes a decision this street."""
    betting = state.betting
    return _next_seat(
        state,
        start,
        lambda player: player.can_act
        and (player.current_bet != betting.highest_bet or player.seat not in betting.acted_since_full_raise),
    )
