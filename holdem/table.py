from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Sequence

from .errors import EngineError
from .game import (
    apply_action,
    create_initial_game_state,
    create_players,
    is_hand_complete,
    legal_actions,
    next_actor,
    rotate_dealer,
    start_hand,
)
from .models import ActionResult, ActionType, GameState, LegalActions, TableConfig
from .views import seat_view, spectator_view

LOGGER = logging.getLogger(__name__)

# Width of the per-hand seeds drawn by a Table; each one is recorded for replay.
SEED_BITS = 128

# Table is the single writer for one game: it holds the last committed
# GameState, feeds actions through the engine one at a time and keeps an
# append-only log of every submission. The engine itself stays pure.


@dataclass(frozen=True)
class ActionRecord:
    index: int
    hand: int
    seat: int
    action: ActionType
    amount: Optional[int]
    rejection: Optional[str]


@dataclass
class HandRecord:
    hand: int
    seed: Optional[int]
    opening_stacks: Dict[int, int]
    events: List[Dict[str, object]] = field(default_factory=list)
    final_stacks: Optional[Dict[int, int]] = None


class Table:
    def __init__(
        self,
        config: TableConfig,
        names: Optional[Sequence[str]] = None,
        seed: Optional[int] = None,
        history_limit: int = 20,
    ) -> None:
        self.config = config
        players = create_players(config.seats, config.starting_stack, names)
        self.state: GameState = create_initial_game_state(players, config.sb, config.bb, dealer=0)
        # Without a table seed, hand seeds come from the OS.
        self.rng = random.Random(seed) if seed is not None else random.SystemRandom()
        self.log: List[ActionRecord] = []
        self.history: Deque[HandRecord] = deque(maxlen=history_limit)
        self.current: Optional[HandRecord] = None

    # Hand lifecycle --------------------------------------------------

    def can_start_hand(self) -> bool:
        if self.state.in_progress:
            return False
        return sum(1 for player in self.state.players if player.stack > 0) >= 2

    def start_hand(self, seed: Optional[int] = None) -> GameState:
        if not self.can_start_hand():
            raise EngineError("Not enough active players to start a hand")

        state = self.state
        # The button moves after every hand; the first hand keeps the opening dealer.
        if state.hand_number > 0 or state.players[state.dealer].stack == 0:
            state = rotate_dealer(state)
        if seed is None:
            seed = self.rng.getrandbits(SEED_BITS)

        opening = {player.seat: player.stack for player in state.players}
        self.state = start_hand(state, seed=seed)
        self.current = HandRecord(hand=self.state.hand_number, seed=seed, opening_stacks=opening)
        self.current.events.extend(self.state.events)
        LOGGER.info("Hand %s started (dealer seat %s, seed %s)", self.state.hand_number, self.state.dealer, seed)
        self._maybe_finish_hand()
        return self.state

    def is_hand_complete(self) -> bool:
        return is_hand_complete(self.state)

    def is_match_over(self) -> bool:
        return sum(1 for player in self.state.players if player.stack > 0) <= 1

    def match_result(self) -> Dict[str, object]:
        funded = [player for player in self.state.players if player.stack > 0]
        winner = funded[0] if len(funded) == 1 else None
        return {
            "winner": {"seat": winner.seat, "name": winner.name} if winner else None,
            "hands_played": self.state.hand_number,
            "final_stacks": [
                {"seat": player.seat, "name": player.name, "stack": player.stack} for player in self.state.players
            ],
        }

    # Actions ---------------------------------------------------------

    def next_actor(self) -> Optional[int]:
        return next_actor(self.state)

    def legal_actions(self, seat: int) -> LegalActions:
        return legal_actions(self.state, seat)

    def submit(self, seat: int, action: ActionType, amount: Optional[int] = None) -> ActionResult:
        """Apply one action against the committed state; only accepted actions replace it."""
        result = apply_action(self.state, seat, action, amount)
        self.log.append(
            ActionRecord(
                index=len(self.log),
                hand=self.state.hand_number,
                seat=seat,
                action=ActionType(action),
                amount=amount,
                rejection=result.rejection.value if result.rejection else None,
            )
        )
        if not result.ok:
            LOGGER.warning("Seat %s %s rejected: %s", seat, ActionType(action).value, result.rejection.value)
            return result

        self.state = result.state
        if self.current is not None:
            self.current.events.extend(result.events)
        self._maybe_finish_hand()
        return result

    def _maybe_finish_hand(self) -> None:
        if not self.state.hand_over or self.current is None:
            return
        self.current.final_stacks = {player.seat: player.stack for player in self.state.players}
        self.history.append(self.current)
        LOGGER.info(
            "Hand %s finished: winners=%s pot=%s",
            self.current.hand,
            self.state.winners,
            sum(pot.amount for pot in self.state.pots),
        )
        self.current = None

    # Views -----------------------------------------------------------

    def seat_view(self, seat: int) -> Dict[str, object]:
        return seat_view(self.state, seat)

    def spectator_view(self) -> Dict[str, object]:
        return spectator_view(self.state)
