from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from .cards import Card
from .evaluator import HandScore


class Phase(str, Enum):
    IDLE = "IDLE"
    PRE_FLOP = "PRE_FLOP"
    FLOP = "FLOP"
    TURN = "TURN"
    RIVER = "RIVER"
    SHOWDOWN = "SHOWDOWN"


class PlayerStatus(str, Enum):
    ACTIVE = "ACTIVE"
    FOLDED = "FOLDED"
    ALL_IN = "ALL_IN"
    ELIMINATED = "ELIMINATED"


class ActionType(str, Enum):
    FOLD = "FOLD"
    CHECK = "CHECK"
    CALL = "CALL"
    BET = "BET"
    RAISE = "RAISE"
    ALL_IN = "ALL_IN"


class Rejection(str, Enum):
    """Why an action was refused. The state handed back is the unchanged prior state."""

    HAND_NOT_IN_PROGRESS = "HAND_NOT_IN_PROGRESS"
    OUT_OF_TURN = "OUT_OF_TURN"
    CANNOT_ACT = "CANNOT_ACT"
    CANNOT_CHECK = "CANNOT_CHECK"
    NOTHING_TO_CALL = "NOTHING_TO_CALL"
    CANNOT_BET = "CANNOT_BET"
    CANNOT_RAISE = "CANNOT_RAISE"
    AMOUNT_REQUIRED = "AMOUNT_REQUIRED"
    BET_BELOW_MINIMUM = "BET_BELOW_MINIMUM"
    RAISE_NOT_ABOVE_BET = "RAISE_NOT_ABOVE_BET"
    RAISE_BELOW_MINIMUM = "RAISE_BELOW_MINIMUM"


@dataclass
class TableConfig:
    seats: int = 6
    starting_stack: int = 10_000
    sb: int = 50
    bb: int = 100


@dataclass
class Player:
    seat: int
    stack: int
    name: str = ""
    hole_cards: List[Card] = field(default_factory=list)
    current_bet: int = 0
    total_committed: int = 0
    status: PlayerStatus = PlayerStatus.ACTIVE

    @property
    def in_hand(self) -> bool:
        return self.status in (PlayerStatus.ACTIVE, PlayerStatus.ALL_IN)

    @property
    def can_act(self) -> bool:
        return self.status == PlayerStatus.ACTIVE and self.stack > 0

    def reset_for_hand(self) -> None:
        self.current_bet = 0
        self.total_committed = 0
        self.hole_cards = []
        self.status = PlayerStatus.ACTIVE if self.stack > 0 else PlayerStatus.ELIMINATED

    def reset_for_round(self) -> None:
        self.current_bet = 0

    def commit(self, amount: int) -> int:
        """Move up to ``amount`` chips from the stack into the pot; returns what was moved."""
        amount = min(self.stack, max(0, amount))
        self.stack -= amount
        self.current_bet += amount
        self.total_committed += amount
        if self.stack == 0 and self.status == PlayerStatus.ACTIVE:
            self.status = PlayerStatus.ALL_IN
        return amount


@dataclass
class BettingRound:
    highest_bet: int = 0
    min_raise: int = 0
    last_full_raise: int = 0
    acted_since_full_raise: Set[int] = field(default_factory=set)
    reopener: Optional[int] = None
    starting_seat: Optional[int] = None
    current_actor: Optional[int] = None
    has_acted: bool = False


@dataclass(frozen=True)
class Pot:
    amount: int
    eligible: Tuple[int, ...]


@dataclass
class GameState:
    players: List[Player]
    sb: int
    bb: int
    dealer: int = 0
    deck: List[Card] = field(default_factory=list)
    community: List[Card] = field(default_factory=list)
    phase: Phase = Phase.IDLE
    betting: BettingRound = field(default_factory=BettingRound)
    pots: List[Pot] = field(default_factory=list)
    winners: List[int] = field(default_factory=list)
    hand_over: bool = False
    hand_number: int = 0
    seed: Optional[int] = None
    hand_scores: Dict[int, HandScore] = field(default_factory=dict)
    events: List[Dict[str, object]] = field(default_factory=list)

    @property
    def pot_total(self) -> int:
        return sum(player.total_committed for player in self.players)

    @property
    def in_progress(self) -> bool:
        return self.phase not in (Phase.IDLE, Phase.SHOWDOWN) and not self.hand_over

    def clone(self) -> GameState:
        # Cards, pots, scores and recorded events are never mutated in place,
        # so copying the containers is enough.
        return replace(
            self,
            players=[replace(player, hole_cards=list(player.hole_cards)) for player in self.players],
            deck=list(self.deck),
            community=list(self.community),
            betting=replace(self.betting, acted_since_full_raise=set(self.betting.acted_since_full_raise)),
            pots=list(self.pots),
            winners=list(self.winners),
            hand_scores=dict(self.hand_scores),
            events=list(self.events),
        )


@dataclass
class LegalActions:
    can_fold: bool = False
    can_check: bool = False
    can_call: bool = False
    can_bet: bool = False
    can_raise: bool = False
    can_all_in: bool = False
    call_amount: int = 0
    min_total_bet: int = 0
    max_total_bet: int = 0

    @property
    def legal(self) -> List[ActionType]:
        flags = (
            (ActionType.FOLD, self.can_fold),
            (ActionType.CHECK, self.can_check),
            (ActionType.CALL, self.can_call),
            (ActionType.BET, self.can_bet),
            (ActionType.RAISE, self.can_raise),
            (ActionType.ALL_IN, self.can_all_in),
        )
        return [action for action, allowed in flags if allowed]


@dataclass(frozen=True)
class ActionResult:
    state: GameState
    rejection: Optional[Rejection] = None
    events: Tuple[Dict[str, object], ...] = ()

    @property
    def ok(self) -> bool:
        return self.rejection is None
