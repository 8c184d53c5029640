"""Rules-exact No-Limit Texas Hold'em engine: pure state transitions, side pots and hand ranking."""

from .cards import Card, RANKS, SUITS, build_deck, burn, deal, deal_community, new_deck, parse_cards, shuffle
from .errors import DeckExhaustedError, EngineError
from .evaluator import HandScore, INCOMPLETE, compare_hands, evaluate_best, evaluate_hand
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
from .models import (
    ActionResult,
    ActionType,
    BettingRound,
    GameState,
    LegalActions,
    Phase,
    Player,
    PlayerStatus,
    Pot,
    Rejection,
    TableConfig,
)
from .pots import award_pots, compute_side_pots, resolve_showdown
from .table import Table
from .views import seat_view, spectator_view

__all__ = [
    "Card",
    "RANKS",
    "SUITS",
    "build_deck",
    "burn",
    "deal",
    "deal_community",
    "new_deck",
    "parse_cards",
    "shuffle",
    "DeckExhaustedError",
    "EngineError",
    "HandScore",
    "INCOMPLETE",
    "compare_hands",
    "evaluate_best",
    "evaluate_hand",
    "apply_action",
    "create_initial_game_state",
    "create_players",
    "is_hand_complete",
    "legal_actions",
    "next_actor",
    "rotate_dealer",
    "start_hand",
    "ActionResult",
    "ActionType",
    "BettingRound",
    "GameState",
    "LegalActions",
    "Phase",
    "Player",
    "PlayerStatus",
    "Pot",
    "Rejection",
    "TableConfig",
    "award_pots",
    "compute_side_pots",
    "resolve_showdown",
    "Table",
    "seat_view",
    "spectator_view",
]
