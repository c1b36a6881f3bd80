"""Game module for tetris67.

Exports the core engine and supporting types:
- CellValue / PieceType / Rotation: piece catalog enums
- ActivePiece: the falling piece, with movement and SRS rotation helpers
- ScoringRules: scoring, level and gravity-speed formulas
- GameState / LockResult / ScoreEvent: immutable snapshots and lock outcomes
- GameStateManager: command and tick driven state machine
"""

from .pieces import (
    CellValue,
    PieceType,
    Rotation,
    STANDARD_PIECE_TYPES,
    SPECIAL_PIECE_TYPES,
    get_piece_matrix,
    draw_piece_type,
    weighted_generator,
    fixed_sequence,
)
from .grid import BOARD_HEIGHT, BOARD_WIDTH, GridPosition, create_empty_board, board_from_array
from .movement import ActivePiece
from .combo import check_combo, find_combo_pairs
from .rules import ScoringRules, ScoreEventKind
from .callouts import Callout, CalloutTier
from .state import (
    GamePhase,
    GameState,
    ScoreEvent,
    LockResult,
    Moved,
    Locked,
    HardDropped,
    Rejected,
    NoActivity,
    CommandResult,
)
from .core import GameStateManager, GameConfig, Action

__all__ = [
    "CellValue",
    "PieceType",
    "Rotation",
    "STANDARD_PIECE_TYPES",
    "SPECIAL_PIECE_TYPES",
    "get_piece_matrix",
    "draw_piece_type",
    "weighted_generator",
    "fixed_sequence",
    "BOARD_HEIGHT",
    "BOARD_WIDTH",
    "GridPosition",
    "create_empty_board",
    "board_from_array",
    "ActivePiece",
    "check_combo",
    "find_combo_pairs",
    "ScoringRules",
    "ScoreEventKind",
    "Callout",
    "CalloutTier",
    "GamePhase",
    "GameState",
    "ScoreEvent",
    "LockResult",
    "Moved",
    "Locked",
    "HardDropped",
    "Rejected",
    "NoActivity",
    "CommandResult",
    "GameStateManager",
    "GameConfig",
    "Action",
]
