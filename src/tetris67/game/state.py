"""Snapshot and result types produced by the game state manager.

Every command returns exactly one of the result variants below, each carrying
the snapshot that is current after the command ran:

- ``Moved``: the falling piece translated or rotated (``points`` is the soft
  drop award, 0 otherwise)
- ``Locked``: gravity could not move the piece, so it was locked
- ``HardDropped``: the piece was dropped and locked
- ``Rejected``: the command was blocked or issued outside ``PLAYING``
- ``NoActivity``: a tick or idle step that had nothing to act on
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from .callouts import Callout
from .grid import Board, GridPosition
from .movement import ActivePiece
from .pieces import PieceType
from .rules import ScoreEventKind


class GamePhase(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "game_over"


@dataclass(frozen=True, eq=False)
class GameState:
    board: Board
    active_piece: Optional[ActivePiece]
    next_piece: PieceType
    score: int = 0
    level: int = 1
    lines_cleared: int = 0
    phase: GamePhase = GamePhase.IDLE
    combo_count: int = 0


@dataclass(frozen=True)
class ScoreEvent:
    kind: ScoreEventKind
    lines: int
    level: int
    points: int


@dataclass(frozen=True, eq=False)
class LockResult:
    board: Board
    cleared_rows: Tuple[int, ...] = ()
    score_event: Optional[ScoreEvent] = None
    combo_triggered: bool = False
    game_over: bool = False
    combo_pairs: Tuple[GridPosition, ...] = ()


@dataclass(frozen=True, eq=False)
class Moved:
    state: GameState
    points: int = 0


@dataclass(frozen=True, eq=False)
class Locked:
    state: GameState
    lock: LockResult
    callout: Optional[Callout] = None


@dataclass(frozen=True, eq=False)
class HardDropped:
    state: GameState
    distance: int
    drop_score: int
    lock: LockResult
    callout: Optional[Callout] = None


@dataclass(frozen=True, eq=False)
class Rejected:
    state: GameState


@dataclass(frozen=True, eq=False)
class NoActivity:
    state: GameState


CommandResult = Union[Moved, Locked, HardDropped, Rejected, NoActivity]
