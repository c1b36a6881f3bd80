from __future__ import annotations

import random
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from .callouts import Callout, CalloutTrigger, pick_callout, trigger_for_lines
from .combo import check_combo, find_combo_pairs
from .grid import (
    GridPosition,
    clear_entire_board,
    clear_rows,
    create_empty_board,
    get_filled_rows,
    is_valid_position,
    place_piece,
)
from .movement import (
    ActivePiece,
    ghost_position,
    hard_drop,
    move_down,
    move_left,
    move_right,
    rotate_ccw,
    rotate_cw,
)
from .pieces import (
    PieceGenerator,
    PieceType,
    Rotation,
    cell_value_for,
    get_piece_matrix,
    weighted_generator,
)
from .rules import ScoringRules, ScoreEventKind, score_event_kind
from .state import (
    CommandResult,
    GamePhase,
    GameState,
    HardDropped,
    Locked,
    LockResult,
    Moved,
    NoActivity,
    Rejected,
    ScoreEvent,
)


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE_CW = 2
    ROTATE_CCW = 3
    SOFT_DROP = 4
    HARD_DROP = 5
    NONE = 6


@dataclass
class GameConfig:
    random_seed: Optional[int] = None
    spawn_row: int = 0


_MOVES: Dict[str, Callable] = {
    "left": move_left,
    "right": move_right,
    "down": move_down,
}

_ROTATIONS: Dict[str, Callable] = {
    "cw": rotate_cw,
    "ccw": rotate_ccw,
}


class GameStateManager:
    """Owns one session's snapshot and advances it per command or tick.

    Each command replaces the snapshot wholesale and returns a result that
    carries the new snapshot. Gameplay commands are rejected unless the phase
    is ``PLAYING`` with a falling piece; gravity timing is left to the caller,
    which should call ``tick()`` every ``drop_interval`` milliseconds.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        generator: Optional[PieceGenerator] = None,
        state: Optional[GameState] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.rng = random.Random(self.config.random_seed)
        # Callout words never touch the piece stream
        self.callout_rng = random.Random(self.config.random_seed)
        self._generator = generator or weighted_generator(self.rng)
        if state is None:
            state = GameState(
                board=create_empty_board(),
                active_piece=None,
                next_piece=self._generate_piece(),
            )
        self._state = state

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def drop_interval(self) -> int:
        """Gravity interval in ms for the current level."""
        return self.rules.drop_interval_ms(self._state.level)

    # ----- lifecycle -----

    def start_game(self) -> GameState:
        self._state = GameState(
            board=create_empty_board(),
            active_piece=None,
            next_piece=self._generate_piece(),
            phase=GamePhase.PLAYING,
        )
        self.spawn_piece()
        return self._state

    def pause(self) -> GameState:
        if self._state.phase == GamePhase.PLAYING:
            self._state = replace(self._state, phase=GamePhase.PAUSED)
        return self._state

    def resume(self) -> GameState:
        if self._state.phase == GamePhase.PAUSED:
            self._state = replace(self._state, phase=GamePhase.PLAYING)
        return self._state

    def spawn_piece(self) -> bool:
        """Bring the queued piece in at the top centre.

        Returns False and ends the game if the spawn position is blocked.
        """
        kind = self._state.next_piece
        matrix = get_piece_matrix(kind, Rotation.SPAWN)
        _, w = matrix.shape
        width = self._state.board.shape[1]
        position = GridPosition(self.config.spawn_row, (width - w) // 2)
        if not is_valid_position(self._state.board, matrix, position):
            self._state = replace(self._state, phase=GamePhase.GAME_OVER, active_piece=None)
            return False
        self._state = replace(
            self._state,
            active_piece=ActivePiece(kind=kind, rotation=Rotation.SPAWN, position=position),
            next_piece=self._generate_piece(),
        )
        return True

    # ----- commands -----

    def move_active_piece(self, direction: str) -> CommandResult:
        if not self._can_act():
            return Rejected(self._state)
        moved = _MOVES[direction](self._state.board, self._state.active_piece)
        if moved is None:
            return Rejected(self._state)
        self._state = replace(self._state, active_piece=moved)
        return Moved(self._state)

    def rotate_active_piece(self, direction: str) -> CommandResult:
        if not self._can_act():
            return Rejected(self._state)
        rotated = _ROTATIONS[direction](self._state.board, self._state.active_piece)
        if rotated is None:
            return Rejected(self._state)
        self._state = replace(self._state, active_piece=rotated)
        return Moved(self._state)

    def soft_drop(self) -> CommandResult:
        if not self._can_act():
            return Rejected(self._state)
        moved = move_down(self._state.board, self._state.active_piece)
        if moved is None:
            return Rejected(self._state)
        points = self.rules.soft_drop_per_cell
        self._state = replace(self._state, active_piece=moved, score=self._state.score + points)
        return Moved(self._state, points=points)

    def hard_drop_active_piece(self) -> CommandResult:
        if not self._can_act():
            return Rejected(self._state)
        dropped, distance = hard_drop(self._state.board, self._state.active_piece)
        points = self.rules.drop_score(distance)
        self._state = replace(self._state, active_piece=dropped, score=self._state.score + points)
        lock, callout = self._lock_piece()
        return HardDropped(self._state, distance=distance, drop_score=points, lock=lock, callout=callout)

    def tick(self) -> CommandResult:
        """One step of gravity: fall a row, or lock when the piece has landed."""
        if not self._can_act():
            return NoActivity(self._state)
        moved = move_down(self._state.board, self._state.active_piece)
        if moved is not None:
            self._state = replace(self._state, active_piece=moved)
            return Moved(self._state)
        lock, callout = self._lock_piece()
        return Locked(self._state, lock=lock, callout=callout)

    def step(self, action: Action) -> CommandResult:
        if action == Action.LEFT:
            return self.move_active_piece("left")
        if action == Action.RIGHT:
            return self.move_active_piece("right")
        if action == Action.ROTATE_CW:
            return self.rotate_active_piece("cw")
        if action == Action.ROTATE_CCW:
            return self.rotate_active_piece("ccw")
        if action == Action.SOFT_DROP:
            return self.soft_drop()
        if action == Action.HARD_DROP:
            return self.hard_drop_active_piece()
        return NoActivity(self._state)

    # ----- read-only views -----

    def ghost_position(self) -> Optional[GridPosition]:
        piece = self._state.active_piece
        if piece is None:
            return None
        return ghost_position(self._state.board, piece)

    def board_view(self) -> np.ndarray:
        # Overlay the falling piece as negative codes on a writable copy
        view = self._state.board.copy()
        piece = self._state.active_piece
        if piece is not None:
            height, width = view.shape
            for row, col in piece.cells():
                if 0 <= row < height and 0 <= col < width:
                    view[row, col] = -int(cell_value_for(piece.kind))
        return view

    # ----- internals -----

    def _can_act(self) -> bool:
        return self._state.phase == GamePhase.PLAYING and self._state.active_piece is not None

    def _generate_piece(self) -> PieceType:
        return PieceType(self._generator())

    def _lock_piece(self) -> Tuple[LockResult, Optional[Callout]]:
        state = self._state
        piece = state.active_piece
        assert piece is not None
        height, width = state.board.shape
        level = state.level

        board = place_piece(state.board, piece.matrix(), piece.position, cell_value_for(piece.kind))

        score = state.score
        lines_total = state.lines_cleared
        combo_count = state.combo_count
        cleared_rows: Tuple[int, ...] = ()
        combo_pairs: Tuple[GridPosition, ...] = ()
        score_event: Optional[ScoreEvent] = None
        callout: Optional[Callout] = None

        # The combo wins outright: full rows on the same lock are not scored.
        combo = check_combo(board)
        if combo:
            combo_pairs = tuple(find_combo_pairs(board))
            points = self.rules.combo_score(level)
            score += points
            combo_count += 1
            board = clear_entire_board()
            score_event = ScoreEvent(kind=ScoreEventKind.COMBO, lines=0, level=level, points=points)
            callout = pick_callout(CalloutTrigger.COMBO, combo_pairs[0], self.callout_rng)
        else:
            filled = get_filled_rows(board)
            if filled:
                board = clear_rows(board, filled)
                cleared_rows = tuple(filled)
                lines_total += len(filled)
                points = self.rules.line_clear_score(len(filled), level)
                score += points
                kind = score_event_kind(len(filled))
                if kind is not None:
                    score_event = ScoreEvent(kind=kind, lines=len(filled), level=level, points=points)
                trigger = trigger_for_lines(len(filled))
                if trigger is not None:
                    callout = pick_callout(trigger, GridPosition(filled[0], width // 2), self.callout_rng)

        new_level = self.rules.level_from_lines(lines_total)
        if new_level > level and not combo:
            callout = pick_callout(CalloutTrigger.LEVEL_UP, GridPosition(height // 2, width // 2), self.callout_rng)

        self._state = replace(
            state,
            board=board,
            active_piece=None,
            score=score,
            level=new_level,
            lines_cleared=lines_total,
            combo_count=combo_count,
        )

        spawned = self.spawn_piece()
        if not spawned:
            callout = pick_callout(CalloutTrigger.GAME_OVER, GridPosition(height // 2, width // 2), self.callout_rng)

        lock = LockResult(
            board=board,
            cleared_rows=cleared_rows,
            score_event=score_event,
            combo_triggered=combo,
            game_over=not spawned,
            combo_pairs=combo_pairs,
        )
        return lock, callout
