from __future__ import annotations

from typing import Dict, Optional, Tuple

import numpy as np
import pytest

from tetris67.game import (
    ActivePiece,
    BOARD_HEIGHT,
    BOARD_WIDTH,
    CellValue,
    GamePhase,
    GameState,
    GridPosition,
    PieceType,
    Rotation,
    board_from_array,
)


def make_board(cells: Optional[Dict[Tuple[int, int], int]] = None, rows: Optional[Dict[int, int]] = None, holes=()):
    """Build a read-only board.

    ``rows`` fills whole rows with a cell code, ``holes`` then empties
    (row, col) cells, and ``cells`` sets individual cells last.
    """
    grid = np.zeros((BOARD_HEIGHT, BOARD_WIDTH), dtype=np.int8)
    for row, value in (rows or {}).items():
        grid[row, :] = int(value)
    for row, col in holes:
        grid[row, col] = CellValue.EMPTY
    for (row, col), value in (cells or {}).items():
        grid[row, col] = int(value)
    return board_from_array(grid)


def make_piece(kind: PieceType, row: int, col: int, rotation: Rotation = Rotation.SPAWN) -> ActivePiece:
    return ActivePiece(kind=kind, rotation=rotation, position=GridPosition(row, col))


def playing_state(board, piece: Optional[ActivePiece], next_piece: PieceType = PieceType.O, **kwargs) -> GameState:
    kwargs.setdefault("phase", GamePhase.PLAYING)
    return GameState(board=board, active_piece=piece, next_piece=next_piece, **kwargs)


@pytest.fixture
def empty_board():
    return make_board()
