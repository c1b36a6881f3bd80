from __future__ import annotations

from typing import Iterable, List, NamedTuple

import numpy as np

from .pieces import CellValue, Shape


BOARD_WIDTH = 10
BOARD_HEIGHT = 20
# Spawning needs these rows free.
SPAWN_ZONE_ROWS = 2

Board = np.ndarray

_VALID_CODES = np.array([int(v) for v in CellValue], dtype=np.int8)


class GridPosition(NamedTuple):
    row: int
    col: int


def _freeze(board: Board) -> Board:
    board.setflags(write=False)
    return board


def create_empty_board() -> Board:
    """Return a read-only BOARD_HEIGHT x BOARD_WIDTH grid of EMPTY cells."""
    return _freeze(np.zeros((BOARD_HEIGHT, BOARD_WIDTH), dtype=np.int8))


def clear_entire_board() -> Board:
    return create_empty_board()


def board_from_array(cells) -> Board:
    """Copy ``cells`` into a read-only board, checking shape and cell codes."""
    board = np.array(cells, dtype=np.int8)
    if board.shape != (BOARD_HEIGHT, BOARD_WIDTH):
        raise ValueError(
            f"board must have shape {(BOARD_HEIGHT, BOARD_WIDTH)}, got {board.shape}"
        )
    if not np.isin(board, _VALID_CODES).all():
        raise ValueError("board contains unknown cell codes")
    return _freeze(board)


def is_valid_position(board: Board, matrix: Shape, position: GridPosition) -> bool:
    """Check that every filled matrix cell is inside the walls, above the floor
    and on an empty cell. Cells above the top row are allowed so pieces can
    overhang the board while spawning.
    """
    height, width = board.shape
    for dr, dc in np.argwhere(matrix):
        row = position.row + int(dr)
        col = position.col + int(dc)
        if col < 0 or col >= width:
            return False
        if row >= height:
            return False
        if row < 0:
            continue
        if board[row, col] != CellValue.EMPTY:
            return False
    return True


def place_piece(board: Board, matrix: Shape, position: GridPosition, cell_value: CellValue) -> Board:
    """Return a new board with the piece written as ``cell_value``.

    Assumes the position is already validated; cells outside the grid are
    skipped rather than rejected.
    """
    height, width = board.shape
    new_board = board.copy()
    for dr, dc in np.argwhere(matrix):
        row = position.row + int(dr)
        col = position.col + int(dc)
        if 0 <= row < height and 0 <= col < width:
            new_board[row, col] = int(cell_value)
    return _freeze(new_board)


def get_filled_rows(board: Board) -> List[int]:
    full_rows = np.where(np.all(board != CellValue.EMPTY, axis=1))[0]
    return [int(r) for r in full_rows]


def clear_rows(board: Board, row_indices: Iterable[int]) -> Board:
    """Remove ``row_indices`` and add empty rows at the top.

    Remaining rows keep their relative order. An empty index list returns
    ``board`` itself.
    """
    rows = sorted(set(int(r) for r in row_indices))
    if not rows:
        return board
    height, width = board.shape
    remaining = np.delete(board, rows, axis=0)
    new_rows = np.zeros((height - remaining.shape[0], width), dtype=board.dtype)
    return _freeze(np.vstack((new_rows, remaining)))


def is_game_over(board: Board) -> bool:
    return bool(np.any(board[:SPAWN_ZONE_ROWS] != CellValue.EMPTY))
