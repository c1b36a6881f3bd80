"""Detection of the 67 combo.

A combo is a SIX cell with a SEVEN cell directly to its right in the same
row. The order matters: SEVEN followed by SIX is not a combo, and neither is
vertical or diagonal contact.
"""

from __future__ import annotations

from typing import List

from .grid import Board, GridPosition
from .pieces import CellValue


def check_combo(board: Board) -> bool:
    height, width = board.shape
    for row in range(height):
        for col in range(width - 1):
            if board[row, col] == CellValue.SIX and board[row, col + 1] == CellValue.SEVEN:
                return True
    return False


def find_combo_pairs(board: Board) -> List[GridPosition]:
    """Every combo on the board, as the position of its SIX cell, row-major."""
    height, width = board.shape
    pairs: List[GridPosition] = []
    for row in range(height):
        for col in range(width - 1):
            if board[row, col] == CellValue.SIX and board[row, col + 1] == CellValue.SEVEN:
                pairs.append(GridPosition(row, col))
    return pairs
