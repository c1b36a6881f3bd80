from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Tuple

from .grid import Board, GridPosition, is_valid_position
from .pieces import PieceType, Rotation, Shape, get_piece_matrix


@dataclass(frozen=True)
class ActivePiece:
    kind: PieceType
    rotation: Rotation = Rotation.SPAWN
    position: GridPosition = GridPosition(0, 0)

    def matrix(self) -> Shape:
        return get_piece_matrix(self.kind, self.rotation)

    def cells(self) -> List[Tuple[int, int]]:
        """Absolute (row, col) of every filled cell, including rows above the board."""
        s = self.matrix()
        h, w = s.shape
        cells: List[Tuple[int, int]] = []
        for dy in range(h):
            for dx in range(w):
                if s[dy, dx]:
                    cells.append((self.position.row + dy, self.position.col + dx))
        return cells

    def shifted(self, d_row: int, d_col: int) -> "ActivePiece":
        return replace(
            self,
            position=GridPosition(self.position.row + d_row, self.position.col + d_col),
        )


# Kick offsets are (dx, dy) with +x right and +y down, tried in order.
Offset = Tuple[int, int]
KickTable = Dict[Tuple[Rotation, Rotation], Tuple[Offset, ...]]

_R = Rotation

STANDARD_KICKS: KickTable = {
    (_R.SPAWN, _R.CW): ((0, 0), (-1, 0), (-1, -1), (0, 2), (-1, 2)),
    (_R.CW, _R.SPAWN): ((0, 0), (1, 0), (1, 1), (0, -2), (1, -2)),
    (_R.CW, _R.R180): ((0, 0), (1, 0), (1, 1), (0, -2), (1, -2)),
    (_R.R180, _R.CW): ((0, 0), (-1, 0), (-1, -1), (0, 2), (-1, 2)),
    (_R.R180, _R.CCW): ((0, 0), (1, 0), (1, -1), (0, 2), (1, 2)),
    (_R.CCW, _R.R180): ((0, 0), (-1, 0), (-1, 1), (0, -2), (-1, -2)),
    (_R.CCW, _R.SPAWN): ((0, 0), (-1, 0), (-1, 1), (0, -2), (-1, -2)),
    (_R.SPAWN, _R.CCW): ((0, 0), (1, 0), (1, -1), (0, 2), (1, 2)),
}

I_KICKS: KickTable = {
    (_R.SPAWN, _R.CW): ((0, 0), (-2, 0), (1, 0), (-2, 1), (1, -2)),
    (_R.CW, _R.SPAWN): ((0, 0), (2, 0), (-1, 0), (2, -1), (-1, 2)),
    (_R.CW, _R.R180): ((0, 0), (-1, 0), (2, 0), (-1, -2), (2, 1)),
    (_R.R180, _R.CW): ((0, 0), (1, 0), (-2, 0), (1, 2), (-2, -1)),
    (_R.R180, _R.CCW): ((0, 0), (2, 0), (-1, 0), (2, -1), (-1, 2)),
    (_R.CCW, _R.R180): ((0, 0), (-2, 0), (1, 0), (-2, 1), (1, -2)),
    (_R.CCW, _R.SPAWN): ((0, 0), (1, 0), (-2, 0), (1, 2), (-2, -1)),
    (_R.SPAWN, _R.CCW): ((0, 0), (-1, 0), (2, 0), (-1, -2), (2, 1)),
}

# O looks the same in every state; only the bare rotation is tried.
O_KICKS: KickTable = {key: ((0, 0),) for key in STANDARD_KICKS}

# SIX/SEVEN change bounding box between 3x2 and 2x3: sideways nudges, then up.
SPECIAL_KICKS: KickTable = {
    (_R.SPAWN, _R.CW): ((0, 0), (-1, 0), (1, 0), (0, -1)),
    (_R.CW, _R.SPAWN): ((0, 0), (1, 0), (-1, 0), (0, -1)),
    (_R.CW, _R.R180): ((0, 0), (1, 0), (-1, 0), (0, -1)),
    (_R.R180, _R.CW): ((0, 0), (-1, 0), (1, 0), (0, -1)),
    (_R.R180, _R.CCW): ((0, 0), (1, 0), (-1, 0), (0, -1)),
    (_R.CCW, _R.R180): ((0, 0), (-1, 0), (1, 0), (0, -1)),
    (_R.CCW, _R.SPAWN): ((0, 0), (-1, 0), (1, 0), (0, -1)),
    (_R.SPAWN, _R.CCW): ((0, 0), (1, 0), (-1, 0), (0, -1)),
}

KICK_TABLES: Dict[PieceType, KickTable] = {
    PieceType.I: I_KICKS,
    PieceType.O: O_KICKS,
    PieceType.T: STANDARD_KICKS,
    PieceType.S: STANDARD_KICKS,
    PieceType.Z: STANDARD_KICKS,
    PieceType.J: STANDARD_KICKS,
    PieceType.L: STANDARD_KICKS,
    PieceType.SIX: SPECIAL_KICKS,
    PieceType.SEVEN: SPECIAL_KICKS,
}


def get_kicks(kind: PieceType, from_rotation: Rotation, to_rotation: Rotation) -> Tuple[Offset, ...]:
    return KICK_TABLES[kind][(from_rotation, to_rotation)]


def _translate(board: Board, piece: ActivePiece, d_row: int, d_col: int) -> Optional[ActivePiece]:
    moved = piece.shifted(d_row, d_col)
    if is_valid_position(board, moved.matrix(), moved.position):
        return moved
    return None


def move_left(board: Board, piece: ActivePiece) -> Optional[ActivePiece]:
    return _translate(board, piece, 0, -1)


def move_right(board: Board, piece: ActivePiece) -> Optional[ActivePiece]:
    return _translate(board, piece, 0, 1)


def move_down(board: Board, piece: ActivePiece) -> Optional[ActivePiece]:
    """One row of gravity; ``None`` means the piece has landed."""
    return _translate(board, piece, 1, 0)


def try_rotate(
    board: Board,
    piece: ActivePiece,
    new_rotation: Rotation,
    kicks: Sequence[Offset],
) -> Optional[ActivePiece]:
    """Return the first kick candidate that fits, or ``None`` if none does."""
    matrix = get_piece_matrix(piece.kind, new_rotation)
    for dx, dy in kicks:
        position = GridPosition(piece.position.row + dy, piece.position.col + dx)
        if is_valid_position(board, matrix, position):
            return ActivePiece(kind=piece.kind, rotation=new_rotation, position=position)
    return None


def rotate_cw(board: Board, piece: ActivePiece) -> Optional[ActivePiece]:
    new_rotation = piece.rotation.cw()
    return try_rotate(board, piece, new_rotation, get_kicks(piece.kind, piece.rotation, new_rotation))


def rotate_ccw(board: Board, piece: ActivePiece) -> Optional[ActivePiece]:
    new_rotation = piece.rotation.ccw()
    return try_rotate(board, piece, new_rotation, get_kicks(piece.kind, piece.rotation, new_rotation))


def hard_drop(board: Board, piece: ActivePiece) -> Tuple[ActivePiece, int]:
    """Drop ``piece`` to its resting row; returns the piece and rows travelled."""
    matrix = piece.matrix()
    distance = 0
    row = piece.position.row
    while is_valid_position(board, matrix, GridPosition(row + 1, piece.position.col)):
        row += 1
        distance += 1
    return piece.shifted(distance, 0), distance


def ghost_position(board: Board, piece: ActivePiece) -> GridPosition:
    landed, _ = hard_drop(board, piece)
    return landed.position
