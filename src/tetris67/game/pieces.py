from __future__ import annotations

import itertools
import random
from enum import IntEnum
from typing import Callable, Dict, Iterable, Optional, Tuple

import numpy as np


class CellValue(IntEnum):
    EMPTY = 0
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7
    SIX = 8
    SEVEN = 9


class PieceType(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7
    SIX = 8  # pentomino, interlocks with SEVEN into a 3x3 block
    SEVEN = 9


class Rotation(IntEnum):
    SPAWN = 0
    CW = 1
    R180 = 2
    CCW = 3

    def cw(self) -> "Rotation":
        return Rotation((self + 1) % 4)

    def ccw(self) -> "Rotation":
        return Rotation((self + 3) % 4)


STANDARD_PIECE_TYPES: Tuple[PieceType, ...] = (
    PieceType.I,
    PieceType.O,
    PieceType.T,
    PieceType.S,
    PieceType.Z,
    PieceType.J,
    PieceType.L,
)
SPECIAL_PIECE_TYPES: Tuple[PieceType, ...] = (PieceType.SIX, PieceType.SEVEN)

PieceGenerator = Callable[[], PieceType]
Shape = np.ndarray


def _rot90(shape: Shape, k: int) -> Shape:
    k = k % 4
    if k == 0:
        return shape
    return np.rot90(shape, k, axes=(1, 0))  # rotate clockwise when k>0


# Spawn orientations. Standard pieces sit in their full SRS bounding box so
# that clockwise rotation of the box yields the SRS states directly.
BASE_SHAPES: Dict[PieceType, Shape] = {
    PieceType.I: np.array([[0, 0, 0, 0], [1, 1, 1, 1], [0, 0, 0, 0], [0, 0, 0, 0]], dtype=np.int8),
    PieceType.O: np.array([[1, 1], [1, 1]], dtype=np.int8),
    PieceType.T: np.array([[0, 1, 0], [1, 1, 1], [0, 0, 0]], dtype=np.int8),
    PieceType.S: np.array([[0, 1, 1], [1, 1, 0], [0, 0, 0]], dtype=np.int8),
    PieceType.Z: np.array([[1, 1, 0], [0, 1, 1], [0, 0, 0]], dtype=np.int8),
    PieceType.J: np.array([[1, 0, 0], [1, 1, 1], [0, 0, 0]], dtype=np.int8),
    PieceType.L: np.array([[0, 0, 1], [1, 1, 1], [0, 0, 0]], dtype=np.int8),
    PieceType.SIX: np.array([[1, 0], [1, 1], [1, 1]], dtype=np.int8),
    PieceType.SEVEN: np.array([[1, 1], [0, 1], [0, 1]], dtype=np.int8),
}


def _build_rotations(base: Shape) -> Tuple[Shape, Shape, Shape, Shape]:
    rotations = []
    for k in range(4):
        matrix = np.ascontiguousarray(_rot90(base, k), dtype=np.int8)
        matrix.setflags(write=False)
        rotations.append(matrix)
    return tuple(rotations)  # type: ignore[return-value]


PIECE_ROTATIONS: Dict[PieceType, Tuple[Shape, Shape, Shape, Shape]] = {
    kind: _build_rotations(shape) for kind, shape in BASE_SHAPES.items()
}

PIECE_CELL_COUNTS: Dict[PieceType, int] = {
    PieceType.I: 4,
    PieceType.O: 4,
    PieceType.T: 4,
    PieceType.S: 4,
    PieceType.Z: 4,
    PieceType.J: 4,
    PieceType.L: 4,
    PieceType.SIX: 5,
    PieceType.SEVEN: 4,
}

CELL_VALUES: Dict[PieceType, CellValue] = {
    PieceType.I: CellValue.I,
    PieceType.O: CellValue.O,
    PieceType.T: CellValue.T,
    PieceType.S: CellValue.S,
    PieceType.Z: CellValue.Z,
    PieceType.J: CellValue.J,
    PieceType.L: CellValue.L,
    PieceType.SIX: CellValue.SIX,
    PieceType.SEVEN: CellValue.SEVEN,
}

# Cumulative thresholds for the weighted draw.
SIX_THRESHOLD = 0.1
SEVEN_THRESHOLD = 0.2


def get_piece_matrix(kind: PieceType, rotation: int) -> Shape:
    """Return the read-only 0/1 matrix of ``kind`` in the given rotation state."""
    return PIECE_ROTATIONS[kind][rotation]


def get_piece_cell_count(kind: PieceType) -> int:
    return PIECE_CELL_COUNTS[kind]


def cell_value_for(kind: PieceType) -> CellValue:
    return CELL_VALUES[kind]


def draw_piece_type(rng: Optional[random.Random] = None) -> PieceType:
    """Weighted draw: SIX and SEVEN at 10% each, standard pieces share the rest.

    A single uniform roll is compared against cumulative thresholds, special
    pieces first, then split evenly over the seven standard pieces.
    """
    roll = (rng or random).random()
    if roll < SIX_THRESHOLD:
        return PieceType.SIX
    if roll < SEVEN_THRESHOLD:
        return PieceType.SEVEN
    share = (1.0 - SEVEN_THRESHOLD) / len(STANDARD_PIECE_TYPES)
    index = int((roll - SEVEN_THRESHOLD) // share)
    # float edge at roll -> 1.0
    index = min(index, len(STANDARD_PIECE_TYPES) - 1)
    return STANDARD_PIECE_TYPES[index]


def weighted_generator(rng: Optional[random.Random] = None) -> PieceGenerator:
    rng = rng or random.Random()
    return lambda: draw_piece_type(rng)


def fixed_sequence(kinds: Iterable[PieceType]) -> PieceGenerator:
    """Generator cycling through ``kinds`` forever, for tests and tooling."""
    cycle = itertools.cycle(list(kinds))
    return lambda: next(cycle)
