from __future__ import annotations

from typing import Tuple

Color = Tuple[int, int, int]

BACKGROUND: Color = (26, 26, 46)
EMPTY_CELL: Color = (36, 36, 54)
LINE_FLASH: Color = (255, 255, 255)
COMBO_FLASH: Color = (255, 0, 255)

# Neon palette; the two special pieces share the magenta/pink pair.
CELL_COLORS = {
    0: EMPTY_CELL,
    1: (176, 38, 255),   # I
    2: (137, 207, 240),  # O
    3: (106, 27, 154),   # T
    4: (57, 255, 20),    # S
    5: (138, 27, 27),    # Z
    6: (0, 128, 128),    # J
    7: (31, 142, 241),   # L
    8: (255, 0, 255),    # SIX
    9: (255, 105, 180),  # SEVEN
}


def color_for_value(v: int) -> Color:
    # falling piece cells are negative in board views
    return CELL_COLORS.get(abs(v), (200, 200, 200))
