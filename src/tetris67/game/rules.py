from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ScoreEventKind(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    QUAD = "quad"
    COMBO = "combo"


_KIND_BY_LINES = {
    1: ScoreEventKind.SINGLE,
    2: ScoreEventKind.DOUBLE,
    3: ScoreEventKind.TRIPLE,
    4: ScoreEventKind.QUAD,
}


@dataclass
class ScoringRules:
    line_clear_scores: tuple[int, int, int, int] = (100, 300, 500, 800)
    combo_base_score: int = 6700
    hard_drop_per_cell: int = 2
    soft_drop_per_cell: int = 1
    lines_per_level: int = 10
    base_drop_interval_ms: int = 1000
    drop_interval_step_ms: int = 100
    min_drop_interval_ms: int = 50

    def line_clear_score(self, lines: int, level: int) -> int:
        if lines <= 0 or level <= 0:
            return 0
        if lines > len(self.line_clear_scores):
            return 0
        return self.line_clear_scores[lines - 1] * level

    def combo_score(self, level: int) -> int:
        if level <= 0:
            return 0
        return self.combo_base_score * level

    def drop_score(self, cells_dropped: int) -> int:
        """Hard drop points. Soft drop is scored per step by the caller."""
        if cells_dropped <= 0:
            return 0
        return cells_dropped * self.hard_drop_per_cell

    def level_from_lines(self, total_lines: int) -> int:
        if total_lines <= 0:
            return 1
        return total_lines // self.lines_per_level + 1

    def drop_interval_ms(self, level: int) -> int:
        if level <= 0:
            return self.base_drop_interval_ms
        return max(
            self.min_drop_interval_ms,
            self.base_drop_interval_ms - (level - 1) * self.drop_interval_step_ms,
        )


DEFAULT_RULES = ScoringRules()


def score_event_kind(lines: int) -> Optional[ScoreEventKind]:
    return _KIND_BY_LINES.get(lines)


def line_clear_score(lines: int, level: int) -> int:
    return DEFAULT_RULES.line_clear_score(lines, level)


def combo_score(level: int) -> int:
    return DEFAULT_RULES.combo_score(level)


def drop_score(cells_dropped: int) -> int:
    return DEFAULT_RULES.drop_score(cells_dropped)


def level_from_lines(total_lines: int) -> int:
    return DEFAULT_RULES.level_from_lines(total_lines)


def drop_interval_from_level(level: int) -> int:
    return DEFAULT_RULES.drop_interval_ms(level)
