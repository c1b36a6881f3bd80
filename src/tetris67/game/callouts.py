"""Flavour words shown by front ends after notable locks.

Presentation only: nothing in the engine depends on which word is chosen.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from .grid import GridPosition


class CalloutTier(str, Enum):
    S = "S"
    A = "A"
    B = "B"
    C = "C"
    GAME_OVER = "game_over"


class CalloutTrigger(str, Enum):
    COMBO = "combo"
    LINES_4 = "lines_4"
    LINES_3 = "lines_3"
    LINES_2 = "lines_2"
    LINES_1 = "lines_1"
    LEVEL_UP = "level_up"
    GAME_OVER = "game_over"


TIER_WORDS: Dict[CalloutTier, Tuple[str, ...]] = {
    CalloutTier.S: ("sigma", "GOAT", "rizz", "67!!!", "SLAY"),
    CalloutTier.A: ("aura", "brat", "oporowo", "glamur", "azbest", "fire", "based"),
    CalloutTier.B: ("brainrot", "delulu", "skibidi", "bussin", "vibe", "no cap"),
    CalloutTier.C: ("bambik", "cringe", "womp womp", "yapping", "mid", "sus"),
    CalloutTier.GAME_OVER: ("womp womp", "L", "skill issue", "oof", "RIP"),
}

LEVEL_UP_WORDS: Tuple[str, ...] = ("level up!", "sigma grind", "glow up")

TRIGGER_TIERS: Dict[CalloutTrigger, CalloutTier] = {
    CalloutTrigger.COMBO: CalloutTier.S,
    CalloutTrigger.LINES_4: CalloutTier.A,
    CalloutTrigger.LINES_3: CalloutTier.A,
    CalloutTrigger.LINES_2: CalloutTier.B,
    CalloutTrigger.LINES_1: CalloutTier.C,
    CalloutTrigger.LEVEL_UP: CalloutTier.A,
    CalloutTrigger.GAME_OVER: CalloutTier.GAME_OVER,
}

_LINE_TRIGGERS = {
    1: CalloutTrigger.LINES_1,
    2: CalloutTrigger.LINES_2,
    3: CalloutTrigger.LINES_3,
    4: CalloutTrigger.LINES_4,
}


@dataclass(frozen=True)
class Callout:
    word: str
    tier: CalloutTier
    position: GridPosition


def trigger_for_lines(lines: int) -> Optional[CalloutTrigger]:
    return _LINE_TRIGGERS.get(lines)


def words_for(trigger: CalloutTrigger) -> Tuple[str, ...]:
    # level-up keeps A-tier styling but has its own pool
    if trigger is CalloutTrigger.LEVEL_UP:
        return LEVEL_UP_WORDS
    return TIER_WORDS[TRIGGER_TIERS[trigger]]


def pick_callout(
    trigger: CalloutTrigger,
    position: GridPosition,
    rng: Optional[random.Random] = None,
) -> Callout:
    word = (rng or random).choice(words_for(trigger))
    return Callout(word=word, tier=TRIGGER_TIERS[trigger], position=position)
