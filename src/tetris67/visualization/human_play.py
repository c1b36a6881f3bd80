from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import pygame

from tetris67.game import (
    Action,
    Callout,
    CommandResult,
    GamePhase,
    GameStateManager,
    GridPosition,
    HardDropped,
    Locked,
)
from .renderer import Renderer


KEY_TO_ACTION: Dict[int, Action] = {
    pygame.K_LEFT: Action.LEFT,
    pygame.K_RIGHT: Action.RIGHT,
    pygame.K_UP: Action.ROTATE_CW,
    pygame.K_z: Action.ROTATE_CCW,
    pygame.K_DOWN: Action.SOFT_DROP,
    pygame.K_SPACE: Action.HARD_DROP,
}

# Held-key auto repeat: first repeat after DAS_DELAY_MS, then every ARR_INTERVAL_MS
DAS_DELAY_MS = 167
ARR_INTERVAL_MS = 33
REPEATABLE_ACTIONS = frozenset({Action.LEFT, Action.RIGHT, Action.SOFT_DROP})

CALLOUT_MS = 1200
LINE_FLASH_MS = 200
COMBO_FLASH_MS = 300


def handle_key(game: GameStateManager, key: int) -> Optional[CommandResult]:
    """Translate one key press into an engine command.

    P toggles pause, R restarts after a game over; everything else goes
    through ``KEY_TO_ACTION``. The engine itself rejects gameplay commands
    while paused.
    """
    phase = game.state.phase
    if key == pygame.K_p:
        if phase == GamePhase.PLAYING:
            game.pause()
        elif phase == GamePhase.PAUSED:
            game.resume()
        return None
    if key == pygame.K_r and phase in (GamePhase.GAME_OVER, GamePhase.IDLE):
        game.start_game()
        return None
    action = KEY_TO_ACTION.get(key)
    if action is None:
        return None
    return game.step(action)


@dataclass
class HeldKey:
    pressed_at: int
    last_repeat: int = 0
    repeating: bool = False


class PlaySession:
    """Timing around one game: held-key repeat, gravity and lock effects.

    All methods take the current time in ms, so the loop in ``run`` is the
    only place that reads the pygame clock.
    """

    def __init__(self, game: GameStateManager, now: int) -> None:
        self.game = game
        self.last_fall = now
        self.held: Dict[int, HeldKey] = {}
        self.callout: Optional[Callout] = None
        self.callout_until = 0
        self.flash_rows: Tuple[int, ...] = ()
        self.combo_cells: Tuple[GridPosition, ...] = ()
        self.flash_until = 0

    def key_down(self, key: int, now: int) -> Optional[CommandResult]:
        before = self.game.state.phase
        result = handle_key(self.game, key)
        after = self.game.state.phase
        if after != GamePhase.PLAYING:
            self.held.clear()
        else:
            if before != GamePhase.PLAYING:
                # resumed or restarted: gravity counts from now
                self.last_fall = now
            if KEY_TO_ACTION.get(key) in REPEATABLE_ACTIONS:
                self.held[key] = HeldKey(pressed_at=now)
        self._note(result, now)
        return result

    def key_up(self, key: int) -> None:
        self.held.pop(key, None)

    def update(self, now: int) -> List[CommandResult]:
        """Fire due key repeats and the gravity tick, then expire effects."""
        results: List[CommandResult] = []
        if self.game.state.phase != GamePhase.PLAYING:
            self.held.clear()
        for key, held in list(self.held.items()):
            if not held.repeating:
                if now - held.pressed_at < DAS_DELAY_MS:
                    continue
                held.repeating = True
            elif now - held.last_repeat < ARR_INTERVAL_MS:
                continue
            held.last_repeat = now
            results.append(self.game.step(KEY_TO_ACTION[key]))

        # Interval re-read every frame so level changes apply at once
        if self.game.state.phase == GamePhase.PLAYING and now - self.last_fall >= self.game.drop_interval:
            results.append(self.game.tick())
            self.last_fall = now

        for result in results:
            self._note(result, now)
        if self.callout is not None and now > self.callout_until:
            self.callout = None
        if now > self.flash_until:
            self.flash_rows = ()
            self.combo_cells = ()
        return results

    def _note(self, result: Optional[CommandResult], now: int) -> None:
        if isinstance(result, HardDropped):
            self.last_fall = now
        if not isinstance(result, (Locked, HardDropped)):
            return
        if result.callout is not None:
            self.callout, self.callout_until = result.callout, now + CALLOUT_MS
        lock = result.lock
        if lock.combo_triggered:
            self.flash_rows, self.combo_cells = (), lock.combo_pairs
            self.flash_until = now + COMBO_FLASH_MS
        elif lock.cleared_rows:
            self.flash_rows, self.combo_cells = lock.cleared_rows, ()
            self.flash_until = now + LINE_FLASH_MS


def run(cell_size: int = 30) -> None:
    pygame.init()
    now = pygame.time.get_ticks
    try:
        clock = pygame.time.Clock()
        game = GameStateManager()
        game.start_game()
        renderer = Renderer(cell_size=cell_size)

        screen = pygame.display.set_mode(renderer.window_size(game.state.board.shape))
        pygame.display.set_caption("tetris67")

        session = PlaySession(game, now())

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                        continue
                    session.key_down(event.key, now())
                elif event.type == pygame.KEYUP:
                    session.key_up(event.key)

            session.update(now())

            ghost = game.ghost_position()
            renderer.draw(
                screen,
                game.state,
                game.board_view(),
                ghost_row=ghost.row if ghost is not None else None,
                callout=session.callout,
                flash_rows=session.flash_rows,
                combo_cells=session.combo_cells,
            )
            clock.tick(60)
    finally:
        pygame.quit()


if __name__ == "__main__":  # pragma: no cover
    run()
