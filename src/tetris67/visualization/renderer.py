from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import pygame

from tetris67.game import Callout, GamePhase, GameState, GridPosition, SPECIAL_PIECE_TYPES, get_piece_matrix
from tetris67.game.pieces import Rotation
from .palette import BACKGROUND, COMBO_FLASH, LINE_FLASH, color_for_value


class Renderer:
    """Draws a game snapshot; never touches the engine."""

    def __init__(self, cell_size: int = 30, margin: int = 20) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self._font: Optional[pygame.font.Font] = None

    def window_size(self, board_shape) -> tuple[int, int]:
        h, w = board_shape
        side_panel = 7 * self.cell_size
        return (
            self.margin * 3 + w * self.cell_size + side_panel,
            self.margin * 2 + h * self.cell_size,
        )

    def _font_for(self) -> pygame.font.Font:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 26)
        return self._font

    def _grid_surface(self, view: np.ndarray, ghost_row: Optional[int], state: GameState) -> pygame.Surface:
        h, w = view.shape
        surf = pygame.Surface((w * self.cell_size, h * self.cell_size))
        surf.fill(BACKGROUND)
        for y in range(h):
            for x in range(w):
                rect = pygame.Rect(
                    x * self.cell_size,
                    y * self.cell_size,
                    self.cell_size - 1,
                    self.cell_size - 1,
                )
                pygame.draw.rect(surf, color_for_value(int(view[y, x])), rect)
        piece = state.active_piece
        if piece is not None and ghost_row is not None and ghost_row != piece.position.row:
            d_row = ghost_row - piece.position.row
            color = color_for_value(int(piece.kind))
            for row, col in piece.cells():
                if 0 <= row + d_row < h:
                    rect = pygame.Rect(
                        col * self.cell_size,
                        (row + d_row) * self.cell_size,
                        self.cell_size - 1,
                        self.cell_size - 1,
                    )
                    pygame.draw.rect(surf, color, rect, 2)
        return surf

    def _draw_effects(
        self,
        surf: pygame.Surface,
        flash_rows: Sequence[int],
        combo_cells: Sequence[GridPosition],
    ) -> None:
        w, h = surf.get_size()
        overlay = pygame.Surface((w, h), pygame.SRCALPHA)
        for row in flash_rows:
            overlay.fill((*LINE_FLASH, 200), pygame.Rect(0, row * self.cell_size, w, self.cell_size))
        if combo_cells:
            overlay.fill((*COMBO_FLASH, 110))
        surf.blit(overlay, (0, 0))
        # outline each SIX cell together with the SEVEN cell to its right
        for pos in combo_cells:
            rect = pygame.Rect(pos.col * self.cell_size, pos.row * self.cell_size, self.cell_size * 2, self.cell_size)
            pygame.draw.rect(surf, (255, 255, 255), rect, 3)

    def _draw_panel(self, screen: pygame.Surface, state: GameState, x0: int) -> None:
        font = self._font_for()
        y = self.margin
        label = (255, 0, 255) if state.next_piece in SPECIAL_PIECE_TYPES else (230, 230, 230)
        screen.blit(font.render("Next", True, label), (x0, y))
        y += 24
        matrix = get_piece_matrix(state.next_piece, Rotation.SPAWN)
        color = color_for_value(int(state.next_piece))
        preview = self.cell_size * 2 // 3
        for py in range(matrix.shape[0]):
            for px in range(matrix.shape[1]):
                if matrix[py, px]:
                    rect = pygame.Rect(x0 + px * preview, y + py * preview, preview - 1, preview - 1)
                    pygame.draw.rect(screen, color, rect)
        y += preview * 5
        lines = [
            f"Score: {state.score}",
            f"Level: {state.level}",
            f"Lines: {state.lines_cleared}",
            f"67 combos: {state.combo_count}",
            "",
            "Move: Left/Right",
            "Rotate: Up / Z",
            "Soft drop: Down",
            "Hard drop: Space",
            "Pause: P",
        ]
        for i, txt in enumerate(lines):
            screen.blit(font.render(txt, True, (230, 230, 230)), (x0, y + i * 22))

    def draw(
        self,
        screen: pygame.Surface,
        state: GameState,
        view: np.ndarray,
        ghost_row: Optional[int] = None,
        callout: Optional[Callout] = None,
        flash_rows: Sequence[int] = (),
        combo_cells: Sequence[GridPosition] = (),
    ) -> None:
        screen.fill((10, 10, 14))
        grid_surf = self._grid_surface(view, ghost_row, state)
        if flash_rows or combo_cells:
            self._draw_effects(grid_surf, flash_rows, combo_cells)
        screen.blit(grid_surf, (self.margin, self.margin))
        x0 = self.margin * 2 + view.shape[1] * self.cell_size
        self._draw_panel(screen, state, x0)

        font = self._font_for()
        if callout is not None:
            text = font.render(callout.word, True, (255, 255, 255))
            rect = text.get_rect(
                center=(
                    self.margin + callout.position.col * self.cell_size,
                    self.margin + callout.position.row * self.cell_size,
                )
            )
            screen.blit(text, rect)
        if state.phase == GamePhase.PAUSED:
            text = font.render("Paused - press P", True, (255, 255, 255))
            screen.blit(text, (self.margin, 2))
        elif state.phase == GamePhase.GAME_OVER:
            text = font.render("Game Over - Press R to restart, ESC to quit", True, (255, 100, 100))
            screen.blit(text, (self.margin, 2))
        pygame.display.flip()
