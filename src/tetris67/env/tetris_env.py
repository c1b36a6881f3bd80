from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from tetris67.game import (
    Action,
    BOARD_HEIGHT,
    BOARD_WIDTH,
    GameConfig,
    GamePhase,
    GameStateManager,
    HardDropped,
    Locked,
    PieceType,
    ScoringRules,
)
from tetris67.visualization.palette import color_for_value


class Tetris67Env(gym.Env):
    """Single-player 67 Tetris as a Gymnasium environment.

    Each step applies one ``Action`` and then one gravity tick (hard drops
    already lock, so they skip the tick). Reward is the engine score gained
    during the step.
    """

    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 30}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        render_mode: Optional[str] = None,
    ) -> None:
        super().__init__()
        self.config = config or GameConfig()
        self.rules = rules
        self.game = GameStateManager(self.config, self.rules)
        self.render_mode = render_mode

        # Board: locked cells 0..9, falling piece as -1..-9
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=-9, high=9, shape=(BOARD_HEIGHT, BOARD_WIDTH), dtype=np.int8),
                "next_piece": spaces.Discrete(len(PieceType)),
            }
        )
        self.action_space = spaces.Discrete(len(Action))

        self._last_obs: Optional[Dict[str, Any]] = None

    def _get_obs(self) -> Dict[str, Any]:
        return {
            "board": self.game.board_view().astype(np.int8),
            "next_piece": int(self.game.state.next_piece) - 1,
        }

    def _get_info(self) -> Dict[str, Any]:
        state = self.game.state
        return {
            "score": state.score,
            "level": state.level,
            "lines_cleared": state.lines_cleared,
            "combo_count": state.combo_count,
            "drop_interval_ms": self.game.drop_interval,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.config = replace(self.config, random_seed=seed)
            self.game = GameStateManager(self.config, self.rules)
        self.game.start_game()
        obs = self._get_obs()
        self._last_obs = obs
        return obs, self._get_info()

    def step(self, action):
        action = Action(int(action))
        score_before = self.game.state.score

        result = self.game.step(action)
        locked = isinstance(result, HardDropped)
        if not locked and self.game.state.phase == GamePhase.PLAYING:
            locked = isinstance(self.game.tick(), Locked)

        state = self.game.state
        reward = float(state.score - score_before)
        terminated = state.phase == GamePhase.GAME_OVER
        truncated = False

        obs = self._get_obs()
        info = self._get_info()
        info["locked"] = locked
        self._last_obs = obs
        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            board = self._last_obs["board"] if self._last_obs is not None else self.game.board_view()
            cell = 12
            h, w = board.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    color = color_for_value(int(board[y, x]))
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
            return img
        # human rendering delegated to tetris67.visualization; noop
        return None

    def close(self) -> None:
        pass
