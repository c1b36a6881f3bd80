"""Gymnasium environments for tetris67."""

from __future__ import annotations

from gymnasium.envs.registration import register

register(
    id="Tetris67-v0",
    entry_point="tetris67.env.tetris_env:Tetris67Env",
)

__all__ = ["Tetris67-v0"]
