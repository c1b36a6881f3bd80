from __future__ import annotations

import argparse

import gymnasium as gym

# Ensure envs are registered
import tetris67.env  # noqa: F401


def run_random(steps: int = 500, seed: int | None = None) -> None:
    env = gym.make("Tetris67-v0")
    obs, info = env.reset(seed=seed)
    total_reward = 0.0
    episodes = 0
    best_score = 0
    for _ in range(steps):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        best_score = max(best_score, int(info["score"]))
        if terminated or truncated:
            episodes += 1
            obs, info = env.reset()
    env.close()
    print(f"Random agent total reward: {total_reward:.2f}")
    print(f"Episodes finished: {episodes}, best score: {best_score}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--steps", type=int, default=500)
    p.add_argument("--seed", type=int, default=None)
    return p


def main() -> None:
    args = build_parser().parse_args()
    run_random(steps=args.steps, seed=args.seed)


if __name__ == "__main__":  # pragma: no cover
    main()
