#!/usr/bin/env python3
"""
Headless training script for the grid world Q-learning agent.
Trains an agent, then follows the learned policy greedily from the start cell.
"""

import sys
import logging
import argparse
from typing import List, Optional

from rlgrid.domain.environment import GridWorld
from rlgrid.domain.qlearning import QLearningAgent
from rlgrid.domain.types import RLConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Headless Q-learning on the 5x5 grid world")
    parser.add_argument("--episodes", type=int, default=1000, help="Number of episodes to train")
    parser.add_argument("--alpha", type=float, default=0.1, help="Learning rate")
    parser.add_argument("--gamma", type=float, default=0.9, help="Discount factor")
    parser.add_argument("--epsilon", type=float, default=0.2, help="Exploration rate")
    parser.add_argument("--seed", type=int, help="Random seed")
    parser.add_argument("--max-steps", type=int, help="Optional step cap per episode")
    parser.add_argument("--sweep-seeds", type=int, default=0,
                        help="Train once per seed 0..N-1 and report how many greedy rollouts succeed")
    parser.add_argument("--verbose", action="store_true", help="Log every episode")
    return parser


def config_from_args(args: argparse.Namespace, seed: Optional[int] = None) -> RLConfig:
    return RLConfig(
        learning_rate=args.alpha,
        discount_factor=args.gamma,
        epsilon=args.epsilon,
        episodes=args.episodes,
        max_steps_per_episode=args.max_steps,
        seed=seed
    )


def print_policy(agent: QLearningAgent):
    """Print the greedy action of every cell as a grid of arrows."""
    symbols = {"empty": None, "trap": "X", "goal": "G"}
    arrows = "^v<>"
    env = agent.env
    for y in range(env.size):
        row = []
        for x in range(env.size):
            symbol = symbols[env.cell_kind((x, y))]
            row.append(symbol or arrows[agent.best_action((x, y))])
        print("   " + " ".join(row))


def run_single(args: argparse.Namespace) -> int:
    config = config_from_args(args, args.seed)
    env = GridWorld()
    agent = QLearningAgent(env, config)

    print(f"Training for {config.episodes} episodes "
          f"(alpha={config.learning_rate}, gamma={config.discount_factor}, epsilon={config.epsilon})")
    result = agent.train()

    print("\nTraining completed!")
    print(f"   Total episodes: {result.total_episodes}")
    print(f"   Reached goal: {result.successful_episodes} ({result.success_rate:.1%})")
    print(f"   Fell into a trap: {result.trapped_episodes}")
    print(f"   Average reward: {result.average_reward:.2f}")
    print(f"   Average steps: {result.average_steps:.2f}")

    print("\nGreedy policy:")
    print_policy(agent)

    rollout = agent.greedy_rollout()
    if rollout.success:
        print(f"\nPath found in {rollout.steps_taken} steps: {rollout.path}")
        return 0
    reason = "fell into a trap" if rollout.hit_trap else "did not reach the goal"
    print(f"\nGreedy rollout {reason}: {rollout.path}")
    return 1


def run_sweep(args: argparse.Namespace) -> int:
    env = GridWorld()
    shortest = 2 * (env.size - 1)
    successes = 0
    for seed in range(args.sweep_seeds):
        agent = QLearningAgent(env, config_from_args(args, seed))
        agent.train()
        rollout = agent.greedy_rollout(max_steps=shortest)
        if rollout.success:
            successes += 1
        print(f"   seed {seed}: {'ok' if rollout.success else 'failed'} ({rollout.steps_taken} steps)")

    print(f"\n{successes}/{args.sweep_seeds} seeds reach the goal within {shortest} steps")
    return 0 if successes * 2 > args.sweep_seeds else 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        if args.sweep_seeds > 0:
            return run_sweep(args)
        return run_single(args)
    except ValueError as e:
        print(f"Invalid configuration: {e}")
        return 2
    except KeyboardInterrupt:
        print("\nTraining interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
