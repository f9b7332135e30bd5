"""Q-Learning agent for the grid world."""

import logging
import time
from typing import Optional, List, Callable
import numpy as np

from .environment import GridWorld
from .types import (
    Coord, RLConfig, ActionInt, Episode, TrainingResult, RolloutResult, NUM_ACTIONS
)
from ..utils.rng import SeededRNG

logger = logging.getLogger(__name__)


class QLearningAgent:
    """
    Tabular Q-learning agent.

    The agent is the single owner of the action-value table and
    ``update`` is its only writer.
    """

    def __init__(self, env: GridWorld, config: Optional[RLConfig] = None,
                 rng: Optional[SeededRNG] = None):
        self.env = env
        self.config = config or RLConfig()
        self.rng = rng or SeededRNG(self.config.seed)
        self.epsilon = self.config.epsilon
        self.episodes_completed = 0
        self.training_history: List[Episode] = []
        self._q = np.zeros((env.n_states, NUM_ACTIONS), dtype=float)

    def reset(self):
        """Forget everything learned so far."""
        self._q.fill(0.0)
        self.epsilon = self.config.epsilon
        self.episodes_completed = 0
        self.training_history.clear()

    # Q-table queries

    @property
    def q_table(self) -> np.ndarray:
        """Read-only view of the whole table, shape (n_states, 4)."""
        view = self._q.view()
        view.setflags(write=False)
        return view

    def q_values(self, position: Coord) -> np.ndarray:
        """Copy of the action values for a position."""
        return self._q[self.env.state_index(position)].copy()

    def get_q_value(self, state: int, action: ActionInt) -> float:
        """Get Q-value for state-action pair."""
        return float(self._q[state][action])

    def best_action(self, position: Coord) -> ActionInt:
        """Greedy action for a position."""
        # np.argmax returns the first maximum, so ties go to the lowest ordinal
        return int(np.argmax(self._q[self.env.state_index(position)]))

    # Policy

    def choose_action(self, position: Coord, epsilon: Optional[float] = None) -> ActionInt:
        """
        Select an action with the epsilon-greedy policy.

        Args:
            position: Current position
            epsilon: Exploration rate override (defaults to the agent's rate)

        Returns:
            Random action with probability epsilon, greedy action otherwise
        """
        rate = self.epsilon if epsilon is None else epsilon
        if self.rng.random() < rate:
            return self.rng.randint(0, NUM_ACTIONS - 1)
        return self.best_action(position)

    # Learning

    def update(self, state: int, action: ActionInt, reward: float, next_state: int):
        """Apply the one-step Q-learning update for an observed transition."""
        for index in (state, next_state):
            if not (0 <= index < self.env.n_states):
                raise ValueError(f"State index {index} is out of range [0, {self.env.n_states})")
        if not (0 <= action < NUM_ACTIONS):
            raise ValueError(f"Action must be in [0, {NUM_ACTIONS}), got {action}")
        max_next_q = self._q[next_state].max()
        current_q = self._q[state][action]
        target = reward + self.config.discount_factor * max_next_q
        self._q[state][action] = current_q + self.config.learning_rate * (target - current_q)

    def train_episode(self, start: Optional[Coord] = None) -> Episode:
        """Run one episode from the start cell until a terminal cell is entered."""
        episode_start_time = time.time()
        position = start if start is not None else self.env.start
        max_steps = self.config.max_steps_per_episode

        episode_reward = 0.0
        episode_steps = 0
        done = False

        while not done:
            action = self.choose_action(position)
            result = self.env.step(position, action)

            self.update(
                self.env.state_index(position), action, result.reward,
                self.env.state_index(result.new_position)
            )

            episode_reward += result.reward
            episode_steps += 1
            position = result.new_position
            done = result.done

            if max_steps is not None and episode_steps >= max_steps:
                break

        kind = self.env.cell_kind(position)
        episode = Episode(
            number=self.episodes_completed,
            steps=episode_steps,
            total_reward=episode_reward,
            reached_goal=(kind == "goal"),
            hit_trap=(kind == "trap"),
            epsilon_used=self.epsilon,
            elapsed_time=time.time() - episode_start_time
        )

        self.training_history.append(episode)
        self.episodes_completed += 1
        logger.debug("Episode %d: %d steps, reward %.1f, goal=%s",
                     episode.number, episode.steps, episode.total_reward, episode.reached_goal)
        return episode

    def train(self, episodes: Optional[int] = None,
              progress_callback: Optional[Callable[[Episode], None]] = None) -> TrainingResult:
        """
        Train the agent for a fixed number of episodes.

        There is no early stopping; every episode runs to completion.

        Args:
            episodes: Number of episodes (defaults to config.episodes)
            progress_callback: Called with each finished episode

        Returns:
            TrainingResult for the episodes run by this call
        """
        max_episodes = self.config.episodes if episodes is None else episodes
        if max_episodes <= 0:
            raise ValueError(f"Episode count must be positive, got {max_episodes}")
        interval = self.config.progress_interval
        episodes_list: List[Episode] = []

        logger.info("Starting training for %d episodes (alpha=%s, gamma=%s, epsilon=%s)",
                    max_episodes, self.config.learning_rate,
                    self.config.discount_factor, self.epsilon)

        for episode_num in range(max_episodes):
            episode = self.train_episode()
            episodes_list.append(episode)

            if progress_callback:
                progress_callback(episode)

            if (episode_num + 1) % interval == 0:
                recent = episodes_list[-interval:]
                recent_success = sum(1 for ep in recent if ep.reached_goal) / len(recent)
                logger.info("Episode %d: success rate %.1f%% over last %d episodes",
                            episode_num + 1, recent_success * 100, len(recent))

        successful = sum(1 for ep in episodes_list if ep.reached_goal)
        trapped = sum(1 for ep in episodes_list if ep.hit_trap)
        total_reward = sum(ep.total_reward for ep in episodes_list)

        result = TrainingResult(
            episodes=episodes_list,
            total_episodes=len(episodes_list),
            successful_episodes=successful,
            trapped_episodes=trapped,
            average_reward=total_reward / len(episodes_list) if episodes_list else 0.0
        )
        logger.info("Training finished: %d/%d episodes reached the goal",
                    successful, result.total_episodes)
        return result

    def greedy_rollout(self, start: Optional[Coord] = None,
                       max_steps: Optional[int] = None) -> RolloutResult:
        """
        Follow the learned policy with exploration switched off.

        Does not modify the table or draw from the random generator.

        Args:
            start: Start cell (defaults to the environment's start)
            max_steps: Step cap, defaults to the number of cells

        Returns:
            RolloutResult with the visited path
        """
        position = start if start is not None else self.env.start
        if max_steps is None:
            max_steps = self.env.n_states
        if max_steps <= 0:
            raise ValueError(f"Step cap must be positive, got {max_steps}")

        path = [position]
        total_reward = 0.0
        for step in range(max_steps):
            action = self.best_action(position)
            result = self.env.step(position, action)
            total_reward += result.reward
            position = result.new_position
            path.append(position)

            if result.done:
                kind = self.env.cell_kind(position)
                return RolloutResult(
                    path=path,
                    total_reward=total_reward,
                    steps_taken=step + 1,
                    reached_goal=(kind == "goal"),
                    hit_trap=(kind == "trap")
                )

        return RolloutResult(
            path=path,
            total_reward=total_reward,
            steps_taken=len(path) - 1
        )
