"""Step-by-step replay of a learned policy."""

import logging
from typing import Optional

from ..domain.environment import GridWorld
from ..domain.qlearning import QLearningAgent
from ..domain.types import Coord, StepResult

logger = logging.getLogger(__name__)


class PolicyPlayback:
    """
    Current agent position for animated replay after training.

    Each ``advance`` chooses an action with the agent's policy, steps the
    environment and moves to the resulting cell. The table is only read.
    """

    def __init__(self, env: GridWorld, agent: QLearningAgent,
                 start: Optional[Coord] = None, max_steps: Optional[int] = None,
                 greedy: bool = False):
        self.env = env
        self.agent = agent
        self.start = start if start is not None else env.start
        self.max_steps = max_steps
        self.greedy = greedy
        self._position = self.start
        self._steps = 0
        self._total_reward = 0.0

    @property
    def position(self) -> Coord:
        return self._position

    @position.setter
    def position(self, value: Coord):
        if not self.env.is_valid_position(value):
            raise ValueError(f"Position {value} is out of bounds")
        self._position = value

    @property
    def steps(self) -> int:
        return self._steps

    @property
    def total_reward(self) -> float:
        return self._total_reward

    @property
    def is_finished(self) -> bool:
        """Playback stops on a goal or trap cell, or at the step cap."""
        if self.env.is_terminal(self._position):
            return True
        return self.max_steps is not None and self._steps >= self.max_steps

    def advance(self) -> Optional[StepResult]:
        """Take one step of the policy; returns None once finished."""
        if self.is_finished:
            return None

        epsilon = 0.0 if self.greedy else None
        action = self.agent.choose_action(self._position, epsilon=epsilon)
        result = self.env.step(self._position, action)
        self._position = result.new_position
        self._steps += 1
        self._total_reward += result.reward

        if result.done:
            logger.info("Playback ended on %s cell %s after %d steps",
                        self.env.cell_kind(self._position), self._position, self._steps)
        return result

    def reset(self):
        """Put the agent back on the start cell."""
        self._position = self.start
        self._steps = 0
        self._total_reward = 0.0
