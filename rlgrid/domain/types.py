"""Core type definitions for the grid world Q-learning agent."""

from dataclasses import dataclass, field
from typing import Optional, Tuple, Literal, Dict, List

# Coordinate type for grid positions, (x, y)
Coord = Tuple[int, int]

# Cell kinds of the grid layout
CellKind = Literal["empty", "trap", "goal"]

# Actions the agent can take
Action = Literal["up", "down", "left", "right"]
ActionInt = Literal[0, 1, 2, 3]  # Numerical representation

NUM_ACTIONS = 4

# Reference layout
GRID_SIZE = 5
START: Coord = (0, 0)
GOAL: Coord = (4, 4)
TRAPS: Tuple[Coord, ...] = ((2, 1), (3, 3))

# Rewards
REWARD_STEP = -1.0
REWARD_TRAP = -100.0
REWARD_GOAL = 100.0


@dataclass
class RLConfig:
    """Configuration for the Q-learning run."""
    learning_rate: float = 0.1  # alpha
    discount_factor: float = 0.9  # gamma
    epsilon: float = 0.2  # exploration rate, fixed for the whole run
    episodes: int = 1000
    max_steps_per_episode: Optional[int] = None  # None runs each episode to a terminal cell
    seed: Optional[int] = None
    # Driver settings
    playback_interval_ms: int = 500
    progress_interval: int = 100  # episodes between progress log lines

    def __post_init__(self):
        if not (0.0 < self.learning_rate <= 1.0):
            raise ValueError(f"Learning rate must be in (0, 1], got {self.learning_rate}")
        if not (0.0 <= self.discount_factor <= 1.0):
            raise ValueError(f"Discount factor must be in [0, 1], got {self.discount_factor}")
        if not (0.0 <= self.epsilon <= 1.0):
            raise ValueError(f"Epsilon must be in [0, 1], got {self.epsilon}")
        if self.episodes <= 0:
            raise ValueError(f"Episode count must be positive, got {self.episodes}")
        if self.max_steps_per_episode is not None and self.max_steps_per_episode <= 0:
            raise ValueError(f"Step cap must be positive, got {self.max_steps_per_episode}")
        if self.playback_interval_ms <= 0:
            raise ValueError(f"Playback interval must be positive, got {self.playback_interval_ms}")
        if self.progress_interval <= 0:
            raise ValueError(f"Progress interval must be positive, got {self.progress_interval}")


@dataclass(frozen=True)
class StepResult:
    """Outcome of a single environment transition."""
    new_position: Coord
    reward: float
    done: bool


@dataclass
class Episode:
    """Represents a single training episode."""
    number: int
    steps: int
    total_reward: float
    reached_goal: bool
    hit_trap: bool
    epsilon_used: float
    elapsed_time: float = 0.0  # seconds


@dataclass
class TrainingResult:
    """Result of a training run."""
    episodes: List[Episode]
    total_episodes: int
    successful_episodes: int
    trapped_episodes: int
    average_reward: float

    @property
    def success_rate(self) -> float:
        """Fraction of episodes that ended on the goal."""
        return self.successful_episodes / self.total_episodes if self.total_episodes > 0 else 0.0

    @property
    def average_steps(self) -> float:
        """Mean episode length in steps."""
        if not self.episodes:
            return 0.0
        return sum(ep.steps for ep in self.episodes) / len(self.episodes)


@dataclass
class RolloutResult:
    """Result of following the greedy policy from the start cell."""
    path: List[Coord] = field(default_factory=list)
    total_reward: float = 0.0
    steps_taken: int = 0
    reached_goal: bool = False
    hit_trap: bool = False

    @property
    def success(self) -> bool:
        """Whether the rollout reached the goal."""
        return self.reached_goal and len(self.path) > 0


# Action mappings
ACTION_TO_INT: Dict[Action, ActionInt] = {
    "up": 0,
    "down": 1,
    "left": 2,
    "right": 3
}

INT_TO_ACTION: Dict[ActionInt, Action] = {
    0: "up",
    1: "down",
    2: "left",
    3: "right"
}

ACTION_DELTAS: Dict[ActionInt, Coord] = {
    0: (0, -1),  # up
    1: (0, 1),   # down
    2: (-1, 0),  # left
    3: (1, 0)    # right
}

ACTION_ARROWS: Dict[ActionInt, str] = {
    0: "↑",
    1: "↓",
    2: "←",
    3: "→"
}
