"""Deterministic grid world with a goal and trap cells."""

from typing import Iterable, Iterator, Tuple
import numpy as np

from .types import (
    Coord, CellKind, ActionInt, StepResult, ACTION_DELTAS, NUM_ACTIONS,
    GRID_SIZE, START, GOAL, TRAPS, REWARD_STEP, REWARD_TRAP, REWARD_GOAL
)

# Cell codes stored in the layout array
EMPTY, TRAP, GOAL_CELL = 0, 1, 2

_KIND_BY_CODE: Tuple[CellKind, ...] = ("empty", "trap", "goal")


class GridWorld:
    """
    Square grid world with a fixed layout.

    The layout is an immutable array indexed ``[y][x]``. Positions are
    ``(x, y)`` tuples and map to state indices ``y * size + x``.
    """

    def __init__(self, size: int = GRID_SIZE, goal: Coord = GOAL,
                 traps: Iterable[Coord] = TRAPS, start: Coord = START):
        """
        Build the grid layout.

        Args:
            size: Side length of the square grid (must be > 0)
            goal: Goal cell
            traps: Trap cells
            start: Cell every episode starts from

        Raises:
            ValueError: If the size is not positive, a cell is out of bounds,
                or the goal is also configured as a trap
        """
        if size <= 0:
            raise ValueError(f"Grid size must be positive, got {size}")
        self._size = size

        traps = tuple(traps)
        for coord in (goal, start) + traps:
            if not self.is_valid_position(coord):
                raise ValueError(f"Position {coord} is out of bounds for a {size}x{size} grid")
        if goal in traps:
            raise ValueError(f"Goal {goal} cannot also be a trap")
        if start == goal or start in traps:
            raise ValueError(f"Start {start} must be an empty cell")

        cells = np.full((size, size), EMPTY, dtype=np.int8)
        for x, y in traps:
            cells[y][x] = TRAP
        cells[goal[1]][goal[0]] = GOAL_CELL
        cells.setflags(write=False)

        self._cells = cells
        self._goal = goal
        self._traps = traps
        self._start = start

    # Properties

    @property
    def size(self) -> int:
        return self._size

    @property
    def n_states(self) -> int:
        """Number of distinct state indices."""
        return self._size * self._size

    @property
    def start(self) -> Coord:
        return self._start

    @property
    def goal(self) -> Coord:
        return self._goal

    @property
    def traps(self) -> Tuple[Coord, ...]:
        return self._traps

    @property
    def cells(self) -> np.ndarray:
        """Read-only layout array indexed [y][x]."""
        return self._cells

    # Geometry

    def is_valid_position(self, position: Coord) -> bool:
        """Check if a position lies inside the grid."""
        x, y = position
        return 0 <= x < self._size and 0 <= y < self._size

    def state_index(self, position: Coord) -> int:
        """Map a position to its state index."""
        self._check_position(position)
        x, y = position
        return y * self._size + x

    def position_of(self, state: int) -> Coord:
        """Map a state index back to its position."""
        if not (0 <= state < self.n_states):
            raise ValueError(f"State index {state} is out of range [0, {self.n_states})")
        y, x = divmod(state, self._size)
        return (x, y)

    def positions(self) -> Iterator[Coord]:
        """Iterate over all positions in row-major order."""
        for y in range(self._size):
            for x in range(self._size):
                yield (x, y)

    def cell_kind(self, position: Coord) -> CellKind:
        """Get the kind of the cell at a position."""
        self._check_position(position)
        x, y = position
        return _KIND_BY_CODE[self._cells[y][x]]

    def is_terminal(self, position: Coord) -> bool:
        """Check if entering this cell ends the episode."""
        return self.cell_kind(position) != "empty"

    # Dynamics

    def step(self, position: Coord, action: ActionInt) -> StepResult:
        """
        Compute the outcome of taking an action from a position.

        Moves one cell in the requested direction; moving off an edge leaves
        that coordinate unchanged. Pure function of its inputs.

        Args:
            position: Current position
            action: Action to take (0=up, 1=down, 2=left, 3=right)

        Returns:
            StepResult with the new position, reward and terminal flag
        """
        self._check_position(position)
        if action not in ACTION_DELTAS:
            raise ValueError(f"Action must be in [0, {NUM_ACTIONS}), got {action}")

        dx, dy = ACTION_DELTAS[action]
        x, y = position
        new_x = min(max(x + dx, 0), self._size - 1)
        new_y = min(max(y + dy, 0), self._size - 1)
        new_position = (new_x, new_y)

        kind = self.cell_kind(new_position)
        if kind == "trap":
            return StepResult(new_position, REWARD_TRAP, True)
        if kind == "goal":
            return StepResult(new_position, REWARD_GOAL, True)
        return StepResult(new_position, REWARD_STEP, False)

    def _check_position(self, position: Coord):
        if not self.is_valid_position(position):
            raise ValueError(f"Position {position} is out of bounds for a {self._size}x{self._size} grid")

    def __repr__(self) -> str:
        return f"GridWorld(size={self._size}, goal={self._goal}, traps={self._traps})"
