"""Finite State Machine for the train-then-play lifecycle."""

from enum import Enum, auto
from typing import Dict, Callable, Optional


class RLState(Enum):
    """Lifecycle states of a training session."""
    IDLE = auto()
    TRAINING = auto()
    TRAINED = auto()
    PLAYING = auto()
    FINISHED = auto()
    ERROR = auto()


class RLStateMachine:
    """
    State machine for managing training and playback.

    Playback can only be entered from TRAINED or FINISHED, so the table is
    never read by playback while training is still writing it.
    """

    def __init__(self):
        self.current_state = RLState.IDLE
        self._enter_callbacks: Dict[RLState, Callable[[Optional[Dict]], None]] = {}
        self._exit_callbacks: Dict[RLState, Callable[[Optional[Dict]], None]] = {}

        # Define valid state transitions
        self._valid_transitions = {
            RLState.IDLE: {RLState.TRAINING},
            RLState.TRAINING: {RLState.TRAINED, RLState.ERROR},
            RLState.TRAINED: {RLState.PLAYING, RLState.TRAINING, RLState.IDLE},
            RLState.PLAYING: {RLState.FINISHED, RLState.TRAINED, RLState.ERROR},
            RLState.FINISHED: {RLState.PLAYING, RLState.TRAINING, RLState.IDLE},
            RLState.ERROR: {RLState.IDLE},
        }

    def on_state_enter(self, state: RLState, callback: Callable[[Optional[Dict]], None]):
        """Register callback for state entry."""
        self._enter_callbacks[state] = callback

    def on_state_exit(self, state: RLState, callback: Callable[[Optional[Dict]], None]):
        """Register callback for state exit."""
        self._exit_callbacks[state] = callback

    def can_transition(self, to_state: RLState) -> bool:
        """Check if transition to target state is valid."""
        return to_state in self._valid_transitions.get(self.current_state, set())

    def transition(self, to_state: RLState, context: Optional[Dict] = None) -> bool:
        """Attempt to transition to target state."""
        if not self.can_transition(to_state):
            return False

        from_state = self.current_state

        if from_state in self._exit_callbacks:
            self._exit_callbacks[from_state](context)

        self.current_state = to_state

        if to_state in self._enter_callbacks:
            self._enter_callbacks[to_state](context)

        return True

    # Convenience methods for common transitions

    def start_training(self, context: Optional[Dict] = None) -> bool:
        return self.transition(RLState.TRAINING, context)

    def finish_training(self, context: Optional[Dict] = None) -> bool:
        return self.transition(RLState.TRAINED, context)

    def start_playback(self, context: Optional[Dict] = None) -> bool:
        return self.transition(RLState.PLAYING, context)

    def stop_playback(self, context: Optional[Dict] = None) -> bool:
        """Interrupt playback before it reaches a terminal cell."""
        return self.transition(RLState.TRAINED, context)

    def finish_playback(self, context: Optional[Dict] = None) -> bool:
        return self.transition(RLState.FINISHED, context)

    def reset_to_idle(self, context: Optional[Dict] = None) -> bool:
        """Reset to idle state."""
        return self.transition(RLState.IDLE, context)

    def fail_error(self, context: Optional[Dict] = None) -> bool:
        """Transition to error state."""
        return self.transition(RLState.ERROR, context)

    # State checking methods

    def is_idle(self) -> bool:
        return self.current_state == RLState.IDLE

    def is_training(self) -> bool:
        return self.current_state == RLState.TRAINING

    def is_playing(self) -> bool:
        return self.current_state == RLState.PLAYING

    def has_learned_table(self) -> bool:
        """Check if a finished training run is available for playback."""
        return self.current_state in {RLState.TRAINED, RLState.PLAYING, RLState.FINISHED}

    def get_state_description(self) -> str:
        """Get human-readable state description."""
        descriptions = {
            RLState.IDLE: "Ready - Click Train to start learning",
            RLState.TRAINING: "Training agent with Q-Learning",
            RLState.TRAINED: "Training complete - Click Play to watch the learned policy",
            RLState.PLAYING: "Playing learned policy",
            RLState.FINISHED: "Playback finished",
            RLState.ERROR: "Error occurred during execution",
        }
        return descriptions.get(self.current_state, "Unknown state")
