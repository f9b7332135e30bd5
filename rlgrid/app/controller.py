"""Main application controller connecting the UI to the Q-learning core."""

import logging
from typing import Optional

import numpy as np
from PySide6.QtCore import QObject, QTimer, Signal, QThread

from ..domain.environment import GridWorld
from ..domain.qlearning import QLearningAgent
from ..domain.types import Coord, CellKind, ActionInt, RLConfig, TrainingResult
from .fsm import RLStateMachine, RLState
from .playback import PolicyPlayback

logger = logging.getLogger(__name__)


class TrainingWorker(QObject):
    """Worker that runs the whole training loop off the UI thread."""

    progress_updated = Signal(int, int)  # current_episode, total_episodes
    training_finished = Signal(object)  # TrainingResult
    error_occurred = Signal(str)

    def __init__(self, agent: QLearningAgent, episodes: int):
        super().__init__()
        self.agent = agent
        self.episodes = episodes
        self.episode_update_interval = max(1, episodes // 100)  # Update UI ~100 times max

    def run(self):
        """Train to episode exhaustion; training is not cancellable."""
        try:
            def on_episode(episode):
                done = episode.number + 1
                if done % self.episode_update_interval == 0 or done == self.episodes:
                    self.progress_updated.emit(done, self.episodes)

            result = self.agent.train(self.episodes, progress_callback=on_episode)
            self.training_finished.emit(result)
        except Exception as e:
            logger.exception("Training failed")
            self.error_occurred.emit(str(e))


class RLController(QObject):
    """
    Controller that owns the environment, the agent and the playback.

    Signals:
        state_changed: Emitted when the lifecycle state changes
        training_progress: Emitted periodically during training
        training_completed: Emitted when training finishes
        position_changed: Emitted when the playback agent moves
        grid_updated: Emitted when the grid needs to be redrawn
        error_occurred: Emitted when an error occurs
    """

    state_changed = Signal(object)  # RLState
    training_progress = Signal(int, int)
    training_completed = Signal(object)  # TrainingResult
    position_changed = Signal(object)  # Coord
    grid_updated = Signal()
    error_occurred = Signal(str)

    def __init__(self, config: Optional[RLConfig] = None):
        super().__init__()

        self._config = config or RLConfig()
        self._env = GridWorld()
        self._agent = QLearningAgent(self._env, self._config)
        self._playback = PolicyPlayback(self._env, self._agent)
        self._state_machine = RLStateMachine()
        self._last_result: Optional[TrainingResult] = None

        self._training_thread: Optional[QThread] = None
        self._training_worker: Optional[TrainingWorker] = None

        # Timer for playback
        self._timer = QTimer()
        self._timer.setInterval(self._config.playback_interval_ms)
        self._timer.timeout.connect(self._on_timer_tick)

        for state in RLState:
            self._state_machine.on_state_enter(state, self._emit_state)

    # Properties

    @property
    def env(self) -> GridWorld:
        return self._env

    @property
    def agent(self) -> QLearningAgent:
        return self._agent

    @property
    def config(self) -> RLConfig:
        return self._config

    @property
    def current_state(self) -> RLState:
        return self._state_machine.current_state

    @property
    def state_description(self) -> str:
        return self._state_machine.get_state_description()

    @property
    def last_result(self) -> Optional[TrainingResult]:
        return self._last_result

    # Queries used for rendering

    def cell_kind(self, position: Coord) -> CellKind:
        return self._env.cell_kind(position)

    def q_values(self, position: Coord) -> np.ndarray:
        return self._agent.q_values(position)

    def best_action(self, position: Coord) -> ActionInt:
        return self._agent.best_action(position)

    @property
    def agent_position(self) -> Coord:
        return self._playback.position

    # Training

    def start_training(self) -> bool:
        """Start training in a worker thread."""
        self.stop_playback()
        if not self._state_machine.start_training():
            self.error_occurred.emit(f"Cannot train while {self.current_state.name.lower()}")
            return False

        self._agent.reset()
        self._playback.reset()
        self.position_changed.emit(self._playback.position)

        self._training_thread = QThread()
        self._training_thread.setObjectName("RL-TrainingThread")
        self._training_worker = TrainingWorker(self._agent, self._config.episodes)
        self._training_worker.moveToThread(self._training_thread)

        self._training_worker.progress_updated.connect(self.training_progress)
        self._training_worker.training_finished.connect(self._on_training_finished)
        self._training_worker.error_occurred.connect(self._on_training_error)
        self._training_thread.started.connect(self._training_worker.run)

        self._training_thread.start()
        return True

    def _on_training_finished(self, result: TrainingResult):
        self._cleanup_training_thread()
        self._last_result = result
        self._state_machine.finish_training()
        self.training_completed.emit(result)
        self.grid_updated.emit()

    def _on_training_error(self, error_message: str):
        self._cleanup_training_thread()
        self._state_machine.fail_error()
        self.error_occurred.emit(f"Training error: {error_message}")

    def _cleanup_training_thread(self):
        if self._training_thread:
            self._training_thread.quit()
            self._training_thread.wait()
            self._training_thread.deleteLater()
            self._training_thread = None
        if self._training_worker:
            self._training_worker.deleteLater()
            self._training_worker = None

    # Playback

    def start_playback(self) -> bool:
        """Replay the learned policy from the start cell on a timer."""
        if not self._state_machine.start_playback():
            self.error_occurred.emit("Train the agent before playing the learned policy")
            return False

        self._playback.reset()
        self.position_changed.emit(self._playback.position)
        self._timer.start()
        return True

    def stop_playback(self):
        self._timer.stop()
        if self._state_machine.is_playing():
            self._state_machine.stop_playback()

    def step_playback(self) -> bool:
        """Advance playback by one step; returns False once it has finished."""
        result = self._playback.advance()
        if result is None:
            return False
        self.position_changed.emit(result.new_position)
        return not self._playback.is_finished

    def _on_timer_tick(self):
        """Called on each timer tick during playback."""
        try:
            if not self.step_playback():
                self._timer.stop()
                self._state_machine.finish_playback()
        except Exception as e:
            self._timer.stop()
            self._state_machine.fail_error()
            self.error_occurred.emit(f"Playback error: {str(e)}")

    def reset(self):
        """Discard the learned table and return to idle."""
        if self._state_machine.is_training():
            return
        self.stop_playback()
        if self._state_machine.is_idle():
            return
        self._agent.reset()
        self._playback.reset()
        self._last_result = None
        self._state_machine.reset_to_idle()
        self.position_changed.emit(self._playback.position)
        self.grid_updated.emit()

    def _emit_state(self, context=None):
        self.state_changed.emit(self._state_machine.current_state)

    def cleanup(self):
        """Stop the timer and wait for a running training thread."""
        self._timer.stop()
        self._cleanup_training_thread()
