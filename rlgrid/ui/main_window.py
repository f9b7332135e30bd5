"""Main window for the grid world Q-learning demo."""

from PySide6.QtWidgets import (
    QMainWindow, QVBoxLayout, QHBoxLayout, QWidget, QPushButton,
    QLabel, QStatusBar, QProgressBar
)
from PySide6.QtGui import QCloseEvent

from ..app.controller import RLController
from ..app.fsm import RLState
from ..domain.types import TrainingResult
from .grid_view import GridView


class MainWindow(QMainWindow):
    """Main application window."""

    def __init__(self, controller: RLController):
        super().__init__()
        self.controller = controller

        self.setWindowTitle("RL Grid World")

        self._create_ui()
        self._setup_connections()
        self._update_button_states()

    def _create_ui(self):
        """Create the user interface."""
        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        main_layout = QVBoxLayout(central_widget)

        # Action buttons
        buttons_layout = QHBoxLayout()
        self.train_btn = QPushButton("Train")
        self.play_btn = QPushButton("Play")
        self.reset_btn = QPushButton("Reset")
        for button in (self.train_btn, self.play_btn, self.reset_btn):
            buttons_layout.addWidget(button)
        buttons_layout.addStretch()
        main_layout.addLayout(buttons_layout)

        self.progress_bar = QProgressBar()
        self.progress_bar.setRange(0, self.controller.config.episodes)
        self.progress_bar.setValue(0)
        main_layout.addWidget(self.progress_bar)

        # Grid view
        self.grid_view = GridView(self.controller)
        side = int(self.grid_view.tile_size * self.controller.env.size) + 4
        self.grid_view.setMinimumSize(side, side)
        main_layout.addWidget(self.grid_view, 1)

        self.summary_label = QLabel("No training run yet")
        main_layout.addWidget(self.summary_label)

        # Status bar
        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self.status_bar.showMessage(self.controller.state_description)

    def _setup_connections(self):
        self.train_btn.clicked.connect(self.controller.start_training)
        self.play_btn.clicked.connect(self.controller.start_playback)
        self.reset_btn.clicked.connect(self._on_reset_clicked)

        self.controller.state_changed.connect(self._on_state_changed)
        self.controller.training_progress.connect(self._on_training_progress)
        self.controller.training_completed.connect(self._on_training_completed)
        self.controller.error_occurred.connect(self._on_error)

    def _update_button_states(self):
        state = self.controller.current_state
        self.train_btn.setEnabled(state in {RLState.IDLE, RLState.TRAINED, RLState.FINISHED})
        self.play_btn.setEnabled(state in {RLState.TRAINED, RLState.FINISHED})
        self.reset_btn.setEnabled(state != RLState.TRAINING)

    def _on_state_changed(self, state: RLState):
        self._update_button_states()
        self.status_bar.showMessage(self.controller.state_description)

    def _on_training_progress(self, current_episode: int, total_episodes: int):
        self.progress_bar.setValue(current_episode)

    def _on_training_completed(self, result: TrainingResult):
        self.progress_bar.setValue(result.total_episodes)
        self.summary_label.setText(
            f"Episodes: {result.total_episodes}  "
            f"Goal: {result.success_rate:.1%}  "
            f"Traps: {result.trapped_episodes}  "
            f"Avg reward: {result.average_reward:.1f}  "
            f"Avg steps: {result.average_steps:.1f}"
        )

    def _on_reset_clicked(self):
        self.controller.reset()
        self.progress_bar.setValue(0)
        self.summary_label.setText("No training run yet")

    def _on_error(self, message: str):
        self.status_bar.showMessage(message, 5000)

    def closeEvent(self, event: QCloseEvent):
        """Stop timers and threads before closing."""
        self.controller.cleanup()
        super().closeEvent(event)
