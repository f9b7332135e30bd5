"""Grid tiles for rendering cell kinds and Q-values."""

from typing import Dict, Optional
import numpy as np
from PySide6.QtWidgets import QGraphicsRectItem, QGraphicsTextItem, QGraphicsEllipseItem
from PySide6.QtGui import QBrush, QPen, QColor, QFont

from ..domain.types import CellKind, ActionInt, ACTION_ARROWS


class GridTile(QGraphicsRectItem):
    """Graphics item representing a single grid cell with per-action Q labels."""

    def __init__(self, x: int, y: int, size: float, kind: CellKind):
        super().__init__(0, 0, size, size)
        self.grid_x = x
        self.grid_y = y
        self.size = size
        self.kind = kind

        # Position the tile
        self.setPos(x * size, y * size)

        self._q_value_texts: Dict[int, QGraphicsTextItem] = {}
        self._setup_text_items()
        self.update_appearance()

    def _setup_text_items(self):
        """Setup text items for the four action values."""
        font = QFont("Monospace", max(6, int(self.size * 0.1)))
        positions = {
            0: (self.size * 0.4, self.size * 0.02),   # up: top center
            1: (self.size * 0.4, self.size * 0.78),   # down: bottom center
            2: (self.size * 0.02, self.size * 0.4),   # left: left center
            3: (self.size * 0.7, self.size * 0.4),    # right: right center
        }

        for action, pos in positions.items():
            text_item = QGraphicsTextItem(parent=self)
            text_item.setFont(font)
            text_item.setPos(pos[0], pos[1])
            self._q_value_texts[action] = text_item

    def _get_kind_colors(self) -> tuple[QColor, QColor]:
        color_map = {
            "empty": (QColor(211, 211, 211), QColor(0, 0, 0)),
            "trap": (QColor(255, 0, 0), QColor(0, 0, 0)),
            "goal": (QColor(0, 255, 0), QColor(0, 0, 0)),
        }
        return color_map[self.kind]

    def update_appearance(self, q_values: Optional[np.ndarray] = None,
                          best_action: Optional[ActionInt] = None):
        """Update tile colors and Q labels; labels are only drawn on empty cells."""
        brush_color, pen_color = self._get_kind_colors()
        self.setBrush(QBrush(brush_color))
        self.setPen(QPen(pen_color, 1))

        show = self.kind == "empty" and q_values is not None
        for action, text_item in self._q_value_texts.items():
            text_item.setVisible(show)
            if not show:
                continue
            text_item.setPlainText(f"{ACTION_ARROWS[action]}{int(q_values[action])}")
            if action == best_action:
                text_item.setDefaultTextColor(QColor(0, 0, 255))
            else:
                text_item.setDefaultTextColor(QColor(64, 64, 64))


class AgentMarker(QGraphicsEllipseItem):
    """Blue circle showing the agent's current cell."""

    def __init__(self, tile_size: float):
        self.tile_size = tile_size
        self.diameter = tile_size * 0.4
        super().__init__(0, 0, self.diameter, self.diameter)
        self.setBrush(QBrush(QColor(0, 0, 255)))
        self.setPen(QPen(QColor(0, 0, 128), 1))
        self.setZValue(10)

    def move_to(self, x: int, y: int):
        offset = (self.tile_size - self.diameter) / 2
        self.setPos(x * self.tile_size + offset, y * self.tile_size + offset)
