"""Grid view showing the layout, learned Q-values and the agent."""

from typing import Dict, Optional, Tuple
from PySide6.QtWidgets import QGraphicsView, QGraphicsScene
from PySide6.QtGui import QPainter

from ..app.controller import RLController
from ..domain.types import Coord
from .tiles import GridTile, AgentMarker


class GridView(QGraphicsView):
    """Graphics view for the grid world."""

    def __init__(self, controller: RLController, tile_size: float = 100.0):
        super().__init__()

        self.controller = controller
        self.scene = QGraphicsScene()
        self.setScene(self.scene)

        self.tiles: Dict[Tuple[int, int], GridTile] = {}
        self.agent_marker: Optional[AgentMarker] = None
        self.tile_size = tile_size

        self.setRenderHint(QPainter.Antialiasing)

        # Connect controller signals
        self.controller.grid_updated.connect(self.refresh_values)
        self.controller.position_changed.connect(self.move_agent)

        self._build_scene()

    def _build_scene(self):
        """Create one tile per cell plus the agent marker."""
        env = self.controller.env
        self.scene.clear()
        self.tiles.clear()

        side = env.size * self.tile_size
        self.scene.setSceneRect(0, 0, side, side)

        for x, y in env.positions():
            tile = GridTile(x, y, self.tile_size, env.cell_kind((x, y)))
            self.scene.addItem(tile)
            self.tiles[(x, y)] = tile

        self.agent_marker = AgentMarker(self.tile_size)
        self.scene.addItem(self.agent_marker)
        self.move_agent(self.controller.agent_position)
        self.refresh_values()

    def refresh_values(self):
        """Redraw Q labels from the current table."""
        for coord, tile in self.tiles.items():
            tile.update_appearance(
                self.controller.q_values(coord),
                self.controller.best_action(coord)
            )

    def move_agent(self, position: Coord):
        if self.agent_marker:
            self.agent_marker.move_to(*position)
