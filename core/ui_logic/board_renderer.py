"""
Board rendering.

Paints a snapshot onto a DrawingSurface cell by cell in row-major order.
No UI framework dependencies.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..board_store import RenderMetrics
from ..data_models import BoardSnapshot, Cell, CellState
from .surface import DrawingSurface

logger = logging.getLogger(__name__)

HIDDEN_COLOR = "#ffffff"
ALERT_COLOR = "#ff0000"
REVEALED_COLOR = "#cccccc"
BORDER_COLOR = "#000000"
GLYPH_COLOR = "#000000"

FLAG_GLYPH = "\U0001F3F3"
BOMB_GLYPH = "\U0001F4A3"

_FILL_COLORS = {
    CellState.HIDDEN: HIDDEN_COLOR,
    CellState.FLAGGED: ALERT_COLOR,
    CellState.BOMB: ALERT_COLOR,
    CellState.REVEALED: REVEALED_COLOR,
}


@dataclass(frozen=True, slots=True)
class CellGeometry:
    """Pixel placement of one cell."""
    x: int
    y: int
    size: int

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.size / 2, self.y + self.size / 2


def cell_geometry(row: int, col: int, cell_size: int) -> CellGeometry:
    return CellGeometry(x=col * cell_size, y=row * cell_size, size=cell_size)


def glyph_for(cell: Cell) -> Optional[str]:
    if cell.state is CellState.FLAGGED:
        return FLAG_GLYPH
    if cell.state is CellState.BOMB:
        return BOMB_GLYPH
    if cell.state is CellState.REVEALED:
        return str(cell.count)
    return None


class BoardRenderer:
    """Draws board snapshots. Stateless apart from counters for diagnostics."""

    def __init__(self) -> None:
        self.frames_rendered = 0
        self.cells_skipped = 0

    def render(self, surface: Optional[DrawingSurface], snapshot: Optional[BoardSnapshot],
               metrics: RenderMetrics) -> bool:
        """
        Paint a snapshot.

        Args:
            surface: Target surface, may be None before one is attached
            snapshot: Board to draw, may be None before the first update
            metrics: Cell and glyph sizes

        Returns:
            True if a frame was drawn
        """
        if surface is None or snapshot is None:
            logger.error("Board or game state is not set")
            return False

        surface.clear()
        size = metrics.cell_size
        skipped = 0

        for row, cells in enumerate(snapshot.cells):
            for col, cell in enumerate(cells):
                if not self._draw_cell(surface, row, col, cell, size, metrics.glyph_size):
                    skipped += 1

        surface.present()
        self.frames_rendered += 1
        self.cells_skipped += skipped
        return True

    def _draw_cell(self, surface: DrawingSurface, row: int, col: int, cell: Any,
                   size: int, glyph_size: int) -> bool:
        fill = _FILL_COLORS.get(cell.state) if isinstance(cell, Cell) else None
        if fill is None:
            logger.error("Unknown cell state at (%d, %d): %r", row, col, cell)
            return False

        geometry = cell_geometry(row, col, size)
        surface.fill_rect(geometry.x, geometry.y, size, size, fill)
        surface.stroke_rect(geometry.x, geometry.y, size, size, BORDER_COLOR)

        glyph = glyph_for(cell)
        if glyph is not None:
            center_x, center_y = geometry.center
            surface.fill_text(glyph, center_x, center_y, glyph_size, GLYPH_COLOR)
        return True
