"""Pointer-to-grid coordinate mapping."""
import math
from dataclasses import dataclass
from typing import Tuple

from .surface import PointerEvent


@dataclass(frozen=True, slots=True)
class GridCoordinate:
    """Zero-indexed board cell."""
    row: int
    col: int

    def __str__(self) -> str:
        return f"({self.row}, {self.col})"


class InputMapper:
    """
    Converts viewport pointer positions into grid cells.

    No bounds checking against the board: out-of-range cells are left for
    the engine to reject or ignore.
    """

    def map_point(self, x: float, y: float, cell_size: int) -> GridCoordinate:
        """
        Map a surface-relative pixel to a cell.

        Args:
            x: Horizontal offset from the surface's left edge
            y: Vertical offset from the surface's top edge
            cell_size: Cell size in pixels

        Returns:
            GridCoordinate with ``row = floor(y / size)``, ``col = floor(x / size)``
        """
        if cell_size <= 0:
            raise ValueError(f"Cell size must be positive, got {cell_size}")
        return GridCoordinate(row=math.floor(y / cell_size), col=math.floor(x / cell_size))

    def map_event(self, event: PointerEvent, origin: Tuple[float, float], cell_size: int) -> GridCoordinate:
        left, top = origin
        return self.map_point(event.client_x - left, event.client_y - top, cell_size)

    @staticmethod
    def cell_bounds(coordinate: GridCoordinate, cell_size: int) -> Tuple[int, int, int, int]:
        """Half-open pixel range ``(x0, y0, x1, y1)`` covered by a cell."""
        x0 = coordinate.col * cell_size
        y0 = coordinate.row * cell_size
        return x0, y0, x0 + cell_size, y0 + cell_size
