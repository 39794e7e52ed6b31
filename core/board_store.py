"""
Board state store.

Holds the latest engine snapshot and the render metrics derived from it.
Every accepted snapshot replaces the previous one wholesale and triggers the
registered render callback synchronously.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .data_models import BoardSnapshot

logger = logging.getLogger(__name__)

DEFAULT_MAX_CELL_SIZE = 40
DEFAULT_SURFACE_WIDTH = 600
GLYPH_RATIO = 0.5

SnapshotCallback = Callable[[BoardSnapshot], None]


@dataclass(frozen=True, slots=True)
class RenderMetrics:
    """Pixel sizes used to lay out cells and glyphs."""
    cell_size: int = DEFAULT_MAX_CELL_SIZE
    glyph_size: int = DEFAULT_MAX_CELL_SIZE // 2


def compute_metrics(column_count: int, surface_width: int,
                    max_cell_size: int = DEFAULT_MAX_CELL_SIZE) -> RenderMetrics:
    """
    Derive cell and glyph size for a board.

    Args:
        column_count: Number of columns on the board
        surface_width: Drawing surface width in pixels
        max_cell_size: Upper bound for the cell size

    Returns:
        RenderMetrics with ``min(max, width // columns)`` and half of it
    """
    if column_count <= 0:
        cell_size = max_cell_size
    else:
        cell_size = min(max_cell_size, surface_width // column_count)
    return RenderMetrics(cell_size=cell_size, glyph_size=int(cell_size * GLYPH_RATIO))


class BoardStateStore:
    """
    Single source of truth for the displayed board.

    The store never modifies cell state; it only records what the engine
    sent. Snapshots carrying a ``sequence`` older than the current one are
    dropped, otherwise the last snapshot applied wins. An engine restarts its
    numbering with each new game, so the board returned by a new-game command
    is applied with ``replace=True`` and becomes the new baseline.
    """

    def __init__(self, max_cell_size: int = DEFAULT_MAX_CELL_SIZE,
                 surface_width_provider: Optional[Callable[[], Optional[int]]] = None) -> None:
        """
        Initialize an empty store.

        Args:
            max_cell_size: Upper bound for the cell pixel size
            surface_width_provider: Returns the current surface width, or None
                when no surface is attached
        """
        self.max_cell_size = max_cell_size
        self._surface_width_provider = surface_width_provider
        self._snapshot: Optional[BoardSnapshot] = None
        self._metrics = RenderMetrics(max_cell_size, int(max_cell_size * GLYPH_RATIO))
        self._render_callback: Optional[Callable[[], None]] = None
        self._listeners: List[SnapshotCallback] = []
        self._closed = False

    def set_render_callback(self, callback: Optional[Callable[[], None]]) -> None:
        self._render_callback = callback

    def add_listener(self, callback: SnapshotCallback) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: SnapshotCallback) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def set_snapshot(self, snapshot: BoardSnapshot, replace: bool = False) -> bool:
        """
        Replace the current snapshot and request a render.

        Args:
            snapshot: New board state from the engine
            replace: Skip the stale-sequence check, e.g. for a new game

        Returns:
            True if the snapshot was applied, False if it was discarded
        """
        if self._closed:
            logger.debug("Store closed, dropping snapshot")
            return False

        current = self._snapshot
        if (not replace and current is not None and current.sequence is not None
                and snapshot.sequence is not None and snapshot.sequence < current.sequence):
            logger.info("Discarding stale snapshot %d (current %d)", snapshot.sequence, current.sequence)
            return False

        self._snapshot = snapshot
        self._metrics = compute_metrics(snapshot.column_count, self._surface_width(), self.max_cell_size)
        logger.debug(
            "Snapshot applied: %dx%d %s %s, cell=%d glyph=%d",
            snapshot.row_count, snapshot.column_count, snapshot.difficulty.value,
            snapshot.progress.value, self._metrics.cell_size, self._metrics.glyph_size,
        )

        if self._render_callback:
            self._render_callback()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as exc:
                logger.error("Snapshot listener error: %s", exc)
        return True

    def refresh_metrics(self) -> RenderMetrics:
        """Recompute metrics for the current snapshot, e.g. after a surface change."""
        column_count = self._snapshot.column_count if self._snapshot else 0
        self._metrics = compute_metrics(column_count, self._surface_width(), self.max_cell_size)
        return self._metrics

    def _surface_width(self) -> int:
        width = self._surface_width_provider() if self._surface_width_provider else None
        # an unlaid-out item reports 0
        return width if width is not None and width > 0 else DEFAULT_SURFACE_WIDTH

    @property
    def snapshot(self) -> Optional[BoardSnapshot]:
        return self._snapshot

    @property
    def metrics(self) -> RenderMetrics:
        return self._metrics

    @property
    def elapsed_seconds(self) -> int:
        """Elapsed game time, 0 when unknown."""
        if self._snapshot is None or self._snapshot.elapsed_seconds is None:
            return 0
        return self._snapshot.elapsed_seconds

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Drop state and callbacks; later snapshots are ignored."""
        self._closed = True
        self._snapshot = None
        self._render_callback = None
        self._listeners.clear()
