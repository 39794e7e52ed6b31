"""
UI logic package - portable across platforms.

Board rendering, pointer-to-grid mapping and the drawing surface contract.
No UI framework dependencies.
"""
from .surface import DrawingSurface, InputHandlers, PointerAction, PointerEvent
from .board_renderer import BoardRenderer, CellGeometry, cell_geometry
from .input_mapper import GridCoordinate, InputMapper

__all__ = [
    'DrawingSurface',
    'InputHandlers',
    'PointerAction',
    'PointerEvent',
    'BoardRenderer',
    'CellGeometry',
    'cell_geometry',
    'GridCoordinate',
    'InputMapper'
]
