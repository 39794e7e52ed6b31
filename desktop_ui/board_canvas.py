"""
QML board canvas.

A QQuickPaintedItem that records drawing calls into a display list and
replays them with QPainter, plus the DrawingSurface adapter the core
controller talks to.
"""
import logging
from typing import Dict, List, Optional, Tuple

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QMouseEvent, QPainter
from PySide6.QtQuick import QQuickPaintedItem

from core.ui_logic.surface import DrawingSurface, PointerAction, PointerEvent, PointerHandler

logger = logging.getLogger(__name__)

_BUTTON_ACTIONS = {
    Qt.MouseButton.LeftButton: PointerAction.PRIMARY,
    Qt.MouseButton.RightButton: PointerAction.SECONDARY,
}


class BoardCanvas(QQuickPaintedItem):
    """Retained-mode canvas item registered in QML as ``BoardCanvas``."""

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setAcceptedMouseButtons(Qt.MouseButton.LeftButton | Qt.MouseButton.RightButton)
        self._ops: List[Tuple] = []
        self._listeners: Dict[PointerAction, List[PointerHandler]] = {
            PointerAction.PRIMARY: [],
            PointerAction.SECONDARY: [],
        }
        self._surface: Optional["CanvasSurface"] = None

    @property
    def surface(self) -> "CanvasSurface":
        if self._surface is None:
            self._surface = CanvasSurface(self)
        return self._surface

    # ------------------------------------------------------------------
    # Display list
    # ------------------------------------------------------------------
    def clear_ops(self) -> None:
        self._ops.clear()

    def record(self, op: Tuple) -> None:
        self._ops.append(op)

    @property
    def op_count(self) -> int:
        return len(self._ops)

    def paint(self, painter: QPainter) -> None:
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, False)
        for op in self._ops:
            kind = op[0]
            if kind == "fill":
                _, x, y, w, h, color = op
                painter.fillRect(QRectF(x, y, w, h), QColor(color))
            elif kind == "stroke":
                _, x, y, w, h, color = op
                painter.setPen(QColor(color))
                painter.setBrush(Qt.BrushStyle.NoBrush)
                painter.drawRect(QRectF(x, y, w, h))
            elif kind == "text":
                _, text, cx, cy, size, color = op
                font = painter.font()
                font.setPixelSize(max(1, size))
                painter.setFont(font)
                painter.setPen(QColor(color))
                box = QRectF(cx - size, cy - size, size * 2, size * 2)
                painter.drawText(box, Qt.AlignmentFlag.AlignCenter, text)

    # ------------------------------------------------------------------
    # Pointer input
    # ------------------------------------------------------------------
    def add_listener(self, action: PointerAction, handler: PointerHandler) -> None:
        self._listeners[action].append(handler)

    def remove_listener(self, action: PointerAction, handler: PointerHandler) -> None:
        if handler in self._listeners[action]:
            self._listeners[action].remove(handler)

    def listener_count(self, action: PointerAction) -> int:
        return len(self._listeners[action])

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() in _BUTTON_ACTIONS:
            # accept the press so the release is delivered here
            event.accept()
        else:
            super().mousePressEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        action = _BUTTON_ACTIONS.get(event.button())
        if action is None:
            super().mouseReleaseEvent(event)
            return

        position = event.scenePosition()
        pointer = PointerEvent(position.x(), position.y(), action)
        for handler in list(self._listeners[action]):
            try:
                handler(pointer)
            except Exception:
                logger.exception("Pointer handler failed")

        if action is PointerAction.SECONDARY and not pointer.default_prevented:
            event.ignore()
        else:
            event.accept()


class CanvasSurface(DrawingSurface):
    """DrawingSurface backed by a BoardCanvas item."""

    def __init__(self, canvas: BoardCanvas) -> None:
        self.canvas = canvas

    @property
    def width(self) -> int:
        return int(self.canvas.width())

    @property
    def height(self) -> int:
        return int(self.canvas.height())

    def bounding_origin(self) -> Tuple[float, float]:
        origin = self.canvas.mapToScene(QPointF(0, 0))
        return origin.x(), origin.y()

    def clear(self) -> None:
        self.canvas.clear_ops()

    def fill_rect(self, x: int, y: int, width: int, height: int, color: str) -> None:
        self.canvas.record(("fill", x, y, width, height, color))

    def stroke_rect(self, x: int, y: int, width: int, height: int, color: str) -> None:
        self.canvas.record(("stroke", x, y, width, height, color))

    def fill_text(self, text: str, center_x: float, center_y: float, size: int, color: str) -> None:
        self.canvas.record(("text", text, center_x, center_y, size, color))

    def add_pointer_listener(self, action: PointerAction, handler: PointerHandler) -> None:
        self.canvas.add_listener(action, handler)

    def remove_pointer_listener(self, action: PointerAction, handler: PointerHandler) -> None:
        self.canvas.remove_listener(action, handler)

    def present(self) -> None:
        self.canvas.update()
