"""
Drawing surface and pointer input contracts.

Framework-neutral interface the renderer paints on and the controller binds
input listeners to. The Qt canvas implements it for the desktop; tests use
an in-memory recording surface.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Tuple


class PointerAction(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass
class PointerEvent:
    """Pointer press in viewport coordinates."""
    client_x: float
    client_y: float
    action: PointerAction = PointerAction.PRIMARY
    default_prevented: bool = field(default=False, init=False)

    def prevent_default(self) -> None:
        """Ask the surface to suppress the platform's default behavior."""
        self.default_prevented = True


PointerHandler = Callable[[PointerEvent], None]


@dataclass(frozen=True)
class InputHandlers:
    """The pair of listeners bound to one surface."""
    primary: PointerHandler
    secondary: PointerHandler


class DrawingSurface(ABC):
    """Abstract 2D drawing target with pointer input."""

    @property
    @abstractmethod
    def width(self) -> int:
        """Surface width in pixels."""

    @property
    @abstractmethod
    def height(self) -> int:
        """Surface height in pixels."""

    @abstractmethod
    def bounding_origin(self) -> Tuple[float, float]:
        """Top-left corner of the surface in viewport coordinates."""

    @abstractmethod
    def clear(self) -> None:
        """Erase the whole surface."""

    @abstractmethod
    def fill_rect(self, x: int, y: int, width: int, height: int, color: str) -> None:
        ...

    @abstractmethod
    def stroke_rect(self, x: int, y: int, width: int, height: int, color: str) -> None:
        ...

    @abstractmethod
    def fill_text(self, text: str, center_x: float, center_y: float, size: int, color: str) -> None:
        """Draw text centered on the given point."""

    @abstractmethod
    def add_pointer_listener(self, action: PointerAction, handler: PointerHandler) -> None:
        ...

    @abstractmethod
    def remove_pointer_listener(self, action: PointerAction, handler: PointerHandler) -> None:
        ...

    def present(self) -> None:
        """Flush drawing to screen; no-op for immediate surfaces."""
