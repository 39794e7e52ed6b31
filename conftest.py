"""Shared fakes for the board client tests."""
import asyncio
from typing import Dict, List, Optional, Tuple

import pytest

from core.api_client import APIRequestError
from core.data_models import BoardSnapshot, Cell, Difficulty
from core.event_subscriber import PushSubscription
from core.ui_logic.surface import DrawingSurface, PointerAction, PointerEvent, PointerHandler


def make_board(rows: int = 9, cols: int = 9, cell: Optional[Cell] = None, **kwargs) -> BoardSnapshot:
    fill = cell or Cell.hidden()
    return BoardSnapshot(
        difficulty=kwargs.pop("difficulty", Difficulty.EASY),
        cells=[[fill for _ in range(cols)] for _ in range(rows)],
        **kwargs,
    )


class RecordingSurface(DrawingSurface):
    """In-memory surface recording every drawing call."""

    def __init__(self, width: int = 600, height: int = 600, origin: Tuple[float, float] = (0, 0)) -> None:
        self._width = width
        self._height = height
        self.origin = origin
        self.ops: List[tuple] = []
        self.listeners: Dict[PointerAction, List[PointerHandler]] = {
            PointerAction.PRIMARY: [],
            PointerAction.SECONDARY: [],
        }
        self.presented = 0

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def bounding_origin(self) -> Tuple[float, float]:
        return self.origin

    def clear(self) -> None:
        self.ops.clear()
        self.ops.append(("clear",))

    def fill_rect(self, x, y, width, height, color) -> None:
        self.ops.append(("fill", x, y, width, height, color))

    def stroke_rect(self, x, y, width, height, color) -> None:
        self.ops.append(("stroke", x, y, width, height, color))

    def fill_text(self, text, center_x, center_y, size, color) -> None:
        self.ops.append(("text", text, center_x, center_y, size, color))

    def add_pointer_listener(self, action, handler) -> None:
        self.listeners[action].append(handler)

    def remove_pointer_listener(self, action, handler) -> None:
        if handler in self.listeners[action]:
            self.listeners[action].remove(handler)

    def present(self) -> None:
        self.presented += 1

    def click(self, x: float, y: float, action: PointerAction = PointerAction.PRIMARY) -> PointerEvent:
        event = PointerEvent(x, y, action)
        for handler in list(self.listeners[action]):
            handler(event)
        return event


class FakeAPIClient:
    """Async command client returning queued snapshots."""

    def __init__(self, state: Optional[BoardSnapshot] = None) -> None:
        self.state = state
        self.calls: List[tuple] = []
        self.responses: List[object] = []
        self.gate: Optional[asyncio.Event] = None

    async def _respond(self, call: tuple) -> BoardSnapshot:
        self.calls.append(call)
        if self.gate is not None:
            await self.gate.wait()
        result = self.responses.pop(0) if self.responses else self.state
        if isinstance(result, Exception):
            raise result
        if result is None:
            raise APIRequestError("no board", status_code=500)
        return result

    async def async_get_state(self) -> BoardSnapshot:
        return await self._respond(("get_state",))

    async def async_new_game(self, difficulty: Difficulty) -> BoardSnapshot:
        return await self._respond(("new_game", difficulty))

    async def async_reveal(self, row: int, col: int) -> BoardSnapshot:
        return await self._respond(("reveal", row, col))

    async def async_toggle_flag(self, row: int, col: int) -> BoardSnapshot:
        return await self._respond(("toggle_flag", row, col))


class FakeSubscriber:
    """Push subscriber whose messages are delivered by the test."""

    def __init__(self) -> None:
        self.handler = None
        self.loop = None
        self.cancel_count = 0
        self.subscription: Optional[PushSubscription] = None

    def subscribe(self, handler, loop) -> PushSubscription:
        self.handler = handler
        self.loop = loop
        self.subscription = PushSubscription(self._cancel)
        return self.subscription

    def _cancel(self) -> None:
        self.cancel_count += 1

    def push(self, snapshot: BoardSnapshot) -> None:
        if self.subscription is not None and not self.subscription.cancelled:
            self.handler(snapshot)


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def api() -> FakeAPIClient:
    return FakeAPIClient(make_board())


@pytest.fixture
def subscriber() -> FakeSubscriber:
    return FakeSubscriber()


@pytest.fixture
def board_factory():
    return make_board
