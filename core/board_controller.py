"""
Board view-controller.

Wires the board store, renderer, input mapper, remote command client and
push subscription together, and owns the input listeners bound to the
current drawing surface. Runs on a single asyncio loop; the only suspension
points are remote commands and push deliveries.
"""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Set

from .api_client import MinesweeperAPIClient, MinesweeperAPIError
from .board_store import DEFAULT_MAX_CELL_SIZE, BoardStateStore, SnapshotCallback
from .data_models import BoardSnapshot, Difficulty
from .event_subscriber import BoardEventSubscriber, PushSubscription
from .ui_logic.board_renderer import BoardRenderer
from .ui_logic.input_mapper import GridCoordinate, InputMapper
from .ui_logic.surface import DrawingSurface, InputHandlers, PointerAction, PointerEvent

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[str], None]


class BoardController:
    """
    Mirrors the engine's board onto a drawing surface.

    Snapshots from the push channel and from command responses go through
    the same store; whichever is applied last is displayed. After
    ``dispose()`` late responses and push messages are discarded.
    """

    def __init__(
        self,
        api_client: MinesweeperAPIClient,
        subscriber: Optional[BoardEventSubscriber] = None,
        *,
        max_cell_size: int = DEFAULT_MAX_CELL_SIZE,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        fetch_initial_state: bool = True,
    ) -> None:
        """
        Create the controller and start listening for board updates.

        Args:
            api_client: Remote command client
            subscriber: Push-channel subscriber, None to rely on command responses only
            max_cell_size: Upper bound for the cell pixel size
            loop: Event loop to run on; defaults to the running loop
            fetch_initial_state: If True, request the current board once
        """
        self.api_client = api_client
        self.subscriber = subscriber
        self._loop = loop or asyncio.get_running_loop()

        self.renderer = BoardRenderer()
        self.input_mapper = InputMapper()
        self.store = BoardStateStore(max_cell_size, surface_width_provider=self._surface_width)
        self.store.set_render_callback(self.render)

        self._surface: Optional[DrawingSurface] = None
        self._handlers: Optional[InputHandlers] = None
        self._subscription: Optional[PushSubscription] = None
        self._tasks: Set[asyncio.Task] = set()
        self._error_callbacks: List[ErrorCallback] = []
        self._disposed = False

        if subscriber is not None:
            self._subscription = subscriber.subscribe(self._on_push_snapshot, self._loop)

        if fetch_initial_state:
            self.refresh()

        logger.info("Board controller initialized")

    # ------------------------------------------------------------------
    # Surface and input wiring
    # ------------------------------------------------------------------
    def set_surface(self, surface: DrawingSurface) -> None:
        """
        Bind to a drawing surface, replacing listeners on the previous one.

        Args:
            surface: New drawing target
        """
        if self._disposed:
            logger.warning("set_surface called on disposed controller")
            return

        self._detach_handlers()
        self._surface = surface
        handlers = InputHandlers(primary=self.handle_primary, secondary=self.handle_secondary)
        surface.add_pointer_listener(PointerAction.PRIMARY, handlers.primary)
        surface.add_pointer_listener(PointerAction.SECONDARY, handlers.secondary)
        self._handlers = handlers
        logger.debug("Attached to surface %dx%d", surface.width, surface.height)

        if self.store.snapshot is not None:
            self.store.refresh_metrics()
            self.render()

    def _detach_handlers(self) -> None:
        if self._surface is not None and self._handlers is not None:
            self._surface.remove_pointer_listener(PointerAction.PRIMARY, self._handlers.primary)
            self._surface.remove_pointer_listener(PointerAction.SECONDARY, self._handlers.secondary)
        self._handlers = None

    def _surface_width(self) -> Optional[int]:
        return self._surface.width if self._surface is not None else None

    @property
    def surface(self) -> Optional[DrawingSurface]:
        return self._surface

    def handle_primary(self, event: PointerEvent) -> None:
        """Primary click: reveal the cell under the pointer."""
        cell = self._cell_for(event)
        if cell is not None:
            self.reveal(cell.row, cell.col)

    def handle_secondary(self, event: PointerEvent) -> None:
        """Secondary click: toggle the flag on the cell under the pointer."""
        event.prevent_default()
        cell = self._cell_for(event)
        if cell is not None:
            logger.debug("Right-clicked on cell %s", cell)
            self.toggle_flag(cell.row, cell.col)

    def _cell_for(self, event: PointerEvent) -> Optional[GridCoordinate]:
        if self._disposed or self._surface is None or self.store.snapshot is None:
            return None
        cell_size = self.store.metrics.cell_size
        if cell_size <= 0:
            logger.warning("Ignoring click, surface too narrow for %d columns", self.store.snapshot.column_count)
            return None
        return self.input_mapper.map_event(event, self._surface.bounding_origin(), cell_size)

    # ------------------------------------------------------------------
    # Remote commands
    # ------------------------------------------------------------------
    def reveal(self, row: int, col: int) -> Optional[asyncio.Task]:
        return self._spawn("Reveal", self.api_client.async_reveal(row, col))

    def toggle_flag(self, row: int, col: int) -> Optional[asyncio.Task]:
        return self._spawn("Flag", self.api_client.async_toggle_flag(row, col))

    def new_game(self, difficulty: Difficulty) -> Optional[asyncio.Task]:
        return self._spawn("New game", self.api_client.async_new_game(difficulty), replace=True)

    def refresh(self) -> Optional[asyncio.Task]:
        return self._spawn("Refresh", self.api_client.async_get_state())

    def _spawn(self, label: str, command: Awaitable[BoardSnapshot],
               replace: bool = False) -> Optional[asyncio.Task]:
        if self._disposed:
            # close the coroutine so it is not reported as never awaited
            close = getattr(command, "close", None)
            if close:
                close()
            return None
        task = self._loop.create_task(self._run_command(label, command, replace))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    async def _run_command(self, label: str, command: Awaitable[BoardSnapshot], replace: bool = False) -> None:
        try:
            snapshot = await command
        except MinesweeperAPIError as exc:
            if self._disposed:
                return
            logger.warning("%s failed, keeping current board: %s", label, exc)
            self._notify_error(f"{label} failed: {exc}")
            return

        if self._disposed:
            logger.debug("Controller disposed, ignoring %s response", label)
            return
        self.store.set_snapshot(snapshot, replace=replace)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Board command crashed", exc_info=exc)

    @property
    def pending_commands(self) -> int:
        return len(self._tasks)

    # ------------------------------------------------------------------
    # Push channel
    # ------------------------------------------------------------------
    def _on_push_snapshot(self, snapshot: BoardSnapshot) -> None:
        if self._disposed:
            return
        self.store.set_snapshot(snapshot)

    # ------------------------------------------------------------------
    # Rendering and state access
    # ------------------------------------------------------------------
    def render(self) -> bool:
        return self.renderer.render(self._surface, self.store.snapshot, self.store.metrics)

    @property
    def snapshot(self) -> Optional[BoardSnapshot]:
        return self.store.snapshot

    @property
    def elapsed_seconds(self) -> int:
        return self.store.elapsed_seconds

    def add_snapshot_listener(self, callback: SnapshotCallback) -> None:
        self.store.add_listener(callback)

    def remove_snapshot_listener(self, callback: SnapshotCallback) -> None:
        self.store.remove_listener(callback)

    def add_error_listener(self, callback: ErrorCallback) -> None:
        if callback not in self._error_callbacks:
            self._error_callbacks.append(callback)

    def remove_error_listener(self, callback: ErrorCallback) -> None:
        if callback in self._error_callbacks:
            self._error_callbacks.remove(callback)

    def _notify_error(self, message: str) -> None:
        for callback in list(self._error_callbacks):
            try:
                callback(message)
            except Exception as exc:
                logger.error("Error listener failed: %s", exc)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------
    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Detach the push subscription and input listeners. Safe to call repeatedly."""
        if self._disposed:
            return
        self._disposed = True

        if self._subscription is not None:
            self._subscription.cancel()
        self._detach_handlers()
        self._surface = None
        self._error_callbacks.clear()
        self.store.close()
        logger.info("Board controller disposed (%d commands still in flight)", len(self._tasks))
