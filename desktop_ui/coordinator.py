import logging
from typing import Optional

from PySide6.QtCore import QObject, Slot, Signal, Property

from config.base import BaseConfiguration
from core.api_client import MinesweeperAPIClient
from core.board_controller import BoardController
from core.data_models import BoardSnapshot, Difficulty, SnapshotError
from core.event_subscriber import BoardEventSubscriber
from desktop_ui.board_canvas import BoardCanvas

logger = logging.getLogger(__name__)


class DesktopCoordinator(QObject):
    def _format_time(self, seconds: int) -> str:
        if seconds is None or seconds < 0:
            return "00:00"
        m, s = divmod(int(seconds), 60)
        return f"{m:02}:{s:02}"

    # Qt signals for property changes
    boardChanged = Signal()
    statusChanged = Signal()

    def __init__(self, config: BaseConfiguration):
        super().__init__()
        self.config = config
        self.api_client: Optional[MinesweeperAPIClient] = None
        self.controller: Optional[BoardController] = None
        self._status_message = ""

        logger.info("Creating DesktopCoordinator instance")

    def start(self, controller: Optional[BoardController] = None) -> None:
        """
        Create the board controller. Must run inside the asyncio loop.

        Args:
            controller: Prebuilt controller to use instead of the configured one
        """
        if self.controller is not None:
            logger.warning("Coordinator already started")
            return
        self.controller = controller or self._build_controller()
        self.controller.add_snapshot_listener(self._on_snapshot)
        self.controller.add_error_listener(self._on_command_error)
        logger.info("Coordinator started with push channel %s", self.config.mqtt_topic)

    def _build_controller(self) -> BoardController:
        logger.debug("Starting board controller against %s", self.config.api_base_url)
        self.api_client = MinesweeperAPIClient(self.config.api_base_url, timeout=self.config.request_timeout)
        subscriber = BoardEventSubscriber(
            self.config.mqtt_host,
            self.config.mqtt_port,
            self.config.mqtt_topic,
            transport=self.config.mqtt_transport,
        )
        return BoardController(
            self.api_client,
            subscriber,
            max_cell_size=self.config.max_cell_size,
        )

    def attach_canvas(self, canvas: BoardCanvas) -> None:
        if not self.controller:
            logger.warning("Canvas attached before coordinator start")
            return
        self.controller.set_surface(canvas.surface)

    def _on_snapshot(self, snapshot: BoardSnapshot) -> None:
        logger.info(
            "Board update: %s %s elapsed=%s",
            snapshot.difficulty.value,
            snapshot.progress.value,
            snapshot.elapsed_seconds,
        )
        self._set_status("")
        self.boardChanged.emit()

    def _on_command_error(self, message: str) -> None:
        self._set_status(message)

    def _set_status(self, message: str) -> None:
        if message != self._status_message:
            self._status_message = message
            self.statusChanged.emit()

    # Qt Properties for QML binding
    @Property(str, notify=boardChanged)
    def progress(self) -> str:
        """Game progress: Ongoing, Won or Lost"""
        if not self.controller or not self.controller.snapshot:
            return ""
        return self.controller.snapshot.progress.value

    @Property(bool, notify=boardChanged)
    def isFinished(self) -> bool:
        if not self.controller or not self.controller.snapshot:
            return False
        return self.controller.snapshot.progress.is_terminal

    @Property(str, notify=boardChanged)
    def difficulty(self) -> str:
        if not self.controller or not self.controller.snapshot:
            return ""
        return self.controller.snapshot.difficulty.value

    @Property(int, notify=boardChanged)
    def elapsedSeconds(self) -> int:
        if not self.controller:
            return 0
        return self.controller.elapsed_seconds

    @Property(str, notify=boardChanged)
    def formattedElapsed(self) -> str:
        return self._format_time(self.elapsedSeconds)

    @Property(str, notify=statusChanged)
    def statusMessage(self) -> str:
        return self._status_message

    # ------------------------------------------------------------------
    # Command slots
    # ------------------------------------------------------------------
    @Slot(str)
    def newGame(self, difficulty: str) -> None:
        logger.info("New game requested: %s", difficulty)
        if not self.controller:
            logger.warning("New game requested but controller not initialized")
            return
        try:
            level = Difficulty.parse(difficulty)
        except SnapshotError as exc:
            logger.error("Rejected new game request: %s", exc)
            self._set_status(str(exc))
            return
        self.controller.new_game(level)

    @Slot()
    def refresh(self) -> None:
        logger.info("Refresh requested")
        if self.controller:
            self.controller.refresh()
        else:
            logger.warning("Refresh requested but controller not initialized")

    def cleanup(self) -> None:
        """Clean shutdown of coordinator"""
        logger.info("Cleaning up DesktopCoordinator")
        if self.controller:
            self.controller.remove_snapshot_listener(self._on_snapshot)
            self.controller.dispose()
            self.controller = None
        if self.api_client:
            self.api_client.close()
            self.api_client = None
        logger.info("Coordinator cleaned up")
