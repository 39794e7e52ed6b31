import logging
import os
import sys
from pathlib import Path

from PySide6 import QtAsyncio
from PySide6.QtGui import QGuiApplication
from PySide6.QtQml import QQmlApplicationEngine, qmlRegisterType

from config import ConfigurationError, DesktopConfiguration
from desktop_ui.board_canvas import BoardCanvas
from desktop_ui.coordinator import DesktopCoordinator

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    # Configure default console logging if not already configured
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        )


def register_qml_types() -> None:
    """Register custom Qt types for QML usage."""
    qmlRegisterType(BoardCanvas, "Minesweeper", 1, 0, "BoardCanvas")


def main() -> int:
    # Set Qt Quick Controls style to Basic to allow background customization
    os.environ["QT_QUICK_CONTROLS_STYLE"] = "Basic"

    try:
        config = DesktopConfiguration.from_env()
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}")
        return 1
    configure_logging(config.log_level)

    app = QGuiApplication(sys.argv)
    register_qml_types()
    engine = QQmlApplicationEngine()

    coordinator = DesktopCoordinator(config)
    engine.rootContext().setContextProperty("coordinator", coordinator)
    engine.rootContext().setContextProperty("surfaceWidth", config.surface_width)
    engine.rootContext().setContextProperty("surfaceHeight", config.surface_height)

    qml_file = Path(__file__).parent / "qml" / "MainWindow.qml"
    engine.load(qml_file)

    if not engine.rootObjects():
        print("Failed to load QML")
        return 1

    canvas = engine.rootObjects()[0].findChild(BoardCanvas, "boardCanvas")
    if canvas is None:
        print("Board canvas missing from QML")
        return 1

    async def start() -> None:
        coordinator.start()
        coordinator.attach_canvas(canvas)

    try:
        QtAsyncio.run(start(), keep_running=True, quit_qapp=True, handle_sigint=True)
    finally:
        coordinator.cleanup()
    return 0
