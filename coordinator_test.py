"""
Test coordinator properties and Qt signal integration
"""
import asyncio
import os
import sys

import pytest

pytest.importorskip("PySide6.QtQuick")

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtGui import QGuiApplication

from config.base import BaseConfiguration
from conftest import FakeAPIClient, make_board
from core.api_client import APIRequestError
from core.board_controller import BoardController
from core.data_models import Difficulty, GameProgress
from desktop_ui.coordinator import DesktopCoordinator


@pytest.fixture(scope="module")
def app():
    return QGuiApplication.instance() or QGuiApplication(sys.argv)


def test_coordinator_properties(app):
    api = FakeAPIClient(make_board(progress=GameProgress.WON, elapsed_seconds=75, difficulty=Difficulty.MEDIUM))
    coordinator = DesktopCoordinator(BaseConfiguration())

    # Initial state before start
    assert coordinator.progress == ""
    assert coordinator.elapsedSeconds == 0
    assert coordinator.formattedElapsed == "00:00"
    assert not coordinator.isFinished

    signal_received = {"board": 0}

    def on_board_changed():
        signal_received["board"] += 1

    coordinator.boardChanged.connect(on_board_changed)

    async def scenario():
        coordinator.start(BoardController(api, fetch_initial_state=False))
        await coordinator.controller.refresh()

    asyncio.run(scenario())
    app.processEvents()

    assert signal_received["board"] == 1
    assert coordinator.progress == "Won"
    assert coordinator.isFinished
    assert coordinator.difficulty == "medium"
    assert coordinator.elapsedSeconds == 75
    assert coordinator.formattedElapsed == "01:15"

    coordinator.cleanup()
    assert coordinator.controller is None


def test_command_error_sets_status_until_next_board(app):
    api = FakeAPIClient(make_board())
    api.responses.append(APIRequestError("Game is not ongoing", status_code=500))
    coordinator = DesktopCoordinator(BaseConfiguration())
    status_changes = []
    coordinator.statusChanged.connect(lambda: status_changes.append(coordinator.statusMessage))

    async def scenario():
        coordinator.start(BoardController(api, fetch_initial_state=False))
        await coordinator.controller.reveal(0, 0)
        await coordinator.controller.reveal(0, 0)

    asyncio.run(scenario())
    assert status_changes == ["Reveal failed: Game is not ongoing", ""]
    coordinator.cleanup()


def test_new_game_slot_rejects_unknown_difficulty(app):
    api = FakeAPIClient(make_board())
    coordinator = DesktopCoordinator(BaseConfiguration())
    rejected = []

    async def scenario():
        coordinator.start(BoardController(api, fetch_initial_state=False))
        coordinator.newGame("impossible")
        rejected.append(coordinator.statusMessage)
        coordinator.newGame("Hard")
        while coordinator.controller.pending_commands:
            await asyncio.sleep(0)

    asyncio.run(scenario())
    assert api.calls == [("new_game", Difficulty.HARD)]
    assert "impossible" in rejected[0]
    assert coordinator.statusMessage == ""
    coordinator.cleanup()
