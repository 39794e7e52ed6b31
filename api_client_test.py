import asyncio

import pytest
import requests

from core.api_client import APIRequestError, MinesweeperAPIClient, MinesweeperAPIError
from core.data_models import Cell, Difficulty, GameProgress

BOARD = {
    "difficulty": "Easy",
    "cells": [[{"state": "Hidden"}, {"state": {"Revealed": 2}}]],
    "game_state": "Ongoing",
    "time_elapsed": None,
}


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse(payload=BOARD)
        self.error = error
        self.requests = []
        self.closed = False

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.requests.append((method, url, json, timeout))
        if self.error:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


def make_client(**kwargs):
    session = FakeSession(**kwargs)
    return MinesweeperAPIClient("http://engine:9091/", timeout=2.5, session=session), session


def test_reveal_posts_row_and_col():
    client, session = make_client()
    board = client.reveal(3, 4)
    assert session.requests == [("POST", "http://engine:9091/api/reveal_cell", {"row": 3, "col": 4}, 2.5)]
    assert board.cells[0][1] == Cell.revealed(2)
    assert board.progress is GameProgress.ONGOING


def test_toggle_flag_posts_to_flag_endpoint():
    client, session = make_client()
    client.toggle_flag(0, 8)
    assert session.requests[0][:3] == ("POST", "http://engine:9091/api/flag_cell", {"row": 0, "col": 8})


def test_new_game_and_get_state():
    client, session = make_client()
    client.new_game(Difficulty.HARD)
    client.get_state()
    assert session.requests[0][:3] == ("POST", "http://engine:9091/api/new_game", {"difficulty": "hard"})
    assert session.requests[1][:3] == ("GET", "http://engine:9091/api/get_game_state", None)


def test_non_200_raises_with_status():
    client, _ = make_client(response=FakeResponse(status_code=500, text="Game is not ongoing"))
    with pytest.raises(APIRequestError) as excinfo:
        client.reveal(0, 0)
    assert excinfo.value.status_code == 500
    assert excinfo.value.body == "Game is not ongoing"
    assert isinstance(excinfo.value, MinesweeperAPIError)


def test_transport_failure_raises():
    client, _ = make_client(error=requests.ConnectionError("refused"))
    with pytest.raises(APIRequestError) as excinfo:
        client.get_state()
    assert excinfo.value.status_code is None


def test_invalid_body_raises():
    client, _ = make_client(response=FakeResponse(payload={"cells": "nope"}))
    with pytest.raises(APIRequestError):
        client.get_state()
    client, _ = make_client(response=FakeResponse(payload=None))
    with pytest.raises(APIRequestError):
        client.get_state()


def test_async_wrappers_return_snapshots():
    client, session = make_client()

    async def run():
        return await client.async_reveal(1, 2), await client.async_toggle_flag(2, 1)

    revealed, flagged = asyncio.run(run())
    assert revealed.column_count == 2
    assert flagged.row_count == 1
    assert [r[1].rsplit("/", 1)[-1] for r in session.requests] == ["reveal_cell", "flag_cell"]


def test_close_closes_session():
    client, session = make_client()
    client.close()
    assert session.closed
