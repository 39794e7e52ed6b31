import asyncio
import logging
from typing import Any, Dict, Optional

import requests

from core.data_models import BoardSnapshot, Difficulty, SnapshotError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://127.0.0.1:9091"


class MinesweeperAPIError(Exception):
    """Base error for engine API calls."""


class APIRequestError(MinesweeperAPIError):
    """The engine rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MinesweeperAPIClient:
    """Blocking HTTP client for the engine's command API, with async wrappers."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 5.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> BoardSnapshot:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method, url, json=payload, headers=self._headers(), timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise APIRequestError(f"Engine unreachable: {e}") from e

        if response.status_code != 200:
            logger.error(f"{method} {path} failed: {response.status_code} - {response.text}")
            raise APIRequestError(
                f"{path} returned {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            snapshot = BoardSnapshot.from_wire(response.json())
        except (ValueError, SnapshotError) as e:
            logger.error(f"{method} {path} returned an invalid board: {e}")
            raise APIRequestError(f"Invalid board from {path}: {e}", status_code=response.status_code) from e

        logger.debug(f"{method} {path} -> {snapshot.progress.value}")
        return snapshot

    def get_state(self) -> BoardSnapshot:
        return self._request("GET", "/api/get_game_state")

    def new_game(self, difficulty: Difficulty) -> BoardSnapshot:
        logger.info(f"Requesting new {difficulty.value} game")
        return self._request("POST", "/api/new_game", {"difficulty": difficulty.value})

    def reveal(self, row: int, col: int) -> BoardSnapshot:
        return self._request("POST", "/api/reveal_cell", {"row": row, "col": col})

    def toggle_flag(self, row: int, col: int) -> BoardSnapshot:
        return self._request("POST", "/api/flag_cell", {"row": row, "col": col})

    # ------------------------------------------------------------------
    # Async wrappers, run the blocking call in a worker thread
    # ------------------------------------------------------------------
    async def async_get_state(self) -> BoardSnapshot:
        return await asyncio.to_thread(self.get_state)

    async def async_new_game(self, difficulty: Difficulty) -> BoardSnapshot:
        return await asyncio.to_thread(self.new_game, difficulty)

    async def async_reveal(self, row: int, col: int) -> BoardSnapshot:
        return await asyncio.to_thread(self.reveal, row, col)

    async def async_toggle_flag(self, row: int, col: int) -> BoardSnapshot:
        return await asyncio.to_thread(self.toggle_flag, row, col)

    def close(self) -> None:
        """Close the HTTP session"""
        self.session.close()
        logger.info("MinesweeperAPIClient closed")
