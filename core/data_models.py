"""Core data structures for the Minesweeper client.

Board snapshots as pushed or returned by the engine, plus the wire decoding
shared by the HTTP and push-channel adapters.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Optional


class SnapshotError(ValueError):
    """Raised when a snapshot payload cannot be decoded."""


class CellState(str, Enum):
    HIDDEN = "Hidden"
    FLAGGED = "Flagged"
    BOMB = "Bomb"
    REVEALED = "Revealed"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, raw: Any) -> "Difficulty":
        try:
            return cls(str(raw).lower())
        except ValueError as exc:
            raise SnapshotError(f"Unknown difficulty: {raw!r}") from exc


class GameProgress(str, Enum):
    ONGOING = "Ongoing"
    WON = "Won"
    LOST = "Lost"

    @property
    def is_terminal(self) -> bool:
        return self is not GameProgress.ONGOING


@dataclass(frozen=True, slots=True)
class Cell:
    """One board cell. ``count`` is only meaningful for REVEALED."""
    state: CellState
    count: int = 0

    @classmethod
    def hidden(cls) -> "Cell":
        return cls(CellState.HIDDEN)

    @classmethod
    def flagged(cls) -> "Cell":
        return cls(CellState.FLAGGED)

    @classmethod
    def bomb(cls) -> "Cell":
        return cls(CellState.BOMB)

    @classmethod
    def revealed(cls, count: int) -> "Cell":
        return cls(CellState.REVEALED, count)

    def to_wire(self) -> Any:
        if self.state is CellState.REVEALED:
            return {"Revealed": self.count}
        return self.state.value


def parse_cell(raw: Any) -> Any:
    """
    Decode one wire cell.

    Accepts ``"Hidden"``, ``"Flagged"``, ``"Bomb"``, ``{"Revealed": n}`` and the
    engine's ``{"state": ...}`` wrapper around any of those.

    Returns:
        A Cell, or the raw value unchanged when it is not a recognized state
    """
    if isinstance(raw, Mapping) and set(raw) == {"state"}:
        raw = raw["state"]

    if isinstance(raw, str):
        if raw in (CellState.HIDDEN.value, CellState.FLAGGED.value, CellState.BOMB.value):
            return Cell(CellState(raw))
        return raw

    if isinstance(raw, Mapping) and set(raw) == {"Revealed"}:
        count = raw["Revealed"]
        # bool is an int subclass
        if isinstance(count, int) and not isinstance(count, bool) and count >= 0:
            return Cell.revealed(count)

    return raw


@dataclass(frozen=True)
class BoardSnapshot:
    """Wholesale board state from the engine.

    ``cells`` holds Cell objects; any value the decoder did not recognize is
    kept as its raw wire value so the renderer can report and skip it.
    """
    difficulty: Difficulty
    cells: List[List[Any]]
    progress: GameProgress = GameProgress.ONGOING
    elapsed_seconds: Optional[int] = None
    sequence: Optional[int] = None

    def __post_init__(self) -> None:
        if self.cells:
            width = len(self.cells[0])
            for index, row in enumerate(self.cells):
                if len(row) != width:
                    raise SnapshotError(
                        f"Board is not rectangular: row {index} has {len(row)} cells, expected {width}"
                    )

    @property
    def row_count(self) -> int:
        return len(self.cells)

    @property
    def column_count(self) -> int:
        return len(self.cells[0]) if self.cells else 0

    @classmethod
    def from_wire(cls, data: Any) -> "BoardSnapshot":
        """
        Decode a snapshot payload.

        Recognizes both ``progress``/``elapsedSeconds`` and the engine's native
        ``game_state``/``time_elapsed`` (milliseconds) keys.

        Raises:
            SnapshotError: If the payload structure is invalid
        """
        if not isinstance(data, Mapping):
            raise SnapshotError(f"Snapshot must be an object, got {type(data).__name__}")

        raw_cells = data.get("cells")
        if not isinstance(raw_cells, list) or not all(isinstance(row, list) for row in raw_cells):
            raise SnapshotError("Snapshot 'cells' must be a list of rows")
        cells = [[parse_cell(raw) for raw in row] for row in raw_cells]

        raw_progress = data.get("progress", data.get("game_state", GameProgress.ONGOING.value))
        try:
            progress = GameProgress(raw_progress)
        except ValueError as exc:
            raise SnapshotError(f"Unknown game progress: {raw_progress!r}") from exc

        elapsed: Optional[int] = None
        if data.get("elapsedSeconds") is not None:
            elapsed = _non_negative_int(data["elapsedSeconds"], "elapsedSeconds")
        elif data.get("time_elapsed") is not None:
            elapsed = _non_negative_int(data["time_elapsed"], "time_elapsed") // 1000

        sequence = data.get("sequence")
        if sequence is not None:
            sequence = _non_negative_int(sequence, "sequence")

        return cls(
            difficulty=Difficulty.parse(data.get("difficulty", Difficulty.MEDIUM.value)),
            cells=cells,
            progress=progress,
            elapsed_seconds=elapsed,
            sequence=sequence,
        )

    def to_wire(self) -> dict:
        data: dict = {
            "difficulty": self.difficulty.value,
            "cells": [[cell.to_wire() if isinstance(cell, Cell) else cell for cell in row] for row in self.cells],
            "progress": self.progress.value,
        }
        if self.elapsed_seconds is not None:
            data["elapsedSeconds"] = self.elapsed_seconds
        if self.sequence is not None:
            data["sequence"] = self.sequence
        return data


def _non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise SnapshotError(f"Snapshot '{field_name}' must be a non-negative number, got {value!r}")
    return int(value)
