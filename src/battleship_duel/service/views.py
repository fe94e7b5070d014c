"""Caller-facing views of match state and their JSON payload shapes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from battleship_duel.engine.board import CellState
from battleship_duel.engine.errors import BattleshipError, MalformedShotError
from battleship_duel.engine.match import Side


@dataclass(frozen=True)
class BoardSnapshot:
    """Full cell grid of a board, ship positions included."""

    cells: tuple[tuple[CellState, ...], ...]

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": "init",
            "board": [[cell.value for cell in row] for row in self.cells],
        }


@dataclass(frozen=True)
class ShotReport:
    row: int
    col: int
    result: CellState

    def to_dict(self) -> dict[str, Any]:
        return {"row": self.row, "col": self.col, "result": self.result.value}


@dataclass(frozen=True)
class TurnReport:
    """Outcome of one exchange: the human shot, the bot reply and any winner."""

    human: ShotReport
    bot: ShotReport | None = None
    winner: Side | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "status": "success",
            "turn_update": {
                "user": self.human.to_dict(),
                "bot": self.bot.to_dict() if self.bot else None,
                "winner": self.winner.value if self.winner else None,
            },
        }


def created_payload(match_id: str) -> dict[str, Any]:
    return {"status": "created", "game_id": match_id}


def error_payload(exc: BattleshipError) -> dict[str, Any]:
    return {"status": "error", "code": exc.code, "message": str(exc)}


def parse_shot_message(text: str) -> tuple[int, int]:
    """Decode a ``"row,col"`` text frame into integers."""
    parts = text.split(",")
    if len(parts) != 2:
        raise MalformedShotError(f"Expected 'row,col', got {text!r}.")
    try:
        return int(parts[0].strip()), int(parts[1].strip())
    except ValueError as exc:
        raise MalformedShotError(f"Coordinates must be integers, got {text!r}.") from exc
