"""CLI parsing and a scripted game."""

import itertools

import pytest

from battleship_duel import cli
from battleship_duel.bot.targeting import Difficulty
from battleship_duel.config import DuelSettings
from battleship_duel.engine.board import CellState
from battleship_duel.engine.match import Side


@pytest.mark.parametrize(
    ("text", "expected"),
    [("A1", (0, 0)), ("j10", (9, 9)), ("C5", (2, 4)), ("3 7", (3, 7)), ("3,7", (3, 7))],
)
def test_parse_coordinate(text: str, expected: tuple[int, int]) -> None:
    assert cli.parse_coordinate(text) == expected


@pytest.mark.parametrize("text", ["", "Z1", "Ax", "1 2 3", "a b"])
def test_parse_coordinate_rejects_bad_input(text: str) -> None:
    with pytest.raises(ValueError):
        cli.parse_coordinate(text)


def test_format_grid_symbols() -> None:
    cells = [[CellState.EMPTY] * 10 for _ in range(10)]
    cells[0][0] = CellState.SHIP
    cells[0][1] = CellState.HIT
    cells[0][2] = CellState.MISS
    lines = cli.format_grid(cells).splitlines()
    assert len(lines) == 11
    assert lines[1].startswith("A | S  X  o  .")


def test_play_game_runs_to_a_winner(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    moves = iter(["Z9", "A1", "A1"] + [f"{r} {c}" for r, c in itertools.product(range(10), range(10))][1:])
    monkeypatch.setattr("builtins.input", lambda _prompt: next(moves))

    winner = cli.play_game(Difficulty.EASY, DuelSettings(rng_seed=4))

    assert winner in (Side.HUMAN, Side.BOT)
    out = capsys.readouterr().out
    assert "Invalid shot" in out
    assert "VICTORY" in out or "DEFEAT" in out
