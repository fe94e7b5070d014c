"""Command-line driver for playing a duel against the bot."""

from __future__ import annotations

import argparse
from typing import Sequence

from battleship_duel.bot.targeting import Difficulty
from battleship_duel.config import DuelSettings, load_settings
from battleship_duel.engine.board import CellState
from battleship_duel.engine.errors import BattleshipError
from battleship_duel.engine.match import Side
from battleship_duel.engine.ship import BOARD_SIZE
from battleship_duel.service.registry import MatchRegistry
from battleship_duel.service.views import ShotReport
from battleship_duel.telemetry import init_telemetry

ROW_LABELS = "ABCDEFGHIJ"

OWN_SYMBOLS = {
    CellState.EMPTY: ".",
    CellState.SHIP: "S",
    CellState.HIT: "X",
    CellState.MISS: "o",
}


def parse_coordinate(text: str) -> tuple[int, int]:
    """Accept ``A5`` (row letter, 1-based column) or ``"3 7"`` (0-based row/col)."""
    cleaned = text.strip().upper()
    if not cleaned:
        raise ValueError("Empty coordinate.")
    if cleaned[0].isalpha():
        if cleaned[0] not in ROW_LABELS:
            raise ValueError("Row must be between A and J.")
        row = ROW_LABELS.index(cleaned[0])
        try:
            col = int(cleaned[1:]) - 1
        except ValueError as exc:
            raise ValueError("Column must be a number between 1 and 10.") from exc
    else:
        parts = cleaned.replace(",", " ").split()
        if len(parts) != 2:
            raise ValueError("Use formats like A5 or '3 7'.")
        try:
            row, col = map(int, parts)
        except ValueError as exc:
            raise ValueError("Coordinates must be numbers.") from exc
    return row, col


def format_label(row: int, col: int) -> str:
    return f"{ROW_LABELS[row]}{col + 1}"


def format_grid(cells: Sequence[Sequence[CellState]]) -> str:
    header = "    " + " ".join(f"{col + 1:>2}" for col in range(BOARD_SIZE))
    rows = [header]
    for row, line in enumerate(cells):
        symbols = " ".join(f"{OWN_SYMBOLS[cell]:>2}" for cell in line)
        rows.append(f"{ROW_LABELS[row]} |{symbols}")
    return "\n".join(rows)


def _blank_grid() -> list[list[CellState]]:
    return [[CellState.EMPTY] * BOARD_SIZE for _ in range(BOARD_SIZE)]


def _describe(side: Side, shot: ShotReport) -> str:
    outcome = "hit" if shot.result is CellState.HIT else "miss"
    who = "You" if side is Side.HUMAN else "The bot"
    return f"{who} fired at {format_label(shot.row, shot.col)}: {outcome}"


def play_game(difficulty: Difficulty, settings: DuelSettings) -> Side:
    registry = MatchRegistry(settings)
    match_id = registry.create_match(difficulty)
    own = [list(row) for row in registry.get_initial_view(match_id).cells]
    enemy = _blank_grid()
    print(f"Battle started against a {difficulty.value} bot.\n")

    while True:
        print("\nYour Board:")
        print(format_grid(own))
        print("\nEnemy Waters:")
        print(format_grid(enemy))

        raw = input("Enter target coordinate (e.g., A5) or 'q' to quit: ").strip()
        if raw.lower() == "q":
            raise SystemExit("Goodbye!")
        try:
            row, col = parse_coordinate(raw)
            report = registry.submit_shot(match_id, row, col)
        except (ValueError, BattleshipError) as exc:
            print(f"Invalid shot: {exc}")
            continue

        enemy[report.human.row][report.human.col] = report.human.result
        print(_describe(Side.HUMAN, report.human))
        if report.bot is not None:
            own[report.bot.row][report.bot.col] = report.bot.result
            print(_describe(Side.BOT, report.bot))
        if report.winner is not None:
            if report.winner is Side.HUMAN:
                print("\nVICTORY! The enemy fleet is destroyed.")
            else:
                print("\nDEFEAT. The bot sank your fleet.")
            registry.discard(match_id)
            return report.winner


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Play Battleship against a scripted bot.")
    parser.add_argument(
        "--difficulty",
        default=None,
        help="Bot tier: easy, medium or hard (unknown values fall back to easy).",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    args = parser.parse_args(argv)

    init_telemetry()
    settings = load_settings()
    if args.seed is not None:
        settings = settings.model_copy(update={"rng_seed": args.seed})
    difficulty = (
        Difficulty.parse(args.difficulty) if args.difficulty else settings.default_difficulty
    )
    play_game(difficulty, settings)


if __name__ == "__main__":
    main()
