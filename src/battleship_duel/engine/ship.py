"""Ship domain model for the duel engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

BOARD_SIZE = 10
FLEET_LENGTHS: tuple[int, ...] = (5, 4, 3, 3, 2)
FLEET_HEALTH = sum(FLEET_LENGTHS)
MIN_SHIP_LENGTH = 2
MAX_SHIP_LENGTH = 5


@dataclass(frozen=True)
class Coordinate:
    """Immutable (row, col) board coordinate."""

    row: int
    col: int

    def neighbours(self) -> list[Coordinate]:
        """Return the four orthogonal neighbours, in-bounds or not."""
        return [
            Coordinate(self.row - 1, self.col),
            Coordinate(self.row + 1, self.col),
            Coordinate(self.row, self.col - 1),
            Coordinate(self.row, self.col + 1),
        ]

    def is_adjacent(self, other: Coordinate) -> bool:
        return abs(self.row - other.row) + abs(self.col - other.col) == 1


class Direction(Enum):
    """Orientation of a placed ship relative to its anchor."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass
class Ship:
    """A ship of ``length`` cells extending from ``anchor`` along ``direction``."""

    ship_id: str
    length: int
    anchor: Coordinate
    direction: Direction
    hits: int = 0

    def __post_init__(self) -> None:
        if not MIN_SHIP_LENGTH <= self.length <= MAX_SHIP_LENGTH:
            raise ValueError(
                f"Ship length must be between {MIN_SHIP_LENGTH} and {MAX_SHIP_LENGTH}."
            )

    def coordinates(self) -> list[Coordinate]:
        """Return the ordered cells this ship occupies."""
        if self.direction is Direction.HORIZONTAL:
            return [Coordinate(self.anchor.row, self.anchor.col + i) for i in range(self.length)]
        return [Coordinate(self.anchor.row + i, self.anchor.col) for i in range(self.length)]

    def occupies(self, coord: Coordinate) -> bool:
        if self.direction is Direction.HORIZONTAL:
            return coord.row == self.anchor.row and 0 <= coord.col - self.anchor.col < self.length
        return coord.col == self.anchor.col and 0 <= coord.row - self.anchor.row < self.length

    def is_sunk(self) -> bool:
        return self.hits >= self.length
