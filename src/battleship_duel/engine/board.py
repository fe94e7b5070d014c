"""Per-side board: cell grid, fleet and remaining health."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from battleship_duel.telemetry import get_meter, get_tracer

from .errors import AlreadyFiredError, OutOfBoundsError, PlacementError
from .ship import BOARD_SIZE, FLEET_HEALTH, Coordinate, Ship

logger = logging.getLogger(__name__)
tracer = get_tracer("battleship_duel.engine.board")
meter = get_meter("battleship_duel.engine.board")

PLACEMENT_COUNTER = meter.create_counter(
    "battleship_duel_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)

SHOT_COUNTER = meter.create_counter(
    "battleship_duel_shots_received",
    unit="1",
    description="Shots resolved against a board",
)


class CellState(Enum):
    """State of a single grid cell.

    ``EMPTY -> SHIP`` happens only during placement, ``SHIP -> HIT`` and
    ``EMPTY -> MISS`` only during shot resolution. ``HIT`` and ``MISS`` are
    terminal.
    """

    EMPTY = "Empty"
    SHIP = "Ship"
    HIT = "Hit"
    MISS = "Miss"

    @property
    def is_resolved(self) -> bool:
        return self is CellState.HIT or self is CellState.MISS


def _empty_grid() -> list[list[CellState]]:
    return [[CellState.EMPTY for _ in range(BOARD_SIZE)] for _ in range(BOARD_SIZE)]


@dataclass
class Board:
    """A 10×10 grid plus the ships placed on it."""

    owner: str = "unknown"
    cells: list[list[CellState]] = field(default_factory=_empty_grid)
    ships: list[Ship] = field(default_factory=list)
    total_health: int = FLEET_HEALTH
    remaining_health: int = field(init=False)

    def __post_init__(self) -> None:
        self.remaining_health = self.total_health

    @property
    def size(self) -> int:
        return BOARD_SIZE

    def is_valid_coordinate(self, coord: Coordinate) -> bool:
        return 0 <= coord.row < self.size and 0 <= coord.col < self.size

    def cell(self, coord: Coordinate) -> CellState:
        return self.cells[coord.row][coord.col]

    def place(self, ship: Ship) -> None:
        """Mark every cell of ``ship`` as occupied, or raise without touching the grid."""
        with tracer.start_as_current_span("board.place") as span:
            span.set_attribute("ship.id", ship.ship_id)
            span.set_attribute("ship.length", ship.length)
            span.set_attribute("ship.anchor.row", ship.anchor.row)
            span.set_attribute("ship.anchor.col", ship.anchor.col)
            span.set_attribute("board.owner", self.owner)

            coords = ship.coordinates()
            for coord in coords:
                if not self.is_valid_coordinate(coord):
                    self._reject_placement(ship, "out_of_bounds")
                    raise PlacementError("Ship goes out of bounds.")
                if self.cell(coord) is not CellState.EMPTY:
                    self._reject_placement(ship, "collision")
                    raise PlacementError(f"Collision at {coord.row},{coord.col}")

            for coord in coords:
                self.cells[coord.row][coord.col] = CellState.SHIP
            self.ships.append(ship)
            PLACEMENT_COUNTER.add(1, attributes={"result": "success", "owner": self.owner})
            logger.info(
                "ship_placed",
                extra={
                    "owner": self.owner,
                    "ship_id": ship.ship_id,
                    "length": ship.length,
                    "direction": ship.direction.name,
                    "row": ship.anchor.row,
                    "col": ship.anchor.col,
                },
            )

    def check_target(self, coord: Coordinate) -> None:
        """Raise if ``coord`` cannot be fired at; never mutates the board."""
        if not self.is_valid_coordinate(coord):
            logger.error(
                "shot_out_of_bounds",
                extra={"row": coord.row, "col": coord.col, "owner": self.owner},
            )
            raise OutOfBoundsError("shot out of bounds")
        if self.cell(coord).is_resolved:
            logger.error(
                "shot_duplicate",
                extra={"row": coord.row, "col": coord.col, "owner": self.owner},
            )
            raise AlreadyFiredError("Already fired here!")

    def receive_shot(self, coord: Coordinate) -> CellState:
        """Resolve a shot and return ``HIT`` or ``MISS``.

        This is the only place where a cell can change after placement, so a
        rejected shot never alters cells or health.
        """
        with tracer.start_as_current_span("board.receive_shot") as span:
            span.set_attribute("shot.row", coord.row)
            span.set_attribute("shot.col", coord.col)
            span.set_attribute("board.owner", self.owner)
            self.check_target(coord)

            if self.cell(coord) is CellState.EMPTY:
                self.cells[coord.row][coord.col] = CellState.MISS
                span.set_attribute("shot.outcome", "miss")
                SHOT_COUNTER.add(1, attributes={"outcome": "miss", "owner": self.owner})
                logger.info(
                    "shot_miss", extra={"row": coord.row, "col": coord.col, "owner": self.owner}
                )
                return CellState.MISS

            self.cells[coord.row][coord.col] = CellState.HIT
            self.remaining_health -= 1
            span.set_attribute("shot.outcome", "hit")
            SHOT_COUNTER.add(1, attributes={"outcome": "hit", "owner": self.owner})

            ship = self.ship_at(coord)
            if ship is not None:
                ship.hits += 1
            logger.info(
                "shot_hit",
                extra={
                    "row": coord.row,
                    "col": coord.col,
                    "ship_id": ship.ship_id if ship else None,
                    "remaining_health": self.remaining_health,
                    "owner": self.owner,
                },
            )
            if ship is not None and ship.is_sunk():
                logger.info("ship_sunk", extra={"ship_id": ship.ship_id, "owner": self.owner})
            return CellState.HIT

    def ship_at(self, coord: Coordinate) -> Ship | None:
        for ship in self.ships:
            if ship.occupies(coord):
                return ship
        return None

    def hits_taken(self) -> int:
        """Hits derived from health, the figure win detection relies on."""
        return self.total_health - self.remaining_health

    def count(self, state: CellState) -> int:
        return sum(1 for row in self.cells for cell in row if cell is state)

    def all_ships_sunk(self) -> bool:
        return bool(self.ships) and all(ship.is_sunk() for ship in self.ships)

    def snapshot(self) -> tuple[tuple[CellState, ...], ...]:
        """Return an immutable copy of the grid."""
        return tuple(tuple(row) for row in self.cells)

    def _reject_placement(self, ship: Ship, reason: str) -> None:
        PLACEMENT_COUNTER.add(1, attributes={"result": "failed", "owner": self.owner})
        logger.debug(
            "ship_placement_failed",
            extra={
                "owner": self.owner,
                "ship_id": ship.ship_id,
                "reason": reason,
                "row": ship.anchor.row,
                "col": ship.anchor.col,
            },
        )
