"""Randomised fleet placement."""

from __future__ import annotations

import logging
import random
from typing import Sequence

from battleship_duel.telemetry import get_tracer

from .board import Board
from .errors import PlacementError
from .ship import FLEET_LENGTHS, Coordinate, Direction, Ship

logger = logging.getLogger(__name__)
tracer = get_tracer("battleship_duel.engine.placement")

DEFAULT_MAX_ATTEMPTS = 10_000


def place_random(
    board: Board,
    rng: random.Random | None = None,
    lengths: Sequence[int] = FLEET_LENGTHS,
    max_attempts: int | None = DEFAULT_MAX_ATTEMPTS,
) -> list[Ship]:
    """Place one ship per entry of ``lengths`` at uniformly random spots.

    Each ship is resampled until ``Board.place`` accepts it, which is also what
    keeps ships from overlapping. ``max_attempts`` caps the retries per ship;
    ``None`` retries forever.
    """
    rng = rng or random.Random()
    placed: list[Ship] = []
    with tracer.start_as_current_span("placement.place_random") as span:
        span.set_attribute("board.owner", board.owner)
        span.set_attribute("fleet.size", len(lengths))
        for index, length in enumerate(lengths):
            attempts = 0
            while True:
                if max_attempts is not None and attempts >= max_attempts:
                    logger.error(
                        "random_placement_exhausted",
                        extra={"owner": board.owner, "length": length, "attempts": attempts},
                    )
                    raise PlacementError(
                        f"Could not place ship of length {length} after {attempts} attempts."
                    )
                attempts += 1
                candidate = Ship(
                    ship_id=f"ship_{index}",
                    length=length,
                    anchor=Coordinate(rng.randrange(board.size), rng.randrange(board.size)),
                    direction=rng.choice(list(Direction)),
                )
                try:
                    board.place(candidate)
                except PlacementError:
                    continue
                placed.append(candidate)
                break
            logger.debug(
                "random_ship_placed",
                extra={"ship_id": candidate.ship_id, "attempts": attempts, "owner": board.owner},
            )
    return placed
