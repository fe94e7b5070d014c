"""Hunt/target search strategy for the scripted side."""

from __future__ import annotations

import logging
import random
from collections import deque
from enum import Enum

from battleship_duel.engine.board import CellState
from battleship_duel.engine.errors import TargetsExhaustedError
from battleship_duel.engine.ship import BOARD_SIZE, Coordinate
from battleship_duel.telemetry import get_meter, get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer("battleship_duel.bot.targeting")
meter = get_meter("battleship_duel.bot.targeting")

BOT_SHOT_COUNTER = meter.create_counter(
    "battleship_duel_bot_shots",
    unit="1",
    description="Coordinates chosen by the bot, by search mode",
)


class Difficulty(Enum):
    """Bot strength tiers."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def parse(cls, text: str | None) -> Difficulty:
        """Map a user-supplied name onto a tier; anything unknown is ``EASY``."""
        if text:
            cleaned = text.strip().lower()
            for tier in cls:
                if tier.value.lower() == cleaned:
                    return tier
        return cls.EASY

    @property
    def follows_hits(self) -> bool:
        """Whether shot results feed the target queue."""
        return self is not Difficulty.EASY

    @property
    def parity_hunt(self) -> bool:
        return self is Difficulty.HARD


class BotMode(Enum):
    HUNT = "hunt"
    TARGET = "target"


class BotTargeting:
    """Chooses the bot's shots and learns from their results within one match.

    Hunt mode samples untried cells (checkerboard-only on ``HARD``). After a
    hit, the orthogonal neighbours are queued at the front so the newest lead
    is chased first; two adjacent hits lock the queue to their shared row or
    column.
    """

    def __init__(
        self,
        difficulty: Difficulty = Difficulty.EASY,
        rng: random.Random | None = None,
        size: int = BOARD_SIZE,
    ) -> None:
        self.difficulty = difficulty
        self.size = size
        self.fired: set[Coordinate] = set()
        self.last_hit: Coordinate | None = None
        self.queue: deque[Coordinate] = deque()
        self._rng = rng or random.Random()

    @property
    def mode(self) -> BotMode:
        return BotMode.TARGET if self.queue else BotMode.HUNT

    def in_bounds(self, coord: Coordinate) -> bool:
        return 0 <= coord.row < self.size and 0 <= coord.col < self.size

    def next_shot(self) -> Coordinate:
        """Return a coordinate never returned before and record it as fired."""
        with tracer.start_as_current_span("bot.next_shot") as span:
            span.set_attribute("difficulty", self.difficulty.value)
            mode = BotMode.TARGET
            coord = self._pop_target()
            if coord is None:
                mode = BotMode.HUNT
                coord = self._hunt()
            self.fired.add(coord)
            span.set_attribute("mode", mode.value)
            span.set_attribute("row", coord.row)
            span.set_attribute("col", coord.col)
            BOT_SHOT_COUNTER.add(
                1, attributes={"mode": mode.value, "difficulty": self.difficulty.value}
            )
            logger.debug(
                "bot_shot_chosen",
                extra={"row": coord.row, "col": coord.col, "mode": mode.value},
            )
            return coord

    def process_result(self, coord: Coordinate, result: CellState) -> None:
        """Feed back the outcome of a shot at ``coord``."""
        if not self.difficulty.follows_hits:
            return
        self.fired.add(coord)
        if result is not CellState.HIT:
            return

        locked_row: int | None = None
        locked_col: int | None = None
        if self.last_hit is not None and self.last_hit.is_adjacent(coord):
            if self.last_hit.row == coord.row:
                locked_row = coord.row
            else:
                locked_col = coord.col
            logger.debug(
                "bot_axis_locked",
                extra={"row": locked_row, "col": locked_col},
            )

        def on_axis(candidate: Coordinate) -> bool:
            if locked_row is not None:
                return candidate.row == locked_row
            if locked_col is not None:
                return candidate.col == locked_col
            return True

        if locked_row is not None or locked_col is not None:
            self.queue = deque(c for c in self.queue if on_axis(c) and c not in self.fired)

        follow_ups = [
            n
            for n in coord.neighbours()
            if self.in_bounds(n) and n not in self.fired and on_axis(n)
        ]
        for candidate in follow_ups:
            if candidate in self.queue:
                self.queue.remove(candidate)
        self.queue.extendleft(reversed(follow_ups))
        self.last_hit = coord

    def _pop_target(self) -> Coordinate | None:
        while self.queue:
            candidate = self.queue.popleft()
            if candidate not in self.fired:
                return candidate
        return None

    def _hunt(self) -> Coordinate:
        untried = [
            Coordinate(row, col)
            for row in range(self.size)
            for col in range(self.size)
            if Coordinate(row, col) not in self.fired
        ]
        if not untried:
            logger.error("bot_targets_exhausted", extra={"fired": len(self.fired)})
            raise TargetsExhaustedError("No untried coordinates remain.")
        if self.difficulty.parity_hunt:
            even = [c for c in untried if (c.row + c.col) % 2 == 0]
            if even:
                return self._rng.choice(even)
        return self._rng.choice(untried)
