"""Process-wide registry of in-flight matches."""

from __future__ import annotations

import logging
import random
import threading

from battleship_duel.bot.targeting import BotTargeting, Difficulty
from battleship_duel.config import DuelSettings, load_settings
from battleship_duel.engine.board import Board
from battleship_duel.engine.errors import MatchNotFoundError
from battleship_duel.engine.match import Match, Side
from battleship_duel.engine.placement import place_random
from battleship_duel.telemetry import get_tracer, record_game_metric

from .session import MatchSession
from .views import BoardSnapshot, TurnReport

logger = logging.getLogger(__name__)
tracer = get_tracer("battleship_duel.service.registry")


class MatchRegistry:
    """Creates matches and routes calls to them by identifier.

    The registry lock only guards the mapping; turns run under each
    session's own lock.
    """

    def __init__(self, settings: DuelSettings | None = None) -> None:
        self.settings = settings or load_settings()
        self._sessions: dict[str, MatchSession] = {}
        self._lock = threading.Lock()
        self._rng = random.Random(self.settings.rng_seed)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, match_id: object) -> bool:
        with self._lock:
            return match_id in self._sessions

    def create_match(self, difficulty: Difficulty | None = None) -> str:
        """Build both fleets, start a match against the bot and return its id."""
        difficulty = difficulty or self.settings.default_difficulty
        with tracer.start_as_current_span("registry.create_match") as span:
            span.set_attribute("difficulty", difficulty.value)
            with self._lock:
                match_rng = random.Random(self._rng.getrandbits(64))

            human_board = Board(owner=Side.HUMAN.value)
            place_random(human_board, match_rng, max_attempts=self.settings.placement_max_attempts)
            bot_board = Board(owner=Side.BOT.value)
            place_random(bot_board, match_rng, max_attempts=self.settings.placement_max_attempts)

            match = Match(human_board, win_threshold=self.settings.win_threshold)
            match.join(bot_board)
            session = MatchSession(match, BotTargeting(difficulty, rng=match_rng))

            with self._lock:
                self._sessions[match.match_id] = session
            span.set_attribute("match.id", match.match_id)

        record_game_metric(
            "battleship_duel_matches_created_total", 1, {"difficulty": difficulty.value}
        )
        logger.info(
            "match_created",
            extra={"match_id": match.match_id, "difficulty": difficulty.value},
        )
        return match.match_id

    def get(self, match_id: str) -> MatchSession:
        with self._lock:
            session = self._sessions.get(match_id)
        if session is None:
            logger.warning("match_not_found", extra={"match_id": match_id})
            raise MatchNotFoundError(f"Game {match_id} not found")
        return session

    def get_initial_view(self, match_id: str) -> BoardSnapshot:
        return self.get(match_id).initial_view()

    def submit_shot(self, match_id: str, row: int, col: int) -> TurnReport:
        return self.get(match_id).submit_shot(row, col)

    def discard(self, match_id: str) -> None:
        """Forget a match; unknown identifiers are ignored."""
        with self._lock:
            removed = self._sessions.pop(match_id, None)
        if removed is not None:
            logger.info("match_discarded", extra={"match_id": match_id})
