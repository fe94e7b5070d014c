"""One match plus its bot, guarded by a per-match lock."""

from __future__ import annotations

import logging
import threading

from battleship_duel.bot.targeting import BotTargeting
from battleship_duel.engine.match import Match, Side
from battleship_duel.engine.ship import Coordinate
from battleship_duel.telemetry import get_tracer, record_game_metric

from .views import BoardSnapshot, ShotReport, TurnReport

logger = logging.getLogger(__name__)
tracer = get_tracer("battleship_duel.service.session")


class MatchSession:
    """Runs human-then-bot exchanges against a single match.

    The lock is held for the whole exchange, so readers never observe the
    human shot without the bot reply that follows it.
    """

    def __init__(self, match: Match, bot: BotTargeting) -> None:
        self.match = match
        self.bot = bot
        self._lock = threading.Lock()

    @property
    def match_id(self) -> str:
        return self.match.match_id

    def initial_view(self) -> BoardSnapshot:
        with self._lock:
            return BoardSnapshot(self.match.human_board.snapshot())

    def submit_shot(self, row: int, col: int) -> TurnReport:
        with self._lock, tracer.start_as_current_span("session.submit_shot") as span:
            span.set_attribute("match.id", self.match_id)
            target = Coordinate(row, col)
            human = self.match.resolve_turn(Side.HUMAN, target)
            human_report = ShotReport(row, col, human.result)
            if human.winner is not None:
                self._record_finish(human.winner)
                return TurnReport(human_report, None, human.winner)

            bot_target = self.bot.next_shot()
            reply = self.match.resolve_turn(Side.BOT, bot_target)
            self.bot.process_result(bot_target, reply.result)
            bot_report = ShotReport(bot_target.row, bot_target.col, reply.result)
            span.set_attribute("bot.row", bot_target.row)
            span.set_attribute("bot.col", bot_target.col)
            if reply.winner is not None:
                self._record_finish(reply.winner)
            return TurnReport(human_report, bot_report, reply.winner)

    def _record_finish(self, winner: Side) -> None:
        record_game_metric(
            "battleship_duel_matches_completed_total",
            1,
            {"winner": winner.value, "difficulty": self.bot.difficulty.value},
        )
        logger.info(
            "match_completed",
            extra={"match_id": self.match_id, "winner": winner.value},
        )
