"""Match lifecycle: two boards, turn ownership and win detection."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum

from battleship_duel.telemetry import get_meter, get_tracer

from .board import Board, CellState
from .errors import (
    MatchFinishedError,
    MatchFullError,
    NotYourTurnError,
    OpponentMissingError,
)
from .ship import FLEET_HEALTH, Coordinate

logger = logging.getLogger(__name__)
tracer = get_tracer("battleship_duel.engine.match")
meter = get_meter("battleship_duel.engine.match")

TURN_COUNTER = meter.create_counter(
    "battleship_duel_turns",
    unit="1",
    description="Shots resolved by Match.resolve_turn",
)


class MatchStatus(Enum):
    """Unidirectional lifecycle ``WAITING -> PLAYING -> FINISHED``."""

    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


class Side(Enum):
    """The two participants of a duel."""

    HUMAN = "User"
    BOT = "Bot"

    def opponent(self) -> Side:
        return Side.BOT if self is Side.HUMAN else Side.HUMAN


@dataclass(frozen=True)
class ShotOutcome:
    """Result of one resolved shot."""

    result: CellState
    winner: Side | None = None


@dataclass
class Match:
    """A single duel between the human board and the (optional) bot board."""

    human_board: Board
    bot_board: Board | None = None
    win_threshold: int = FLEET_HEALTH
    match_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: MatchStatus = MatchStatus.WAITING
    current_turn: Side = Side.HUMAN
    winner: Side | None = None

    def __post_init__(self) -> None:
        if not 1 <= self.win_threshold <= FLEET_HEALTH:
            raise ValueError(f"win_threshold must be between 1 and {FLEET_HEALTH}.")
        if self.bot_board is not None:
            self.status = MatchStatus.PLAYING

    def join(self, bot_board: Board) -> None:
        """Attach the second side and start play."""
        if self.bot_board is not None:
            logger.error("match_join_rejected", extra={"match_id": self.match_id})
            raise MatchFullError("game full")
        self.bot_board = bot_board
        self.status = MatchStatus.PLAYING
        logger.info("match_joined", extra={"match_id": self.match_id})

    def board_of(self, side: Side) -> Board | None:
        return self.human_board if side is Side.HUMAN else self.bot_board

    def resolve_turn(self, shooter: Side, coord: Coordinate) -> ShotOutcome:
        """Fire ``shooter``'s shot at the opposing board.

        Board errors (out of bounds, already fired) propagate unchanged. The
        hit count is re-derived from the target's remaining health on every
        shot rather than kept in a separate counter.
        """
        with tracer.start_as_current_span("match.resolve_turn") as span:
            span.set_attribute("match.id", self.match_id)
            span.set_attribute("shooter", shooter.value)
            span.set_attribute("row", coord.row)
            span.set_attribute("col", coord.col)

            target = self.board_of(shooter.opponent())
            if target is None or self.status is MatchStatus.WAITING:
                logger.error(
                    "turn_rejected_opponent_missing",
                    extra={"match_id": self.match_id, "shooter": shooter.value},
                )
                raise OpponentMissingError("Player 2 missing")

            if self.status is MatchStatus.FINISHED:
                target.check_target(coord)
                logger.error(
                    "turn_rejected_match_finished",
                    extra={"match_id": self.match_id, "shooter": shooter.value},
                )
                raise MatchFinishedError("Match is already finished.")

            if shooter is not self.current_turn:
                logger.error(
                    "turn_rejected_wrong_side",
                    extra={"shooter": shooter.value, "current": self.current_turn.value},
                )
                raise NotYourTurnError("It is not this side's turn.")

            result = target.receive_shot(coord)
            TURN_COUNTER.add(1, attributes={"shooter": shooter.value, "result": result.value})

            hits_made = target.hits_taken()
            span.set_attribute("hits_made", hits_made)
            if hits_made >= self.win_threshold:
                self.status = MatchStatus.FINISHED
                self.winner = shooter
                span.set_attribute("match.winner", shooter.value)
                logger.info(
                    "match_finished",
                    extra={"match_id": self.match_id, "winner": shooter.value, "hits": hits_made},
                )
                return ShotOutcome(result, shooter)

            self.current_turn = shooter.opponent()
            return ShotOutcome(result)
