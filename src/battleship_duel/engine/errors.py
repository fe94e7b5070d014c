"""Error taxonomy shared by the engine, the bot and the match service."""

from __future__ import annotations


class BattleshipError(Exception):
    """Base class for every recoverable, caller-visible game error."""

    code = "battleship_error"


class OutOfBoundsError(BattleshipError, ValueError):
    """Coordinate lies outside the 10x10 grid."""

    code = "out_of_bounds"


class AlreadyFiredError(BattleshipError, ValueError):
    """Cell was already resolved to a hit or a miss."""

    code = "already_fired"


class PlacementError(BattleshipError, ValueError):
    """A ship could not be placed on a board."""

    code = "placement_failed"


class MalformedShotError(BattleshipError, ValueError):
    """A textual shot message could not be decoded."""

    code = "malformed_shot"


class MatchNotFoundError(BattleshipError, LookupError):
    """No match is registered under the requested identifier."""

    code = "match_not_found"


class OpponentMissingError(BattleshipError, RuntimeError):
    """A shot was attempted before the second side joined."""

    code = "opponent_missing"


class MatchFullError(BattleshipError, RuntimeError):
    """The second side slot is already occupied."""

    code = "match_full"


class MatchFinishedError(BattleshipError, RuntimeError):
    """The match already has a winner."""

    code = "match_finished"


class NotYourTurnError(BattleshipError, RuntimeError):
    """The shooter does not own the current turn."""

    code = "not_your_turn"


class TargetsExhaustedError(BattleshipError, RuntimeError):
    """The bot has no untried coordinate left to fire at."""

    code = "targets_exhausted"
