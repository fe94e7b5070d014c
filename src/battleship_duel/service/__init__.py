"""Transport-agnostic match service."""

from .registry import MatchRegistry
from .session import MatchSession
from .views import BoardSnapshot, ShotReport, TurnReport

__all__ = ["BoardSnapshot", "MatchRegistry", "MatchSession", "ShotReport", "TurnReport"]
