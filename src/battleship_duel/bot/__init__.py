"""Scripted opponent exports."""

from .targeting import BotMode, BotTargeting, Difficulty

__all__ = ["BotMode", "BotTargeting", "Difficulty"]
