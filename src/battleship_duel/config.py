"""Game tuning settings."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, Field, PositiveInt

from battleship_duel.bot.targeting import Difficulty
from battleship_duel.engine.placement import DEFAULT_MAX_ATTEMPTS
from battleship_duel.engine.ship import FLEET_HEALTH


class DuelSettings(BaseModel):
    """Knobs for match creation and resolution."""

    win_threshold: int = Field(default=FLEET_HEALTH, ge=1, le=FLEET_HEALTH)
    placement_max_attempts: PositiveInt | None = DEFAULT_MAX_ATTEMPTS
    default_difficulty: Difficulty = Difficulty.EASY
    rng_seed: int | None = None

    @classmethod
    def from_env(cls, **overrides: Any) -> "DuelSettings":
        """Build settings from ``DUEL_*`` environment variables."""

        data: Dict[str, Any] = {}

        threshold = os.getenv("DUEL_WIN_THRESHOLD")
        if threshold:
            data["win_threshold"] = int(threshold)

        attempts = os.getenv("DUEL_PLACEMENT_MAX_ATTEMPTS")
        if attempts:
            # "0" or "none" disables the cap.
            cleaned = attempts.strip().lower()
            data["placement_max_attempts"] = None if cleaned in {"0", "none"} else int(cleaned)

        difficulty = os.getenv("DUEL_DEFAULT_DIFFICULTY")
        if difficulty:
            data["default_difficulty"] = Difficulty.parse(difficulty)

        seed = os.getenv("DUEL_RNG_SEED")
        if seed:
            data["rng_seed"] = int(seed)

        data.update(overrides)
        return cls(**data)


@lru_cache(maxsize=1)
def load_settings() -> DuelSettings:
    """Load and cache settings from the environment."""

    return DuelSettings.from_env()
