"""
Configuration
----

* Settings: process wide (database, logging). Read from environment variables.
* SessionConfig: chosen by the player(s) when setting up a game.
"""

import os
from functools import lru_cache
from random import Random
from typing import Optional, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chessmate.core.shared_types import Color, GameMode

DEFAULT_DATABASE_URL = "sqlite:///chessmate.db"
DEFAULT_LOG_LEVEL = "INFO"


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value!r}")
        return level


@lru_cache
def load_settings() -> Settings:
    """Environment variables override the defaults: CHESSMATE_DATABASE_URL, CHESSMATE_LOG_LEVEL"""
    return Settings(
        database_url=os.environ.get("CHESSMATE_DATABASE_URL", DEFAULT_DATABASE_URL),
        log_level=os.environ.get("CHESSMATE_LOG_LEVEL", DEFAULT_LOG_LEVEL),
    )


class ThinkingDelay(BaseModel):
    """
    How long the computer 'thinks' before playing its move.
    ----

    Purely cosmetic: the quality of the move does not depend on it.
    delay = base + tier * per_tier + uniform(0, jitter)   (all in milliseconds)
    """

    model_config = ConfigDict(frozen=True)

    base_ms: int = Field(default=500, ge=0)
    per_tier_ms: int = Field(default=200, ge=0)
    jitter_ms: int = Field(default=1000, ge=0)

    @classmethod
    def none(cls) -> Self:
        """No delay at all (tests, batch play)"""
        return cls(base_ms=0, per_tier_ms=0, jitter_ms=0)

    def seconds_for(self, tier: int, rng: Random) -> float:
        jitter = rng.random() * self.jitter_ms if self.jitter_ms else 0.0
        return (self.base_ms + tier * self.per_tier_ms + jitter) / 1000


class SessionConfig(BaseModel):
    """
    Setup of a single game.
    ----
    game_mode AI: human_color plays against the computer (difficulty_tier, think_delay).
    game_mode LOCAL: two people share the board, the computer settings are ignored.
    """

    model_config = ConfigDict(frozen=True)

    game_mode: GameMode = GameMode.AI
    difficulty_tier: int = Field(default=3, ge=1, le=5)
    human_color: Color = Color.WHITE
    think_delay: ThinkingDelay = ThinkingDelay()
    allow_undo_after_game_over: bool = False
    seed: Optional[int] = None
    starting_fen: Optional[str] = None
