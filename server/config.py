"""Runtime settings, read from the environment (or a local ``.env`` file)."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from engine.rules_schema import RuleSet

DEFAULT_ORIGINS = ["http://localhost:4200"]


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 3000
    # Exact-match allow-list for the Socket.IO handshake and HTTP CORS.
    allowed_origins: List[str] = DEFAULT_ORIGINS
    log_level: str = "INFO"

    game_mode: Literal["effects", "blackjack"] = "effects"
    enemy_health: Optional[int] = 50
    end_condition: Literal["enemy_defeated", "deck_exhausted"] = "enemy_defeated"
    turn_timeout_seconds: Optional[float] = 60.0
    timer_tick_seconds: float = 1.0

    # "null" in the environment clears an optional setting (disables the turn timer or the enemy).
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", env_parse_none_str="null")

    def rules(self) -> RuleSet:
        return RuleSet(
            mode=self.game_mode,
            enemy_health=self.enemy_health,
            end_condition=self.end_condition,
            turn_timeout_seconds=self.turn_timeout_seconds,
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def setup_logging(level: str = "INFO") -> None:
    """Call once at program start."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
