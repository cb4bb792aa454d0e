from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from checkers_arena.policies.base import SearchParams


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CHECKERS_", env_file=".env", extra="ignore")

    # Search limits
    minimax_depth: int = Field(default=4, ge=1, le=12)
    mcts_iterations: int = Field(default=1000, ge=1)
    rollout_cap: int = Field(default=100, ge=1)

    # Game / tournament
    max_game_moves: int = Field(default=500, ge=1)
    games_per_pairing: int = Field(default=2, ge=1)
    seed: Optional[int] = None

    # HTTP server
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    def search_params(self) -> SearchParams:
        return SearchParams(
            minimax_depth=self.minimax_depth,
            mcts_iterations=self.mcts_iterations,
            rollout_cap=self.rollout_cap,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
