"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

_LOG_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    env: str = "development"
    log_level: str = "DEBUG"
    low_stock_threshold: int = 5
    host: str = "0.0.0.0"
    port: int = 8000
    seed_demo_data: bool = True

    @property
    def json_logs(self) -> bool:
        return self.env in ("production", "staging")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        src = os.environ if environ is None else environ
        env = (src.get("ENV") or src.get("ENVIRONMENT") or "development").lower()
        return cls(
            env=env,
            log_level=src.get("LOG_LEVEL", _LOG_LEVELS.get(env, "INFO")).upper(),
            low_stock_threshold=int(src.get("LOW_STOCK_THRESHOLD", "5")),
            host=src.get("HOST", "0.0.0.0"),
            port=int(src.get("PORT", "8000")),
            seed_demo_data=src.get("SEED_DEMO_DATA", "true").lower() in _TRUTHY,
        )

    @classmethod
    def for_testing(cls) -> "Settings":
        return cls(env="test", log_level="WARNING", seed_demo_data=False)
