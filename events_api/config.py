"""Runtime settings resolved from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from events_api.database import database_url_from_env


def _positive_float(env: Mapping[str, str], key: str, default: float) -> float:
    try:
        value = float(env.get(key, default))
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def _positive_int(env: Mapping[str, str], key: str, default: int) -> int:
    try:
        value = int(env.get(key, default))
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = 8080
    request_timeout: float = 10.0
    shutdown_grace: float = 30.0
    pool_recycle: int = 300
    connect_timeout: float = 5.0
    db_init_max_attempts: int = 10
    db_init_retry_seconds: float = 1.0
    echo_sql: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "Settings":
        return cls(
            database_url=database_url_from_env(env),
            host=env.get("HOST", "").strip() or "0.0.0.0",
            port=_positive_int(env, "PORT", 8080),
            request_timeout=_positive_float(env, "REQUEST_TIMEOUT_SECONDS", 10.0),
            shutdown_grace=_positive_float(env, "SHUTDOWN_GRACE_SECONDS", 30.0),
            pool_recycle=_positive_int(env, "DB_POOL_RECYCLE_SECONDS", 300),
            connect_timeout=_positive_float(env, "DB_CONNECT_TIMEOUT_SECONDS", 5.0),
            db_init_max_attempts=_positive_int(env, "DB_INIT_MAX_ATTEMPTS", 10),
            db_init_retry_seconds=_positive_float(env, "DB_INIT_RETRY_SECONDS", 1.0),
            echo_sql=env.get("SQLALCHEMY_ECHO", "0").lower() in {"1", "true", "yes"},
            log_level=(env.get("LOG_LEVEL", "").strip() or "INFO").upper(),
        )


def load_settings() -> Settings:
    """Load `.env` (if present) and build settings from the process environment."""

    load_dotenv()
    return Settings.from_env(os.environ)


__all__ = ["Settings", "load_settings"]
