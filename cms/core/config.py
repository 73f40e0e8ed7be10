"""
Configuration helpers for the CMS backend.

Routers, repositories and services read settings through `get_settings()`
instead of fetching os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    session_ttl_seconds: int
    count_default: int
    count_max: int
    log_level: str
    log_format: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    app_env = (os.getenv("APP_ENV") or "dev").lower()
    return Settings(
        app_env=app_env,
        database_url=os.getenv("DATABASE_URL", ""),
        session_ttl_seconds=_int(os.getenv("SESSION_TTL_SECONDS", "86400"), 86400),
        count_default=_int(os.getenv("COUNT_DEFAULT", "10"), 10),
        count_max=_int(os.getenv("COUNT_MAX", "50"), 50),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        log_format=(os.getenv("LOG_FORMAT") or ("plain" if app_env == "dev" else "json")).lower(),
    )
