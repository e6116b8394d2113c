"""Environment-based configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def resolve_database_url() -> str:
    """Resolve DB connection string.

    Priority:
      1) DATABASE_URL (explicit)
      2) Fallback to a local sqlite file next to the working directory
    """

    explicit = os.getenv("DATABASE_URL")
    if explicit:
        return explicit
    return "sqlite:///./luckydraw.db"


@dataclass(frozen=True)
class BaseConfig:
    """Base configuration shared by all environments."""

    APP_ENV: str = os.getenv("APP_ENV", "development")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret")
    DB_BACKEND: str = (
        os.getenv("DB_BACKEND")
        or ("mongo" if os.getenv("MONGODB_URI") else "sql")
    ).lower().strip()  # "sql" | "mongo"

    # SQL backend
    DATABASE_URL: str = resolve_database_url()

    # Mongo backend
    MONGODB_URI: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    MONGODB_DB: str = os.getenv("MONGODB_DB", "luckydraw")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Storage slots shared by every session of this installation
    STORE_KEY: str = os.getenv("STORE_KEY", "PersistStore")
    SESSION_TOKEN_KEY: str = os.getenv("SESSION_TOKEN_KEY", "opened")

    # Seconds
    AUTO_SHUFFLE_INTERVAL: float = _env_float("AUTO_SHUFFLE_INTERVAL", 2.0)
    SESSION_CHECK_INTERVAL: float = _env_float("SESSION_CHECK_INTERVAL", 2.0)
    AUTO_SHUFFLE_ENABLED: bool = _env_bool("AUTO_SHUFFLE_ENABLED", True)

    # Superseded sessions kept readable; older ones are closed
    MAX_SUPERSEDED_SESSIONS: int = _env_int("MAX_SUPERSEDED_SESSIONS", 8)


@dataclass(frozen=True)
class DevelopmentConfig(BaseConfig):
    """Development configuration."""

    DEBUG: bool = True


@dataclass(frozen=True)
class ProductionConfig(BaseConfig):
    """Production configuration."""

    DEBUG: bool = False


@dataclass(frozen=True)
class TestingConfig(BaseConfig):
    """In-memory store, no background shuffling."""

    TESTING: bool = True
    DEBUG: bool = False
    DB_BACKEND: str = "sql"
    DATABASE_URL: str = "sqlite://"
    AUTO_SHUFFLE_ENABLED: bool = False


def get_config() -> type[BaseConfig]:
    """Resolve configuration class based on APP_ENV."""

    env = os.getenv("APP_ENV", "development").lower().strip()
    if env == "production":
        return ProductionConfig
    if env == "testing":
        return TestingConfig
    return DevelopmentConfig
