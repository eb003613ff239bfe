"""
Service configuration

All settings come from environment variables (a local `.env` is loaded first).
The module exposes a single `config` instance; attributes are plain so tests
can patch them directly.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return float(value)


class Config:
    """Runtime configuration loaded from environment variables."""

    def __init__(self) -> None:
        self.environment: str = os.getenv("ENVIRONMENT", "development")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Database
        self.database_url: str = os.getenv("DATABASE_URL", "sqlite:///./fairdata.db")
        self.db_pool_size: int = _env_int("DB_POOL_SIZE", 5)
        self.db_max_overflow: int = _env_int("DB_MAX_OVERFLOW", 10)
        self.db_echo: bool = _env_bool("DB_ECHO", False)

        # Reddit OAuth (client-credentials)
        self.reddit_client_id: str | None = os.getenv("REDDIT_CLIENT_ID") or None
        self.reddit_client_secret: str | None = os.getenv("REDDIT_CLIENT_SECRET") or None
        self.reddit_token_url: str = os.getenv(
            "REDDIT_TOKEN_URL", "https://www.reddit.com/api/v1/access_token"
        )
        self.reddit_api_base_url: str = os.getenv(
            "REDDIT_API_BASE_URL", "https://oauth.reddit.com"
        )
        self.reddit_user_agent: str = os.getenv("REDDIT_USER_AGENT", "FairDataUse/1.0.0")
        self.reddit_timeout_seconds: float = _env_float("REDDIT_TIMEOUT_SECONDS", 10.0)

        # Company catalog override (JSON list), empty means built-in catalog
        self.company_catalog_file: str | None = os.getenv("COMPANY_CATALOG_FILE") or None

        self.cors_origins: list[str] = [
            o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
        ]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def reddit_credentials_configured(self) -> bool:
        return bool(self.reddit_client_id and self.reddit_client_secret)


config = Config()
