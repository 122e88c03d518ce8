"""Environment-driven configuration for the portfolio service."""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv
from sqlalchemy.engine import URL

# Load environment variables from .env file (for local development)
load_dotenv()

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:8000",
    "http://127.0.0.1:5500",
]


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: List[str]) -> List[str]:
    value = os.environ.get(name)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


def build_database_url() -> str:
    """
    Resolve the database URL.

    DATABASE_URL wins when set (e.g. from Heroku or Supabase). Otherwise the URL is
    assembled from DB_USER / DB_PASS / DB_HOST / DB_NAME / DB_PORT.
    """
    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        return database_url

    return URL.create(
        "postgresql+psycopg2",
        username=os.environ.get("DB_USER") or None,
        password=os.environ.get("DB_PASS") or None,
        host=os.environ.get("DB_HOST", "localhost"),
        port=int(os.environ.get("DB_PORT", "5432")),
        database=os.environ.get("DB_NAME", "portfolio"),
    ).render_as_string(hide_password=False)


@dataclass
class Settings:
    database_url: str
    db_ssl: bool = False
    port: int = 5000
    allowed_origins: List[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS))
    environment: Optional[str] = None
    db_retry_delay_seconds: float = 5.0
    rate_limit_max_requests: int = 10
    rate_limit_window_seconds: float = 15 * 60
    rate_limit_max_tracked_clients: int = 10_000
    trust_proxy_headers: bool = False
    log_level: str = "INFO"

    @property
    def environment_label(self) -> str:
        """Label reported by /health; an unset environment reads as development."""
        return self.environment or "development"

    @property
    def is_development(self) -> bool:
        """Error details are only exposed when development is set explicitly."""
        return self.environment == "development"


def load_settings() -> Settings:
    """Build Settings from the process environment."""
    return Settings(
        database_url=build_database_url(),
        db_ssl=_env_bool("DB_SSL"),
        port=int(os.environ.get("PORT", "5000")),
        allowed_origins=_env_list("ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS),
        environment=os.environ.get("ENVIRONMENT") or os.environ.get("NODE_ENV") or None,
        db_retry_delay_seconds=float(os.environ.get("DB_RETRY_DELAY_SECONDS", "5")),
        rate_limit_max_requests=int(os.environ.get("RATE_LIMIT_MAX_REQUESTS", "10")),
        rate_limit_window_seconds=float(os.environ.get("RATE_LIMIT_WINDOW_SECONDS", "900")),
        rate_limit_max_tracked_clients=int(os.environ.get("RATE_LIMIT_MAX_TRACKED_CLIENTS", "10000")),
        trust_proxy_headers=_env_bool("TRUST_PROXY_HEADERS"),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
    )
