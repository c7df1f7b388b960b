"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    picker_base_url: str = "https://photospicker.googleapis.com/v1"
    http_timeout_seconds: float = 15
    session_ttl_seconds: int = 1740
    poll_interval_seconds: float = 5
    poll_max_wait_seconds: float = 300
    media_page_size: int = 25
    session_store_backend: str = "memory"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_table: str = "picker_sessions"
    cors_allowed_origins: str | None = None
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_allowed_origins(raw: str | None) -> list[str]:
    """Parse comma-separated CORS origins from env."""
    if raw is None:
        return []
    cleaned = raw.strip()
    if cleaned == "*":
        return ["*"]
    return [chunk.strip().rstrip("/") for chunk in cleaned.split(",") if chunk.strip()]
