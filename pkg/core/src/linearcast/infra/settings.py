"""
Application settings for Linearcast.

This module defines all configuration settings for Linearcast using Pydantic BaseSettings.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings using Pydantic BaseSettings."""

    # Storage locations
    data_dir: str = Field(default="data/local", alias="DATA_DIR")  # schedule.json + media-index.json
    media_root: str = Field(default="media", alias="MEDIA_ROOT")
    media_base_url: str = Field(default="", alias="MEDIA_BASE_URL")  # Empty -> serve via /api/media

    # Resolution
    schedule_timezone: str = Field(default="UTC", alias="SCHEDULE_TIMEZONE")

    # HTTP
    host: str = Field(default="127.0.0.1", alias="HOST")
    port: int = Field(default=8000, alias="PORT")
    allowed_origins: str = Field(default="*", alias="ALLOWED_ORIGINS")  # Comma-separated origins

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    env: str = Field(default="dev", alias="ENV")  # dev|prod|test

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def schedule_path(self) -> Path:
        return Path(self.data_dir) / "schedule.json"

    @property
    def media_index_path(self) -> Path:
        return Path(self.data_dir) / "media-index.json"

    @property
    def origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


def _resolve_env_file() -> str | None:
    # 1) Explicit override
    explicit = os.getenv("LINEARCAST_ENV_FILE")
    if explicit and Path(explicit).is_file():
        return explicit

    # 2) CWD .env
    cwd_env = Path.cwd() / ".env"
    if cwd_env.is_file():
        return str(cwd_env)

    # 3) Walk up from this file to find nearest .env
    here = Path(__file__).resolve()
    for parent in here.parents:
        candidate = parent / ".env"
        if candidate.is_file():
            return str(candidate)
    return None


# Global settings instance (load from best-effort .env discovery)
_env_file = _resolve_env_file()
settings = Settings(_env_file=_env_file) if _env_file else Settings()  # type: ignore[call-arg]
