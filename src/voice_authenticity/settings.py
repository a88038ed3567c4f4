"""Runtime settings. Loads from VOICE_* environment variables or a .env file."""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Override via environment variables, e.g. VOICE_API_URL."""

    model_config = SettingsConfigDict(env_prefix="VOICE_", env_file=".env", extra="ignore")

    # Analysis backend
    API_URL: str = "http://localhost:8000"
    ANALYZE_PATH: str = "/api/analyze"
    REQUEST_TIMEOUT: float = 30.0

    # Model artifacts: <MODELS_DIR>/{language,accent,spoofing}/...
    MODELS_DIR: str = "models"
    DEVICE: str = "cpu"

    # Logging: DEBUG, INFO, WARNING, ERROR
    LOG_LEVEL: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Basic console logging for scripts embedding the library."""
    logging.basicConfig(
        level=(level or get_settings().LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
