"""Application configuration via Pydantic BaseSettings."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Environment
    ENVIRONMENT: Environment = Environment.development
    SERVICE_NAME: str = "CallSnap API"

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ALLOWED_ORIGINS: str = "*"

    # Monitoring
    SENTRY_DSN: str = ""

    # Meeting defaults
    DEFAULT_MEETING_TITLE: str = "Reunião sem título"
    DEFAULT_SUMMARY_STYLE: str = "bullets"
    DEFAULT_SUMMARY_LANGUAGE: str = "pt-BR"

    # Transcription stand-in timing (seconds)
    SEGMENT_SECONDS: int = 40
    SEGMENT_GAP_SECONDS: int = 2

    # Reprocessing keeps manual transcript/summary edits when enabled
    PRESERVE_MANUAL_EDITS: bool = False

    def cors_origins(self) -> list[str]:
        """Return CORS origins parsed from CORS_ALLOWED_ORIGINS."""
        if self.CORS_ALLOWED_ORIGINS.strip() == "*":
            return ["*"]
        return [
            origin.strip()
            for origin in self.CORS_ALLOWED_ORIGINS.split(",")
            if origin.strip()
        ]


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()
