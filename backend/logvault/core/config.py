# logvault/core/config.py
"""
Central configuration for the logvault service.

This module defines a single `settings` object (Pydantic BaseSettings) that reads
configuration from environment variables and a local `.env` file.

Guiding principles:
- DRY: config is declared once, imported everywhere.
- KISS: sensible defaults for local dev.
- The app factory accepts an explicit Settings instance, so tests never have
  to touch the environment.
"""

from __future__ import annotations

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables and optional `.env`.

    `.env` location:
      - We run the service from `backend/`, so `.env` should live in `backend/.env`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # deployment environments often add extra env vars
        case_sensitive=False,
    )

    # -----------------------
    # Runtime
    # -----------------------
    ENV: str = Field(default="dev", description="Environment: dev|test|prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level (e.g., INFO, DEBUG)")

    HOST: str = Field(default="0.0.0.0", description="Bind address used by run.py")
    PORT: int = Field(default=8080, ge=1, le=65535, description="Bind port used by run.py")

    # -----------------------
    # API / CORS
    # -----------------------
    CORS_ALLOW_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Allowed CORS origins (GET and POST only)",
    )

    # -----------------------
    # Request limits
    # -----------------------
    MAX_PAYLOAD_KB: int = Field(
        default=256,
        ge=1,
        le=10240,
        description="Max request body size in kilobytes for log writes",
    )

    DEFAULT_PAGE_SIZE: int = Field(
        default=50,
        ge=1,
        description="Page size used when the caller does not send `limit`",
    )

    @property
    def MAX_PAYLOAD_BYTES(self) -> int:
        return int(self.MAX_PAYLOAD_KB) * 1024

    # -----------------------
    # Database
    # -----------------------
    # Async SQLAlchemy URL for SQLite (aiosqlite driver).
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./data/logs.db",
        description="SQLAlchemy async database URL",
    )
    DB_BUSY_TIMEOUT_S: float = Field(
        default=30.0,
        gt=0,
        description="Seconds a connection waits on a locked SQLite database",
    )

    # -----------------------
    # Validators / normalizers
    # -----------------------
    @field_validator("ENV")
    @classmethod
    def _normalize_env(cls, v: str) -> str:
        return (v or "dev").strip().lower()

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        return (v or "INFO").strip().upper()

    @field_validator("CORS_ALLOW_ORIGINS")
    @classmethod
    def _clean_cors_origins(cls, v: List[str]) -> List[str]:
        # Blank entries make CORS matching behave oddly.
        cleaned = []
        for origin in v or []:
            o = (origin or "").strip()
            if o:
                cleaned.append(o)
        return cleaned

    @field_validator("DATABASE_URL", "HOST")
    @classmethod
    def _strip_strings(cls, v: str) -> str:
        return (v or "").strip()


# Singleton instance imported across the codebase.
settings = Settings()
