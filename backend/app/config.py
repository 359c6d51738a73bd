"""
SnippetHub Backend — Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated before app starts.

Every value has a development default, so a bare `uvicorn app.main:app`
starts against a local SQLite file.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes are grouped by concern.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # Any SQLAlchemy async URL. SQLite (aiosqlite) is the embedded default;
    # postgresql+asyncpg:// works with the `postgres` extra installed.
    database_url: str = Field(
        default="sqlite+aiosqlite:///./snippethub.db",
        description="Async SQLAlchemy connection URL",
    )

    # Pool sizing only applies to server databases; SQLite ignores these.
    db_pool_size: int = Field(default=5, ge=1, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    # Create missing tables at startup. Managed deployments turn this off
    # and run `alembic upgrade head` instead.
    db_auto_create: bool = Field(default=True)

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=5000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Import / Export ───────────────────────────────────────────────────
    # Upper bound for uploaded import documents (10MB).
    max_import_size: int = Field(default=10_485_760, ge=1024, le=104_857_600)

    # Format tag written into every export document.
    export_format_version: str = Field(default="1.1.0")

    # Versions accepted without a compatibility warning (comma-separated).
    compatible_import_versions: str = Field(default="1.0.0,1.1.0")

    @property
    def compatible_import_versions_set(self) -> frozenset:
        """Allow-list of export format versions known to import cleanly."""
        return frozenset(
            v.strip() for v in self.compatible_import_versions.split(",") if v.strip()
        )

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


settings = Settings()
