"""
API Faker — Application Configuration
=======================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types, and provides a singleton `settings` object.
Who:   Imported by the app factory, the lifespan handler and the middleware.
When:  Loaded once at module import time.

Two groups of values live here:
    - Router options (id_field, foreign_key_suffix, read_only): consumed by
      ResourceService at construction and passed through to the Database.
    - Process options (db file, bind address, logging, CORS): consumed by
      the app factory and lifespan.
"""

from typing import List

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class RouterOptions(BaseModel):
    """
    Options the resource router is built with.

    id_field:            Identifier key for collection items (default "id").
    foreign_key_suffix:  Reserved for relationship expansion; routing never reads it.
    read_only:           When True every write route answers 403 before touching storage.
    """

    id_field: str = Field(default="id", min_length=1)
    foreign_key_suffix: str = Field(default="Id")
    read_only: bool = Field(default=False)

    model_config = {"frozen": True}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for local development, so
    `uvicorn apifaker.main:app` works with a db.json in the working directory.
    """

    # ── Data Store ────────────────────────────────────────────────────────
    # What: Path of the JSON document backing the store
    # Empty string keeps everything in memory (nothing is written to disk)
    db_file: str = Field(default="db.json", description="JSON file backing the store")

    # What: Reject an explicitly supplied duplicate id instead of generating a new one
    strict_ids: bool = Field(default=False)

    # ── Router ────────────────────────────────────────────────────────────
    id_field: str = Field(default="id", min_length=1)
    foreign_key_suffix: str = Field(default="Id")
    read_only: bool = Field(default=False)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs, or "*" for any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3000, ge=1, le=65535)

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

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    @property
    def router_options(self) -> RouterOptions:
        """The subset of settings the resource router is constructed with."""
        return RouterOptions(
            id_field=self.id_field,
            foreign_key_suffix=self.foreign_key_suffix,
            read_only=self.read_only,
        )


# Singleton instance — imported throughout the application
settings = Settings()
