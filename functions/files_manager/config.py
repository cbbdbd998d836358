"""
Configuration and settings for the files manager backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="")

    # Document store (Postgres expected)
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432)
    db_database: str = Field(default="files_manager")
    db_user: Optional[str] = Field(default=None)
    db_password: Optional[str] = Field(default=None)
    db_driver: str = Field(default="postgresql+psycopg2")
    # Full SQLAlchemy URL; wins over the individual DB_* parts.
    database_url: Optional[str] = Field(default=None)

    # Cache (Redis). Unset means redis-py defaults (localhost:6379/0).
    redis_url: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Readiness wait at process start
    readiness_max_attempts: int = Field(default=10, ge=1)
    readiness_poll_interval_ms: int = Field(default=1000, ge=0)

    # HTTP server
    server_host: str = Field(default="0.0.0.0")
    server_port: int = Field(default=5000)

    def store_url(self) -> str:
        """Return the SQLAlchemy URL for the document store."""
        if self.database_url:
            return self.database_url
        url = URL.create(
            drivername=self.db_driver,
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_database,
        )
        return url.render_as_string(hide_password=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
