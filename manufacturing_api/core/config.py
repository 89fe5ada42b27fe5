# manufacturing_api/core/config.py
# - Reads env vars from ".env" if available (pydantic-settings).
# - Every setting has a default so the API boots against a local SQLite file.

from __future__ import annotations

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./manufacturing.db"
    SQL_ECHO: bool = False

    LOG_LEVEL: str = "INFO"

    # currency used when a BOM is created without one and for workstation rates
    DEFAULT_CURRENCY: str = "USD"

    FRONTEND_URL: Optional[str] = None

    # DEV ONLY: create tables on startup instead of running Alembic
    RUN_CREATE_ALL: bool = False

    # pydantic v2 config
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def sqlalchemy_database_url(self) -> str:
        """
        Heroku/Render style postgres:// URLs are not accepted by SQLAlchemy 2.
        """
        url = self.DATABASE_URL
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url


settings = Settings()
