"""
Configuration and settings for the blog API.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api")

    # Database (Postgres expected, any SQLAlchemy URL works)
    database_url: Optional[str] = Field(default=None, validation_alias="DATABASE_URL")

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="BLOG_USE_IN_MEMORY_BACKENDS"
    )
    seed_demo_data: bool = Field(default=False, validation_alias="BLOG_SEED_DEMO_DATA")

    # Sessions
    session_secret: str = Field(
        default="dev-session-secret", validation_alias="SESSION_SECRET"
    )
    session_cookie: str = Field(default="blog_session")
    session_max_age_seconds: int = Field(default=7 * 24 * 60 * 60)
    https_only_cookies: bool = Field(default=False)

    # Accounts registered with these usernames get the admin role
    admin_usernames: list[str] = Field(default_factory=list)

    cors_origins: list[str] = Field(default_factory=list)
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
