# app/config/settings.py
"""
Application configuration using pydantic-settings (pydantic v2 style).

This centralizes environment-driven configuration. Prefer reading values
from environment variables; do not rely on os.getenv inline defaults which
can silently hide missing configuration.
"""
from __future__ import annotations

import logging
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application configuration loaded from environment.

    Relevant environment variables:
      - SUPABASE_URL
      - SUPABASE_SERVICE_ROLE_KEY (or SUPABASE_ANON_KEY)
      - DATABASE_URL (schema bootstrap only)
      - HEALTH_CHECK_TIMEOUT
      - FAIL_ON_DB_STARTUP
      - AUTO_CREATE_SCHEMA
      - LOG_LEVEL
      - DB_PAGE_SIZE (rows per select page; must not exceed PostgREST max-rows)
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Supabase
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_ANON_KEY"),
    )
    database_url: Optional[str] = None

    # Runtime
    health_check_timeout: float = 5.0
    fail_on_db_startup: bool = False
    auto_create_schema: bool = False
    log_level: str = "INFO"
    db_page_size: int = 1000

    # --- validators / post-init checks ---
    @field_validator("supabase_url", "supabase_service_role_key")
    @classmethod
    def maybe_strip(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return (v or "INFO").strip().upper()

    @field_validator("db_page_size")
    @classmethod
    def positive_page_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("DB_PAGE_SIZE must be at least 1")
        return v

    def model_post_init(self, __context) -> None:  # pydantic v2 hooks
        """
        Light-weight notice that runs after model is constructed.
        Uses logging (not print) so messages show up in server logs.
        """
        if not self.supabase_url or not self.supabase_service_role_key:
            logger.warning(
                "Supabase credentials are not configured. "
                "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY to enable DB features."
            )
        if self.auto_create_schema and not self.database_url:
            logger.info(
                "AUTO_CREATE_SCHEMA is set but DATABASE_URL is missing; schema bootstrap will be skipped."
            )


# single exporter
settings = Settings()
