"""Centralized, typed configuration using pydantic-settings.

Provides a single ``Settings`` class backed by ``.env`` file and environment
variables, a cached ``get_settings()`` accessor, and the
OAuth client settings for Google and Microsoft.

IMPORTANT: This module has ZERO imports from the ``buttress_mail`` package to
prevent circular imports.  Only stdlib, pydantic, pydantic_settings, and
structlog are used.
"""

from __future__ import annotations

import sys
from functools import lru_cache

import structlog
from pydantic import SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger()


class Settings(BaseSettings):
    """Application settings loaded from environment variables and ``.env`` file.

    ``SecretStr`` fields prevent accidental leaks in logs or error output.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- General ---------------------------------------------------------------
    production: bool = False
    http_timeout: float = 30.0

    # -- Debug redirect --------------------------------------------------------
    debug_redirect_all: bool = False
    development_email_address: str = ""

    # -- Google ----------------------------------------------------------------
    google_client_id: str = ""
    google_client_secret: SecretStr = SecretStr("")

    # -- Microsoft -------------------------------------------------------------
    microsoft_client_id: str = ""
    microsoft_client_secret: SecretStr = SecretStr("")
    microsoft_issuer: str = "common"
    microsoft_scope: str = "offline_access https://graph.microsoft.com/Mail.Send"


@lru_cache
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    try:
        return Settings()
    except ValidationError as exc:
        # Log only the structured errors list, never the raw exception text.
        logger.error("settings_validation_failed", errors=exc.errors())
        sys.exit(1)

