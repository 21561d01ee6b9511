"""
Runtime settings for the D&D Beyond bridge.

Values come from the environment (optionally via a ``.env`` file) and are
validated into a single :class:`Settings` model that is passed explicitly to
the components that need it.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("beyond-bridge")

DEFAULT_AUTH_URL = "https://auth-service.dndbeyond.com/v1/cobalt-token"
DEFAULT_CONFIG_URL = "https://www.dndbeyond.com/api/config/json"


class Settings(BaseModel):
    """Configuration for authentication, caching and batch imports."""

    fallback_credential: str | None = Field(
        default=None,
        description="Cobalt session cookie used when a caller supplies none (COBALT_COOKIE)",
    )
    auth_url: str = Field(
        default=DEFAULT_AUTH_URL,
        description="Endpoint that exchanges a cobalt cookie for a bearer token",
    )
    config_url: str = Field(
        default=DEFAULT_CONFIG_URL,
        description="Endpoint serving the provider configuration document",
    )
    auth_ttl_hours: float = Field(
        default=0.08,
        gt=0.0,
        description="Lifetime of cached bearer tokens in hours (about five minutes)",
    )
    config_ttl_hours: float = Field(
        default=1.0,
        gt=0.0,
        description="Lifetime of the cached provider configuration in hours",
    )
    batch_concurrency: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum number of concurrent source fetches in a batch",
    )
    http_timeout: float = Field(
        default=10.0,
        gt=0.0,
        description="Timeout in seconds for auth and config requests",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level used by configure_logging()",
    )

    @field_validator("fallback_credential")
    @classmethod
    def blank_credential_is_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """Build settings from environment variables.

        Args:
            load_env_file: Whether to read a ``.env`` file first.

        Returns:
            Validated Settings instance.
        """
        if load_env_file and not load_dotenv():
            logger.debug(".env file not found, using process environment only")

        values: dict[str, object] = {}
        env_map = {
            "fallback_credential": "COBALT_COOKIE",
            "auth_url": "BEYOND_AUTH_URL",
            "config_url": "BEYOND_CONFIG_URL",
            "auth_ttl_hours": "BEYOND_AUTH_TTL_HOURS",
            "config_ttl_hours": "BEYOND_CONFIG_TTL_HOURS",
            "batch_concurrency": "BEYOND_BATCH_CONCURRENCY",
            "http_timeout": "BEYOND_HTTP_TIMEOUT",
            "log_level": "BEYOND_LOG_LEVEL",
        }
        for field_name, env_name in env_map.items():
            raw = os.getenv(env_name)
            if raw is not None and raw != "":
                values[field_name] = raw

        return cls(**values)


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging for scripts that drive the bridge."""
    level = (settings or Settings()).log_level
    logging.basicConfig(level=getattr(logging, level))
    logger.debug(f"Logging configured at {level}")


__all__ = [
    "Settings",
    "configure_logging",
    "DEFAULT_AUTH_URL",
    "DEFAULT_CONFIG_URL",
]
