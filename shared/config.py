"""
Shared configuration management for the client cache layer.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="CLIENT_CACHE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    log_level: str = Field(default="info")

    # Transport
    http_timeout_seconds: float = Field(default=20.0, gt=0)
    user_agent: str = Field(default="client-cache/0.1", min_length=1)

    # Authentication
    credentials_mode: Optional[str] = Field(
        default="include",
        description="Ambient cookie credentials sent when no token is set.",
    )
    token_scheme: str = Field(default="OAuth2", min_length=1)

    # Paginated caches
    default_page_size: int = Field(default=100, ge=1)

    # Metrics
    metrics_namespace: str = Field(default="client_cache")


def get_config(**overrides) -> BaseConfig:
    """Build a fresh configuration, applying explicit overrides on top of the environment."""
    return BaseConfig(**overrides)


@lru_cache(maxsize=1)
def get_default_config() -> BaseConfig:
    """Process-wide configuration, read from the environment once."""
    return BaseConfig()
