"""
Shared configuration management for the Lyric Atlas API.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_LYRIC_REPOSITORY_URL = (
    "https://raw.githubusercontent.com/Steve-xmh/amll-ttml-db/main/ncm-lyrics"
)


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        populate_by_name=True,
    )

    # Environment
    env: str = Field(default="local", validation_alias="LYRIC_ENV")
    log_level: str = Field(default="info", validation_alias="LYRIC_LOG_LEVEL")

    # Upstream lyric sources
    external_ncm_api_url: Optional[str] = Field(default=None, validation_alias="EXTERNAL_NCM_API_URL")
    lyric_repository_url: str = Field(
        default=DEFAULT_LYRIC_REPOSITORY_URL, validation_alias="LYRIC_REPOSITORY_URL"
    )
    upstream_timeout_seconds: float = Field(default=10.0, validation_alias="LYRIC_UPSTREAM_TIMEOUT")

    # Upstream response cache
    cache_ttl_seconds: int = Field(default=3600, validation_alias="LYRIC_CACHE_TTL")
    cache_max_entries: int = Field(default=1000, validation_alias="LYRIC_CACHE_MAX_ENTRIES")
    cache_cleanup_interval_seconds: int = Field(
        default=600, validation_alias="LYRIC_CACHE_CLEANUP_INTERVAL"
    )


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int = Field(default=8000, validation_alias="LYRIC_PORT")
    host: str = Field(default="0.0.0.0", validation_alias="LYRIC_HOST")


def get_config(service_name: str, port: Optional[int] = None) -> ServiceConfig:
    """Build configuration for a service from the current environment.

    A fresh instance is returned on every call so environment changes are
    picked up without restarting the process.
    """
    if port is None:
        return ServiceConfig(service_name=service_name)
    return ServiceConfig(service_name=service_name, port=port)
