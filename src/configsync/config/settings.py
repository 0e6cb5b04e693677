"""
ConfigSync Engine Settings

The engine's own knobs (not the configuration it serves), read from the
process environment with the CONFIGSYNC_ prefix or from a local .env file.
"""

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from configsync.config.constants import (
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_FILE_POLL_INTERVAL_MS,
    DEFAULT_FILE_SETTLE_DELAY_MS,
    DEFAULT_REDIS_KEY_PREFIX,
)
from configsync.core.types import ConfigServiceOptions
from configsync.utils.exceptions import ConfigurationError

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class EngineSettings(BaseSettings):
    """Engine configuration using Pydantic for validation."""

    model_config = SettingsConfigDict(
        env_prefix="CONFIGSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)

    # Service behaviour
    strict: bool = Field(default=False)
    reload_on_change: bool = Field(default=False)
    frozen: bool = Field(default=False)

    # Redis store
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_password: str | None = Field(default=None)
    redis_key_prefix: str = Field(default=DEFAULT_REDIS_KEY_PREFIX)
    redis_cache_ttl_seconds: int = Field(default=DEFAULT_CACHE_TTL_SECONDS, gt=0)

    # Sources
    file_poll_interval_ms: int = Field(default=DEFAULT_FILE_POLL_INTERVAL_MS, gt=0)
    file_settle_delay_ms: int = Field(default=DEFAULT_FILE_SETTLE_DELAY_MS, ge=0)
    http_timeout_ms: int | None = Field(default=None, gt=0)
    http_poll_interval_ms: int | None = Field(default=None, gt=0)

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return level

    def service_options(self) -> ConfigServiceOptions:
        """Build ConfigService options from these settings."""
        return ConfigServiceOptions(
            strict=self.strict,
            reload_on_change=self.reload_on_change,
            frozen=self.frozen,
        )


def load_settings(**overrides) -> EngineSettings:
    """Create engine settings, raising ConfigurationError on invalid values."""
    try:
        return EngineSettings(**overrides)
    except ValidationError as e:
        fields = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
        raise ConfigurationError(
            f"Invalid engine settings: {e}",
            config_key=fields[0] if fields else None,
            details={"fields": fields},
        ) from e
