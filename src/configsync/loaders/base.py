"""
ConfigSync Loader Contract

Loaders turn a source's content into ConfigData. They hold no state and are
selected by ``can_load``.
"""

from typing import Any, Protocol, runtime_checkable

from configsync.config.constants import DEFAULT_FILE_ENCODING
from configsync.core.types import ConfigData
from configsync.sources.base import ConfigSource
from configsync.utils.exceptions import ConfigLoadError


@runtime_checkable
class ConfigLoader(Protocol):
    """Parses the content behind a ConfigSource."""

    supported_formats: tuple[str, ...]

    def can_load(self, source: ConfigSource) -> bool:
        ...

    async def load(self, source: ConfigSource) -> ConfigData:
        ...


def read_text(source: ConfigSource) -> str:
    """Read a file source's content using its configured encoding."""
    options = getattr(source, "options", None)
    encoding = getattr(options, "encoding", None) or DEFAULT_FILE_ENCODING
    try:
        with open(source.location, encoding=encoding) as f:
            return f.read()
    except FileNotFoundError as e:
        raise ConfigLoadError(
            f"Configuration file not found: {source.location}",
            location=source.location,
        ) from e
    except PermissionError as e:
        raise ConfigLoadError(
            f"Permission denied reading file: {source.location}",
            location=source.location,
        ) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigLoadError(
            f"Failed to read {source.location}: {e}",
            location=source.location,
        ) from e


def ensure_mapping(value: Any, location: str) -> ConfigData:
    if not isinstance(value, dict):
        raise ConfigLoadError(
            f"Configuration must be a mapping at the top level, got {type(value).__name__}",
            location=location,
        )
    return value
