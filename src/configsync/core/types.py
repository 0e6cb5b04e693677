"""
ConfigSync Core Types

Data model shared by sources, stores and the service.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from configsync.config.constants import (
    DEFAULT_FILE_ENCODING,
    DEFAULT_FILE_POLL_INTERVAL_MS,
    DEFAULT_FILE_SETTLE_DELAY_MS,
)

# Arbitrarily nested JSON-compatible mapping
ConfigData = dict[str, Any]

# Source-level callback: receives the freshly resolved data
SourceCallback = Callable[[ConfigData], None | Awaitable[None]]

Unsubscribe = Callable[[], None]


class ServiceState(Enum):
    """ConfigService lifecycle states."""
    UNLOADED = "unloaded"
    LOADED = "loaded"
    RELOADING = "reloading"
    DISPOSED = "disposed"


@dataclass
class ConfigChange:
    """A single leaf-level difference between two configuration trees."""
    path: str
    old_value: Any
    new_value: Any
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "path": self.path,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class ConfigServiceOptions:
    """ConfigService behaviour switches."""
    strict: bool = False
    reload_on_change: bool = False
    frozen: bool = False


@dataclass
class FileSourceOptions:
    """File source configuration."""
    encoding: str = DEFAULT_FILE_ENCODING
    watch: bool = True
    poll_interval_ms: int = DEFAULT_FILE_POLL_INTERVAL_MS
    settle_delay_ms: int = DEFAULT_FILE_SETTLE_DELAY_MS


@dataclass
class HttpSourceOptions:
    """HTTP source configuration."""
    headers: dict[str, str] = field(default_factory=dict)
    timeout_ms: int | None = None
    poll_interval_ms: int | None = None
