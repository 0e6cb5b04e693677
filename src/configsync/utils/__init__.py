"""
ConfigSync Utility Modules

Common utilities for logging, exceptions and decorators.
"""

from configsync.utils.decorators import measure_latency, retry_async
from configsync.utils.exceptions import (
    ConfigKeyError,
    ConfigLoadError,
    ConfigNotLoadedError,
    ConfigReadOnlyError,
    ConfigSourceError,
    ConfigSyncError,
    ConfigurationError,
    InvalidPathError,
    RedisStoreError,
    SourceNotWatchableError,
    StoreError,
    UnsupportedFormatError,
    WatcherError,
)
from configsync.utils.logging import get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "ConfigSyncError",
    "ConfigurationError",
    "InvalidPathError",
    "ConfigNotLoadedError",
    "ConfigReadOnlyError",
    "ConfigKeyError",
    "ConfigSourceError",
    "SourceNotWatchableError",
    "StoreError",
    "RedisStoreError",
    "WatcherError",
    "ConfigLoadError",
    "UnsupportedFormatError",
    "retry_async",
    "measure_latency",
]
