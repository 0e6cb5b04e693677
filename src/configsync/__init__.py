"""
ConfigSync - Configuration Synchronization Engine

Aggregates configuration from files, HTTP endpoints and the process
environment into one dot-addressable, optionally live-reloading tree, with
in-process and Redis-backed stores.

License: MIT
Version: 1.0.0
"""

__version__ = "1.0.0"

from configsync.config.settings import EngineSettings, load_settings
from configsync.core.types import (
    ConfigChange,
    ConfigServiceOptions,
    FileSourceOptions,
    HttpSourceOptions,
    ServiceState,
)
from configsync.loaders import LoadedConfigSource
from configsync.service import ConfigService
from configsync.sources import (
    ConfigSource,
    EnvironmentConfigSource,
    FileConfigSource,
    HttpConfigSource,
)
from configsync.sources.factory import ConfigSourceFactory
from configsync.stores import ConfigStore, MemoryConfigStore, RedisConfigStore

__all__ = [
    "__version__",
    "EngineSettings",
    "load_settings",
    "ConfigChange",
    "ConfigServiceOptions",
    "FileSourceOptions",
    "HttpSourceOptions",
    "ServiceState",
    "ConfigService",
    "ConfigSource",
    "ConfigSourceFactory",
    "FileConfigSource",
    "HttpConfigSource",
    "EnvironmentConfigSource",
    "LoadedConfigSource",
    "ConfigStore",
    "MemoryConfigStore",
    "RedisConfigStore",
]
