"""
ConfigSync Sources

Providers of raw configuration data: local files (mtime polling), HTTP
endpoints (interval polling) and the process environment (static).
"""

from configsync.sources.base import ConfigSource, provenance
from configsync.sources.environment_source import EnvironmentConfigSource
from configsync.sources.file_source import FileConfigSource
from configsync.sources.http_source import HttpConfigSource

__all__ = [
    "ConfigSource",
    "provenance",
    "FileConfigSource",
    "HttpConfigSource",
    "EnvironmentConfigSource",
]
