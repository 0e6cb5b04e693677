"""
ConfigSync Source Factory

Creates sources with option defaults taken from EngineSettings.
"""

import os

from configsync.config.settings import EngineSettings
from configsync.core.types import FileSourceOptions, HttpSourceOptions
from configsync.loaders.loaded_source import LoadedConfigSource
from configsync.sources.base import ConfigSource
from configsync.sources.environment_source import EnvironmentConfigSource
from configsync.sources.file_source import FileConfigSource
from configsync.sources.http_source import HttpConfigSource


class ConfigSourceFactory:
    """Builds File, Http and Environment sources."""

    def __init__(self, settings: EngineSettings | None = None):
        self.settings = settings or EngineSettings()

    def create_file_source(
        self,
        path: str | os.PathLike,
        options: FileSourceOptions | None = None,
    ) -> FileConfigSource:
        if options is None:
            options = FileSourceOptions(
                poll_interval_ms=self.settings.file_poll_interval_ms,
                settle_delay_ms=self.settings.file_settle_delay_ms,
            )
        return FileConfigSource(path, options)

    def create_http_source(
        self,
        url: str,
        options: HttpSourceOptions | None = None,
    ) -> HttpConfigSource:
        if options is None:
            options = HttpSourceOptions(
                timeout_ms=self.settings.http_timeout_ms,
                poll_interval_ms=self.settings.http_poll_interval_ms,
            )
        return HttpConfigSource(url, options)

    def create_environment_source(self) -> EnvironmentConfigSource:
        return EnvironmentConfigSource()

    def create_loaded_file_source(
        self,
        path: str | os.PathLike,
        options: FileSourceOptions | None = None,
    ) -> ConfigSource:
        """A file source whose resolve() returns the parsed file content."""
        return LoadedConfigSource(self.create_file_source(path, options))
