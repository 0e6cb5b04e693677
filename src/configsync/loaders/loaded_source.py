"""
ConfigSync Loaded Source

Adapter pairing a source with the loaders that parse its content, so a file
source yields its parsed tree (plus provenance) from resolve().
"""

import inspect
from collections.abc import Sequence

from configsync.config.constants import SOURCE_KEY
from configsync.core.types import ConfigData, SourceCallback, Unsubscribe
from configsync.loaders.base import ConfigLoader
from configsync.loaders.environment_loader import EnvironmentConfigLoader
from configsync.loaders.file_loaders import JsonConfigLoader, PythonConfigLoader, YamlConfigLoader
from configsync.sources.base import ConfigSource
from configsync.utils.exceptions import UnsupportedFormatError


def default_loaders() -> list[ConfigLoader]:
    return [
        JsonConfigLoader(),
        YamlConfigLoader(),
        PythonConfigLoader(),
        EnvironmentConfigLoader(),
    ]


class LoadedConfigSource:
    """A ConfigSource whose resolve() returns parsed content."""

    def __init__(self, source: ConfigSource, loaders: Sequence[ConfigLoader] | None = None):
        self.source = source
        self.loaders = list(loaders) if loaders is not None else default_loaders()

    @property
    def type(self) -> str:
        return self.source.type

    @property
    def location(self) -> str:
        return self.source.location

    def loader_for(self, source: ConfigSource) -> ConfigLoader:
        for loader in self.loaders:
            if loader.can_load(source):
                return loader
        raise UnsupportedFormatError(
            f"No loader available for {source.type} source: {source.location}",
            format=source.type,
        )

    async def resolve(self) -> ConfigData:
        loader = self.loader_for(self.source)
        # Access check and provenance come from the wrapped source
        metadata = await self.source.resolve()
        data = dict(await loader.load(self.source))
        if SOURCE_KEY in metadata:
            data[SOURCE_KEY] = metadata[SOURCE_KEY]
        return data

    def is_watchable(self) -> bool:
        return self.source.is_watchable()

    def watch(self, callback: SourceCallback) -> Unsubscribe:
        async def forward(_raw: ConfigData) -> None:
            result = callback(await self.resolve())
            if inspect.isawaitable(result):
                await result

        return self.source.watch(forward)
