"""
ConfigSync Environment Loader
"""

from configsync.config.constants import SOURCE_KEY, SOURCE_TYPE_ENV
from configsync.core.types import ConfigData
from configsync.sources.base import ConfigSource
from configsync.utils.exceptions import ConfigLoadError, ConfigSyncError, UnsupportedFormatError


class EnvironmentConfigLoader:
    """Passes environment sources through, keeping only string values."""

    supported_formats = ("env", "environment")

    def can_load(self, source: ConfigSource) -> bool:
        return source.type == SOURCE_TYPE_ENV

    async def load(self, source: ConfigSource) -> ConfigData:
        if not self.can_load(source):
            raise UnsupportedFormatError(
                f"Environment loader cannot handle source type: {source.type}",
                format=source.type,
            )
        try:
            raw = await source.resolve()
        except ConfigSyncError:
            raise
        except Exception as e:
            raise ConfigLoadError(
                f"Failed to load environment configuration: {e}",
                location=source.location,
            ) from e

        data: ConfigData = {
            key: value for key, value in raw.items()
            if key != SOURCE_KEY and isinstance(value, str)
        }
        if SOURCE_KEY in raw:
            data[SOURCE_KEY] = raw[SOURCE_KEY]
        return data
