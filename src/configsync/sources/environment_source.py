"""
ConfigSync Environment Source

Snapshot of the process environment as a flat mapping of strings. Names
containing dots stay literal keys; nothing is coerced or nested.
"""

import os

from configsync.config.constants import ENV_LOCATION, SOURCE_TYPE_ENV
from configsync.core.types import ConfigData, SourceCallback, Unsubscribe
from configsync.sources.base import provenance
from configsync.utils.exceptions import SourceNotWatchableError


class EnvironmentConfigSource:
    """Configuration source backed by os.environ."""

    type = SOURCE_TYPE_ENV
    location = ENV_LOCATION

    async def resolve(self) -> ConfigData:
        data: ConfigData = dict(os.environ)
        data.update(provenance(self.type, self.location))
        return data

    def is_watchable(self) -> bool:
        return False

    def watch(self, callback: SourceCallback) -> Unsubscribe:
        raise SourceNotWatchableError(
            "Environment variables do not support watching",
            source_type=self.type,
            location=self.location,
        )
