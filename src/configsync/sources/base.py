"""
ConfigSync Source Contract

Every source exposes ``type`` and ``location`` identifiers, an async
``resolve()`` and the ``watch()``/``is_watchable()`` pair. Variants satisfy
the ConfigSource protocol structurally; they do not share a base class.
"""

import inspect
from datetime import datetime, timezone
from typing import Any, Protocol, runtime_checkable

from configsync.config.constants import SOURCE_KEY
from configsync.core.types import ConfigData, SourceCallback, Unsubscribe
from configsync.utils.exceptions import WatcherError


@runtime_checkable
class ConfigSource(Protocol):
    """Where raw configuration data comes from."""

    type: str
    location: str

    async def resolve(self) -> ConfigData:
        ...

    def watch(self, callback: SourceCallback) -> Unsubscribe:
        ...

    def is_watchable(self) -> bool:
        ...


def provenance(source_type: str, location: str, last_modified: datetime | None = None) -> dict[str, Any]:
    """Build the reserved ``__source`` entry."""
    last_modified = last_modified or datetime.now(timezone.utc)
    return {
        SOURCE_KEY: {
            "type": source_type,
            "location": location,
            "lastModified": last_modified.isoformat(),
        }
    }


class CallbackRegistry:
    """Subscriber list for one source; every watch() shares the source's single poller."""

    def __init__(self):
        self._callbacks: list[SourceCallback] = []

    def __len__(self) -> int:
        return len(self._callbacks)

    def add(self, callback: SourceCallback) -> None:
        self._callbacks.append(callback)

    def remove(self, callback: SourceCallback) -> bool:
        for index, registered in enumerate(self._callbacks):
            if registered is callback:
                del self._callbacks[index]
                return True
        return False

    async def notify(self, data: ConfigData) -> None:
        """Invoke every callback, then raise WatcherError if any of them failed."""
        errors: list[Exception] = []
        for callback in list(self._callbacks):
            try:
                result = callback(data)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                errors.append(e)

        if errors:
            raise WatcherError(errors)
