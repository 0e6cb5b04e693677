"""
ConfigSync File Source

Local file source. resolve() checks read access and reports provenance;
parsing the bytes belongs to a loader. watch() polls the file's mtime on a
fixed interval rather than relying on OS file events.
"""

import asyncio
import os
from datetime import datetime, timezone
from pathlib import Path

from configsync.config.constants import SOURCE_TYPE_FILE
from configsync.core.types import ConfigData, FileSourceOptions, SourceCallback, Unsubscribe
from configsync.sources.base import CallbackRegistry, provenance
from configsync.utils.exceptions import ConfigSourceError, SourceNotWatchableError
from configsync.utils.logging import get_logger

logger = get_logger(__name__)


class FileConfigSource:
    """Configuration source backed by a local file."""

    type = SOURCE_TYPE_FILE

    def __init__(self, file_path: str | os.PathLike, options: FileSourceOptions | None = None):
        self.location = str(Path(file_path).expanduser().absolute())
        self.options = options or FileSourceOptions()
        self._callbacks = CallbackRegistry()
        self._poll_task: asyncio.Task | None = None

    async def resolve(self) -> ConfigData:
        """Verify read access and return provenance metadata."""
        try:
            stat = os.stat(self.location)
        except OSError as e:
            raise ConfigSourceError(
                f"Cannot access file: {self.location}",
                source_type=self.type,
                location=self.location,
            ) from e

        if not os.access(self.location, os.R_OK):
            raise ConfigSourceError(
                f"Cannot read file: {self.location}",
                source_type=self.type,
                location=self.location,
            )

        last_modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        return provenance(self.type, self.location, last_modified)

    def is_watchable(self) -> bool:
        return self.options.watch

    def watch(self, callback: SourceCallback) -> Unsubscribe:
        """Subscribe to mtime changes. Must be called from a running event loop."""
        if not self.options.watch:
            raise SourceNotWatchableError(
                "Watching is disabled for this source",
                source_type=self.type,
                location=self.location,
            )

        self._callbacks.add(callback)
        if self._poll_task is None:
            self._start_polling()

        def unsubscribe() -> None:
            self._callbacks.remove(callback)
            if not self._callbacks:
                self._stop_polling()

        return unsubscribe

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def _start_polling(self) -> None:
        try:
            initial_mtime = os.stat(self.location).st_mtime_ns
        except OSError as e:
            # Degrade to a no-op watcher; resolve() reports the access problem
            logger.warning(f"Could not setup file watcher for {self.location}: {e}")
            return

        self._poll_task = asyncio.get_running_loop().create_task(
            self._poll_loop(initial_mtime)
        )
        logger.debug("file_watch_started", location=self.location)

    def _stop_polling(self) -> None:
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None
            logger.debug("file_watch_stopped", location=self.location)

    async def _poll_loop(self, last_mtime: int) -> None:
        """Background mtime polling loop."""
        interval = self.options.poll_interval_ms / 1000
        settle_delay = self.options.settle_delay_ms / 1000

        while True:
            try:
                await asyncio.sleep(interval)
                try:
                    mtime = os.stat(self.location).st_mtime_ns
                except FileNotFoundError:
                    continue

                if mtime == last_mtime:
                    continue
                last_mtime = mtime

                # Let the writer finish before reading
                await asyncio.sleep(settle_delay)
                data = await self.resolve()
                await self._callbacks.notify(data)

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.warning(f"File watch error for {self.location}: {e}")
