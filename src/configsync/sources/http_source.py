"""
ConfigSync HTTP Source

Fetches a JSON document with a GET request. Any non-2xx status, transport
failure, invalid body or timeout is reported as ConfigSourceError. Watching
polls the endpoint on a single shared timer per source.
"""

import asyncio
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

import aiohttp

from configsync.config.constants import SOURCE_TYPE_HTTP
from configsync.core.types import ConfigData, HttpSourceOptions, SourceCallback, Unsubscribe
from configsync.sources.base import CallbackRegistry, provenance
from configsync.utils.exceptions import ConfigSourceError, SourceNotWatchableError
from configsync.utils.logging import get_logger

logger = get_logger(__name__)


class HttpConfigSource:
    """Configuration source backed by a remote HTTP endpoint."""

    type = SOURCE_TYPE_HTTP

    def __init__(self, url: str, options: HttpSourceOptions | None = None):
        self.location = url
        self.options = options or HttpSourceOptions()
        self._callbacks = CallbackRegistry()
        self._poll_task: asyncio.Task | None = None

    async def resolve(self) -> ConfigData:
        """Fetch and decode the remote configuration document."""
        try:
            if self.options.timeout_ms:
                # wait_for cancels the in-flight request when the timer fires
                return await asyncio.wait_for(
                    self._fetch(),
                    timeout=self.options.timeout_ms / 1000,
                )
            return await self._fetch()

        except ConfigSourceError:
            raise
        except asyncio.TimeoutError as e:
            raise ConfigSourceError(
                f"Cannot fetch from URL: {self.location} - timed out after {self.options.timeout_ms}ms",
                source_type=self.type,
                location=self.location,
            ) from e
        except Exception as e:
            raise ConfigSourceError(
                f"Cannot fetch from URL: {self.location} - {e}",
                source_type=self.type,
                location=self.location,
            ) from e

    async def _fetch(self) -> ConfigData:
        async with aiohttp.ClientSession(headers=self.options.headers) as session:
            async with session.get(self.location) as response:
                if not 200 <= response.status < 300:
                    raise ConfigSourceError(
                        f"Cannot fetch from URL: {self.location} - HTTP {response.status}: {response.reason}",
                        source_type=self.type,
                        location=self.location,
                        details={"status_code": response.status},
                    )
                payload = await response.json(content_type=None)
                last_modified = _parse_last_modified(response.headers.get("Last-Modified"))

        data = dict(payload) if isinstance(payload, dict) else {}
        data.update(provenance(self.type, self.location, last_modified))
        return data

    def is_watchable(self) -> bool:
        return bool(self.options.poll_interval_ms)

    def watch(self, callback: SourceCallback) -> Unsubscribe:
        """Subscribe to periodic re-fetches. Must be called from a running event loop."""
        if not self.options.poll_interval_ms:
            raise SourceNotWatchableError(
                "Polling interval not configured for HTTP source watching",
                source_type=self.type,
                location=self.location,
            )

        self._callbacks.add(callback)
        if self._poll_task is None:
            self._poll_task = asyncio.get_running_loop().create_task(self._polling_loop())
            logger.debug("http_poll_started", location=self.location)

        def unsubscribe() -> None:
            self._callbacks.remove(callback)
            if not self._callbacks and self._poll_task is not None:
                self._poll_task.cancel()
                self._poll_task = None
                logger.debug("http_poll_stopped", location=self.location)

        return unsubscribe

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def _polling_loop(self) -> None:
        """Background polling loop."""
        interval = self.options.poll_interval_ms / 1000
        while True:
            try:
                await asyncio.sleep(interval)
                data = await self.resolve()
                await self._callbacks.notify(data)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error polling HTTP config source {self.location}: {e}")


def _parse_last_modified(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return datetime.now(timezone.utc)
