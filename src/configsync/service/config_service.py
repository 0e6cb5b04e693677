"""
ConfigSync Configuration Service

Loads configuration from an ordered list of sources, merges it into one tree
and exposes the dot-path API with change notification, strict mode and
freezing.

Lifecycle: UNLOADED -> LOADED -> (RELOADING -> LOADED)* -> DISPOSED, where
DISPOSED behaves like UNLOADED for later calls.
"""

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from configsync.config.settings import EngineSettings
from configsync.core.tree import (
    MISSING,
    clone_tree,
    deep_freeze,
    deep_merge,
    diff_trees,
    get_path,
    parse_path,
    set_path,
)
from configsync.core.types import (
    ConfigChange,
    ConfigData,
    ConfigServiceOptions,
    ServiceState,
    Unsubscribe,
)
from configsync.sources.base import ConfigSource
from configsync.utils.decorators import measure_latency
from configsync.utils.exceptions import (
    ConfigKeyError,
    ConfigNotLoadedError,
    ConfigReadOnlyError,
    WatcherError,
)
from configsync.utils.logging import get_logger

logger = get_logger(__name__)

BatchCallback = Callable[[list[ConfigChange]], None]
ChangeCallback = Callable[[ConfigChange], None]


@dataclass(eq=False)
class _Watcher:
    callback: Callable[[Any], None]
    path: str | None = None

    def matches(self, change: ConfigChange) -> bool:
        return change.path == self.path or change.path.startswith(f"{self.path}.")


class ConfigService:
    """Merged, watchable configuration tree built from ordered sources."""

    def __init__(self, options: ConfigServiceOptions | None = None):
        options = options or ConfigServiceOptions()
        self.strict = options.strict
        self.reload_on_change = options.reload_on_change
        self.frozen = options.frozen

        self._data: ConfigData = {}
        self._sources: list[ConfigSource] = []
        self._state = ServiceState.UNLOADED
        self._watchers: list[_Watcher] = []
        self._source_unsubscribers: list[Unsubscribe] = []
        self._reload_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> "ConfigService":
        return cls(settings.service_options())

    @property
    def state(self) -> ServiceState:
        return self._state

    def is_loaded(self) -> bool:
        return self._state in (ServiceState.LOADED, ServiceState.RELOADING)

    async def _resolve_sources(self, sources: Sequence[ConfigSource]) -> ConfigData:
        """Resolve sources in order and merge them into a fresh tree."""
        merged: ConfigData = {}
        for source in sources:
            data = await source.resolve()
            deep_merge(merged, data)
            logger.debug("source_resolved", source_type=source.type, location=source.location)
        return deep_freeze(merged) if self.frozen else merged

    @measure_latency("config_load")
    async def load(self, sources: ConfigSource | Sequence[ConfigSource]) -> None:
        """Load and merge the given sources; later sources take precedence.

        The service state changes only if every source resolves. With
        ``reload_on_change`` each watchable source triggers reload() on change.
        """
        source_list = [sources] if not isinstance(sources, (list, tuple)) else list(sources)
        data = await self._resolve_sources(source_list)

        self._sources = source_list
        self._data = data
        self._state = ServiceState.LOADED

        if self.reload_on_change:
            self._setup_source_watchers()

        logger.info(
            "configuration_loaded",
            sources=[source.location for source in source_list],
            frozen=self.frozen,
        )

    async def reload(self) -> None:
        """Re-resolve the captured sources and notify watchers of the differences.

        Reloads are serialized. A failed reload leaves the previous tree in place.
        """
        if not self.is_loaded():
            raise ConfigNotLoadedError("Cannot reload configuration before initial load")

        async with self._reload_lock:
            if not self.is_loaded():
                # Disposed while waiting for the lock
                return

            self._state = ServiceState.RELOADING
            try:
                data = await self._resolve_sources(self._sources)
            except Exception as e:
                logger.error(f"Configuration reload failed, keeping previous tree: {e}")
                raise
            finally:
                if self._state is ServiceState.RELOADING:
                    self._state = ServiceState.LOADED

            if self._state is not ServiceState.LOADED:
                return

            old_data = self._data
            self._data = data
            changes = diff_trees(old_data, data)
            logger.info("configuration_reloaded", changes=len(changes))

            if changes:
                self._notify_watchers(changes)

    def get(self, path: str, default: Any = MISSING) -> Any:
        """Return the value at ``path``.

        Strict mode raises when the service is not loaded or the path does not
        resolve and no default was given; otherwise the default (or None) is
        returned.
        """
        if not self.is_loaded():
            if self.strict:
                raise ConfigNotLoadedError(
                    f"Configuration not loaded when accessing path: {path}"
                )
            return None if default is MISSING else default

        value = get_path(self._data, path)
        if value is MISSING:
            if self.strict and default is MISSING:
                raise ConfigKeyError(f"Configuration key '{path}' not found", config_key=path)
            return None if default is MISSING else default
        return value

    def get_all(self) -> ConfigData:
        """Return an independent copy of the tree (the frozen tree itself when frozen)."""
        if not self.is_loaded():
            if self.strict:
                raise ConfigNotLoadedError("Configuration not loaded")
            return {}
        if self.frozen:
            return self._data
        return clone_tree(self._data)

    def has(self, path: str) -> bool:
        if not self.is_loaded():
            return False
        return get_path(self._data, path) is not MISSING

    def _check_writable(self, message: str, path: str | None = None) -> None:
        if self.frozen:
            raise ConfigReadOnlyError(message, path=path)
        if not self.is_loaded():
            raise ConfigNotLoadedError("Configuration not loaded")

    def set(self, path: str, value: Any) -> None:
        """Write ``value`` at ``path`` and notify watchers of the single change."""
        self._check_writable(f"Cannot set '{path}': configuration is frozen", path=path)
        parse_path(path)

        old_value = get_path(self._data, path)
        self._data = set_path(self._data, path, clone_tree(value))

        change = ConfigChange(
            path=path,
            old_value=None if old_value is MISSING else old_value,
            new_value=value,
        )
        self._notify_watchers([change])

    def merge(self, data: ConfigData) -> None:
        """Deep-merge ``data`` into the live tree and notify watchers of every difference."""
        self._check_writable("Cannot merge: configuration is frozen")

        old_data = clone_tree(self._data)
        deep_merge(self._data, data)
        changes = diff_trees(old_data, self._data)
        if changes:
            self._notify_watchers(changes)

    def watch(
        self,
        path_or_callback: str | BatchCallback,
        callback: ChangeCallback | None = None,
    ) -> Unsubscribe:
        """Register a watcher.

        ``watch(callback)`` receives every change batch as a list.
        ``watch(path, callback)`` receives each change at ``path`` or below it,
        one call per change.
        """
        if isinstance(path_or_callback, str):
            if callback is None:
                raise TypeError("watch(path, callback) requires a callback")
            watcher = _Watcher(callback=callback, path=path_or_callback)
        else:
            watcher = _Watcher(callback=path_or_callback)

        self._watchers.append(watcher)

        def unsubscribe() -> None:
            if watcher in self._watchers:
                self._watchers.remove(watcher)

        return unsubscribe

    def dispose(self) -> None:
        """Tear down source subscriptions and watchers and empty the tree."""
        for unwatch in self._source_unsubscribers:
            unwatch()
        self._source_unsubscribers = []
        self._watchers = []
        self._data = {}
        self._sources = []
        self._state = ServiceState.DISPOSED
        logger.info("configuration_disposed")

    def _notify_watchers(self, changes: list[ConfigChange]) -> None:
        """Run every watcher, then raise one WatcherError if any of them failed."""
        errors: list[Exception] = []
        for watcher in list(self._watchers):
            if watcher.path is None:
                payloads: list[Any] = [changes]
            else:
                payloads = [change for change in changes if watcher.matches(change)]

            for payload in payloads:
                try:
                    watcher.callback(payload)
                except Exception as e:
                    errors.append(e)

        if errors:
            raise WatcherError(errors)

    def _setup_source_watchers(self) -> None:
        for unwatch in self._source_unsubscribers:
            unwatch()
        self._source_unsubscribers = []

        for source in self._sources:
            if source.is_watchable():
                self._source_unsubscribers.append(source.watch(self._on_source_change))

    async def _on_source_change(self, _data: ConfigData) -> None:
        logger.debug("source_changed")
        await self.reload()
