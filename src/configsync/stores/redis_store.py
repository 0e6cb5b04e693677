"""
ConfigSync Redis Store

Distributed store. The whole tree lives under one serialized root key
(``<prefix>root``), which is the only source of truth. Resolved leaves are
cached under ``<prefix>cache:<path>`` keys with a TTL so reads skip
deserializing the root; those keys are derived data and are evicted on every
write exactly like the memory store's cache.

The root update, leaf-cache update and eviction are separate commands and
are not atomic under concurrent writers.
"""

import json
import re
from typing import Any

import redis.asyncio as redis

from configsync.config.constants import (
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_REDIS_KEY_PREFIX,
    REDIS_CACHE_NAMESPACE,
    REDIS_ROOT_SUFFIX,
)
from configsync.config.settings import EngineSettings
from configsync.core.tree import (
    MISSING,
    ancestor_paths,
    delete_path,
    get_path,
    iter_paths,
    parent_path,
    parse_path,
    replaced_prefix,
    set_path,
    try_parse_path,
)
from configsync.core.types import ConfigData
from configsync.utils.exceptions import RedisStoreError
from configsync.utils.logging import get_logger

logger = get_logger(__name__)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def _glob_escape(text: str) -> str:
    return _GLOB_SPECIAL.sub(r"\\\1", text)


class RedisConfigStore:
    """Redis-backed configuration store."""

    def __init__(
        self,
        redis_client: redis.Redis,
        key_prefix: str = DEFAULT_REDIS_KEY_PREFIX,
        cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
    ):
        self.redis_client = redis_client
        self.key_prefix = key_prefix
        self.root_key = f"{key_prefix}{REDIS_ROOT_SUFFIX}"
        self.cache_ttl_seconds = cache_ttl_seconds
        self._invalidated = False

    @classmethod
    def from_url(
        cls,
        url: str,
        password: str | None = None,
        key_prefix: str = DEFAULT_REDIS_KEY_PREFIX,
        cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
    ) -> "RedisConfigStore":
        """Create a store with its own Redis client."""
        redis_kwargs = {
            "decode_responses": True,
            "socket_timeout": 5,
            "socket_connect_timeout": 5,
            "retry_on_timeout": True,
        }
        if password:
            redis_kwargs["password"] = password

        client = redis.from_url(url, **redis_kwargs)
        return cls(client, key_prefix=key_prefix, cache_ttl_seconds=cache_ttl_seconds)

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> "RedisConfigStore":
        return cls.from_url(
            settings.redis_url,
            password=settings.redis_password,
            key_prefix=settings.redis_key_prefix,
            cache_ttl_seconds=settings.redis_cache_ttl_seconds,
        )

    async def close(self) -> None:
        await self.redis_client.aclose()

    def _cache_key(self, path: str) -> str:
        return f"{self.key_prefix}{REDIS_CACHE_NAMESPACE}{path}"

    def _serialize(self, value: Any) -> str:
        return json.dumps(value)

    def _deserialize(self, raw: str | bytes) -> Any:
        return json.loads(raw)

    def _error(self, operation: str, error: Exception, path: str | None = None) -> RedisStoreError:
        target = f" at path '{path}'" if path is not None else ""
        logger.error(f"Redis config store {operation} failed{target}: {error}")
        return RedisStoreError(
            f"Failed to {operation} configuration{target}: {error}",
            operation=operation,
            details={"path": path, "key_prefix": self.key_prefix},
        )

    async def _read_root(self) -> ConfigData | None:
        raw = await self.redis_client.get(self.root_key)
        return self._deserialize(raw) if raw is not None else None

    async def _delete_keys(self, keys: list[str]) -> None:
        if keys:
            await self.redis_client.delete(*keys)

    async def _descendant_keys(self, path: str) -> list[str]:
        pattern = f"{_glob_escape(self._cache_key(path))}.*"
        return list(await self.redis_client.keys(pattern))

    async def _evict(self, path: str) -> None:
        keys = [self._cache_key(ancestor) for ancestor in ancestor_paths(path)]
        keys.extend(await self._descendant_keys(path))
        await self._delete_keys(keys)

    async def _lookup(self, path: str, operation: str) -> Any:
        if self._invalidated or try_parse_path(path) is None:
            return MISSING

        cache_key = self._cache_key(path)
        try:
            cached = await self.redis_client.get(cache_key)
            if cached is not None:
                return self._deserialize(cached)

            root = await self._read_root()
            if root is None:
                return MISSING

            value = get_path(root, path)
            if value is not MISSING:
                await self.redis_client.setex(cache_key, self.cache_ttl_seconds, self._serialize(value))
            return value

        except Exception as e:
            raise self._error(operation, e, path) from e

    async def get(self, path: str) -> Any:
        """Return the value at ``path`` or None when it does not resolve."""
        value = await self._lookup(path, "get")
        return None if value is MISSING else value

    async def set(self, path: str, value: Any) -> None:
        parse_path(path)
        try:
            root = await self._read_root()
            replaced = replaced_prefix(root, path)
            root = set_path(root, path, value)
            await self.redis_client.set(self.root_key, self._serialize(root))
            await self._evict(path)
            if replaced is not None:
                await self._delete_keys(await self._descendant_keys(replaced))
            await self.redis_client.setex(
                self._cache_key(path), self.cache_ttl_seconds, self._serialize(value)
            )
        except Exception as e:
            raise self._error("set", e, path) from e
        self._invalidated = False

    async def has(self, path: str) -> bool:
        return await self._lookup(path, "has") is not MISSING

    async def delete(self, path: str) -> bool:
        if await self._lookup(path, "delete") is MISSING:
            return False

        try:
            root = await self._read_root()
            if root is not None:
                delete_path(root, path)
                await self.redis_client.set(self.root_key, self._serialize(root))

            await self._delete_keys([self._cache_key(path)])
            await self._evict(path)

            # Removing a list element shifts its later siblings
            parent = parent_path(path)
            if root is not None and parent is not None and isinstance(get_path(root, parent), list):
                await self._delete_keys(await self._descendant_keys(parent))
        except Exception as e:
            raise self._error("delete", e, path) from e
        return True

    async def _clear_namespace(self) -> None:
        keys = await self.redis_client.keys(f"{_glob_escape(self.key_prefix)}*")
        await self._delete_keys(list(keys))

    async def clear(self) -> None:
        """Delete every key under this store's prefix (not transactional)."""
        try:
            await self._clear_namespace()
        except Exception as e:
            raise self._error("clear", e) from e
        self._invalidated = False

    async def keys(self) -> list[str]:
        try:
            root = await self._read_root()
        except Exception as e:
            raise self._error("keys", e) from e
        return list(iter_paths(root)) if root is not None else []

    async def snapshot(self) -> ConfigData:
        try:
            root = await self._read_root()
        except Exception as e:
            raise self._error("snapshot", e) from e
        return root if root is not None else {}

    async def invalidate(self) -> None:
        """Empty the namespace; get() on this instance returns None until the next load_data() or set()."""
        try:
            await self._clear_namespace()
        except Exception as e:
            raise self._error("invalidate", e) from e
        self._invalidated = True

    async def load_data(self, data: ConfigData) -> None:
        try:
            await self._clear_namespace()
            await self.redis_client.set(self.root_key, self._serialize(data))
        except Exception as e:
            raise self._error("load_data", e) from e
        self._invalidated = False
