"""
ConfigSync Store Contract

A store holds one ConfigData tree (the root) plus a leaf cache keyed by
dot-path. Every write evicts the cache entries of the written path's
ancestors and descendants, so a cached value always equals what a fresh
traversal of the root would return.
"""

from typing import Any, Protocol, runtime_checkable

from configsync.core.types import ConfigData


@runtime_checkable
class ConfigStore(Protocol):
    """Addressable, cached holder of a configuration tree."""

    async def get(self, path: str) -> Any:
        ...

    async def set(self, path: str, value: Any) -> None:
        ...

    async def has(self, path: str) -> bool:
        ...

    async def delete(self, path: str) -> bool:
        ...

    async def clear(self) -> None:
        ...

    async def keys(self) -> list[str]:
        ...

    async def snapshot(self) -> ConfigData:
        ...

    async def invalidate(self) -> None:
        ...

    async def load_data(self, data: ConfigData) -> None:
        ...
