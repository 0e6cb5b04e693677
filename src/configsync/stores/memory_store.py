"""
ConfigSync Memory Store

Process-local store. Operations complete without awaiting anything; the
async signatures only keep it interchangeable with the Redis store.
"""

from typing import Any

from configsync.core.tree import (
    MISSING,
    ancestor_paths,
    clone_tree,
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


class MemoryConfigStore:
    """In-process configuration store with a memoized leaf cache."""

    def __init__(self):
        self._root: ConfigData | None = None
        self._cache: dict[str, Any] = {}
        self._invalidated = False

    def _lookup(self, path: str) -> Any:
        if self._invalidated or try_parse_path(path) is None:
            return MISSING
        if path in self._cache:
            return self._cache[path]
        if self._root is None:
            return MISSING

        value = get_path(self._root, path)
        if value is not MISSING:
            self._cache[path] = value
        return value

    def _evict(self, path: str) -> None:
        for ancestor in ancestor_paths(path):
            self._cache.pop(ancestor, None)
        self._evict_descendants(path)

    def _evict_descendants(self, path: str) -> None:
        prefix = f"{path}."
        for key in [key for key in self._cache if key.startswith(prefix)]:
            del self._cache[key]

    async def get(self, path: str) -> Any:
        """Return the value at ``path`` or None when it does not resolve."""
        value = self._lookup(path)
        return None if value is MISSING else clone_tree(value)

    async def set(self, path: str, value: Any) -> None:
        parse_path(path)
        stored = clone_tree(value)
        replaced = replaced_prefix(self._root, path)
        self._root = set_path(self._root, path, stored)
        self._evict(path)
        if replaced is not None:
            self._evict_descendants(replaced)
        self._cache[path] = stored
        self._invalidated = False

    async def has(self, path: str) -> bool:
        return self._lookup(path) is not MISSING

    async def delete(self, path: str) -> bool:
        if self._lookup(path) is MISSING:
            return False

        root = clone_tree(self._root)
        delete_path(root, path)
        self._root = root
        self._cache.pop(path, None)
        self._evict(path)

        # Removing a list element shifts its later siblings
        parent = parent_path(path)
        if parent is not None and isinstance(get_path(root, parent), list):
            self._evict_descendants(parent)
        return True

    async def clear(self) -> None:
        self._root = None
        self._cache.clear()
        self._invalidated = False

    async def keys(self) -> list[str]:
        if self._root is None:
            return []
        return list(iter_paths(self._root))

    async def snapshot(self) -> ConfigData:
        return clone_tree(self._root) if self._root is not None else {}

    async def invalidate(self) -> None:
        """Empty the store; get() returns None until the next load_data() or set()."""
        self._root = None
        self._cache.clear()
        self._invalidated = True

    async def load_data(self, data: ConfigData) -> None:
        self._root = clone_tree(data)
        self._cache.clear()
        self._invalidated = False
