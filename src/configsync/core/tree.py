"""
ConfigSync Tree Helpers

Dot-path algebra over ConfigData trees, shared by the stores and the service.
A path is ``segment('.' segment)*``; a purely numeric segment addresses a list
element when the current container is a list, otherwise every segment is a
mapping key. Lookups never raise: a type mismatch or an out-of-range index
resolves to MISSING.
"""

import copy
import re
from collections.abc import Iterator
from datetime import datetime
from typing import Any

from configsync.core.types import ConfigChange, ConfigData
from configsync.utils.exceptions import ConfigReadOnlyError, InvalidPathError

_INDEX_PATTERN = re.compile(r"^[0-9]+$")


class _Missing:
    """Marker for a path that does not resolve (distinct from a stored None)."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def is_index(segment: str) -> bool:
    return bool(_INDEX_PATTERN.match(segment))


def parse_path(path: Any) -> list[str]:
    """Split a dot-path into segments, rejecting empty or malformed input."""
    if not isinstance(path, str) or not path.strip():
        raise InvalidPathError("Path cannot be empty", path=path)
    segments = path.split(".")
    if any(segment == "" for segment in segments):
        raise InvalidPathError(f"Malformed path '{path}': empty segment", path=path)
    return segments


def try_parse_path(path: Any) -> list[str] | None:
    try:
        return parse_path(path)
    except InvalidPathError:
        return None


def _child(container: Any, segment: str) -> Any:
    if isinstance(container, list):
        if not is_index(segment):
            return MISSING
        index = int(segment)
        return container[index] if index < len(container) else MISSING
    if isinstance(container, dict):
        return container.get(segment, MISSING)
    return MISSING


def _assign(container: dict | list, segment: str, value: Any) -> None:
    if isinstance(container, list):
        index = int(segment)
        if index >= len(container):
            # Sparse growth: gaps are padded with None
            container.extend([None] * (index + 1 - len(container)))
        container[index] = value
    else:
        container[segment] = value


def _can_hold(container: Any, segment: str) -> bool:
    if isinstance(container, dict):
        return True
    return isinstance(container, list) and is_index(segment)


def get_path(tree: Any, path: Any, default: Any = MISSING) -> Any:
    """Resolve a dot-path by sequential traversal."""
    segments = try_parse_path(path)
    if segments is None:
        return default
    current = tree
    for segment in segments:
        current = _child(current, segment)
        if current is MISSING:
            return default
    return current


def set_path(tree: ConfigData | None, path: str, value: Any) -> ConfigData:
    """Return a copy of ``tree`` with ``value`` written at ``path``.

    Missing or unsuitable intermediate containers are created as lists when
    the following segment is numeric and as mappings otherwise.
    """
    segments = parse_path(path)
    root = clone_tree(tree) if isinstance(tree, dict) else {}
    current = root
    for segment, next_segment in zip(segments, segments[1:]):
        child = _child(current, segment)
        if not _can_hold(child, next_segment):
            child = [] if is_index(next_segment) else {}
            _assign(current, segment, child)
        current = child
    _assign(current, segments[-1], value)
    return root


def replaced_prefix(tree: ConfigData | None, path: str) -> str | None:
    """Return the shallowest ancestor of ``path`` whose existing value set_path would replace.

    Cached entries below that prefix no longer describe the tree after the write.
    """
    segments = parse_path(path)
    current: Any = tree
    for depth, (segment, next_segment) in enumerate(zip(segments, segments[1:]), start=1):
        child = _child(current, segment)
        if child is MISSING:
            return None
        if not _can_hold(child, next_segment):
            return ".".join(segments[:depth])
        current = child
    return None


def delete_path(tree: ConfigData, path: Any) -> bool:
    """Remove the value at ``path`` in place. List elements are removed, shifting later ones."""
    segments = try_parse_path(path)
    if segments is None:
        return False
    parent = tree
    for segment in segments[:-1]:
        parent = _child(parent, segment)
        if parent is MISSING:
            return False
    last = segments[-1]
    if isinstance(parent, dict) and last in parent:
        del parent[last]
        return True
    if isinstance(parent, list) and is_index(last) and int(last) < len(parent):
        del parent[int(last)]
        return True
    return False


def ancestor_paths(path: str) -> list[str]:
    """``'a.b.c'`` -> ``['a.b', 'a']``."""
    segments = path.split(".")
    return [".".join(segments[:i]) for i in range(len(segments) - 1, 0, -1)]


def parent_path(path: str) -> str | None:
    head, _, _ = path.rpartition(".")
    return head or None


def iter_paths(tree: Any, prefix: str = "") -> Iterator[str]:
    """Yield every addressable path, intermediate containers included."""
    if isinstance(tree, dict):
        items = tree.items()
    elif isinstance(tree, list):
        items = enumerate(tree)
    else:
        return
    for key, value in items:
        path = f"{prefix}.{key}" if prefix else str(key)
        yield path
        if isinstance(value, (dict, list)):
            yield from iter_paths(value, path)


def flatten_leaves(tree: Any, prefix: str = "") -> dict[str, Any]:
    """Map leaf paths to values. Mappings recurse; lists and empty mappings are leaves."""
    leaves: dict[str, Any] = {}
    if not isinstance(tree, dict):
        return leaves
    for key, value in tree.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict) and value:
            leaves.update(flatten_leaves(value, path))
        else:
            leaves[path] = value
    return leaves


def clone_tree(value: Any) -> Any:
    """Deep copy into plain dicts and lists (frozen containers are thawed)."""
    if isinstance(value, dict):
        return {key: clone_tree(item) for key, item in value.items()}
    if isinstance(value, list):
        return [clone_tree(item) for item in value]
    return copy.deepcopy(value)


def deep_merge(target: ConfigData, source: ConfigData) -> ConfigData:
    """Merge ``source`` into ``target`` in place; later values win.

    Mappings merge key by key, lists and scalars replace wholesale.
    """
    for key, value in source.items():
        if isinstance(value, dict):
            existing = target.get(key)
            if not isinstance(existing, dict):
                existing = {}
                target[key] = existing
            deep_merge(existing, value)
        else:
            target[key] = clone_tree(value)
    return target


def _values_differ(old: Any, new: Any) -> bool:
    if old is MISSING or new is MISSING:
        return old is not new
    # True == 1 in Python but not in JSON
    if isinstance(old, bool) != isinstance(new, bool):
        return True
    return old != new


def diff_trees(old: ConfigData, new: ConfigData) -> list[ConfigChange]:
    """Compute one ConfigChange per leaf path that differs between two trees."""
    old_leaves = flatten_leaves(old)
    new_leaves = flatten_leaves(new)
    paths = list(old_leaves)
    paths.extend(path for path in new_leaves if path not in old_leaves)

    timestamp = datetime.now()
    changes = []
    for path in paths:
        old_value = old_leaves.get(path, MISSING)
        new_value = new_leaves.get(path, MISSING)
        if _values_differ(old_value, new_value):
            changes.append(ConfigChange(
                path=path,
                old_value=None if old_value is MISSING else old_value,
                new_value=None if new_value is MISSING else new_value,
                timestamp=timestamp,
            ))
    return changes


class FrozenDict(dict):
    """A dict whose mutators raise ConfigReadOnlyError."""

    def _refuse(self, *args, **kwargs):
        raise ConfigReadOnlyError("Cannot modify frozen configuration")

    __setitem__ = __delitem__ = __ior__ = _refuse
    clear = pop = popitem = setdefault = update = _refuse

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (FrozenDict, (dict(self),))


class FrozenList(list):
    """A list whose mutators raise ConfigReadOnlyError."""

    def _refuse(self, *args, **kwargs):
        raise ConfigReadOnlyError("Cannot modify frozen configuration")

    __setitem__ = __delitem__ = __iadd__ = __imul__ = _refuse
    append = extend = insert = pop = remove = clear = sort = reverse = _refuse

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (FrozenList, (list(self),))


def deep_freeze(value: Any) -> Any:
    """Return a deeply immutable copy of a tree."""
    if isinstance(value, dict):
        return FrozenDict((key, deep_freeze(item)) for key, item in value.items())
    if isinstance(value, list):
        return FrozenList(deep_freeze(item) for item in value)
    return value
