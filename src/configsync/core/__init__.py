"""
ConfigSync Core

Shared data model and dot-path tree helpers.
"""

from configsync.core.tree import (
    MISSING,
    FrozenDict,
    FrozenList,
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
    FileSourceOptions,
    HttpSourceOptions,
    ServiceState,
)

__all__ = [
    "MISSING",
    "ConfigChange",
    "ConfigData",
    "ConfigServiceOptions",
    "FileSourceOptions",
    "HttpSourceOptions",
    "ServiceState",
    "FrozenDict",
    "FrozenList",
    "deep_freeze",
    "deep_merge",
    "diff_trees",
    "get_path",
    "parse_path",
    "set_path",
]
