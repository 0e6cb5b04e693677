"""
ConfigSync Stores

Addressable, cached holders of a configuration tree: process-local memory
and Redis.
"""

from configsync.stores.base import ConfigStore
from configsync.stores.memory_store import MemoryConfigStore
from configsync.stores.redis_store import RedisConfigStore

__all__ = [
    "ConfigStore",
    "MemoryConfigStore",
    "RedisConfigStore",
]
