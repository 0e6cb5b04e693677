"""
Pytest configuration and shared fixtures for ConfigSync tests.
"""

import fnmatch
import json
import logging
from typing import Any

import pytest

# Configure test logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')


class InMemoryRedis:
    """Stateful stand-in for redis.asyncio.Redis with decode_responses=True."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.calls: list[tuple[str, tuple]] = []
        self.closed = False

    async def get(self, key: str) -> str | None:
        self.calls.append(("get", (key,)))
        return self.data.get(key)

    async def set(self, key: str, value: str) -> bool:
        self.calls.append(("set", (key,)))
        self.data[key] = value
        self.ttls.pop(key, None)
        return True

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.calls.append(("setex", (key, ttl)))
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, *keys: str) -> int:
        self.calls.append(("delete", keys))
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def keys(self, pattern: str) -> list[str]:
        self.calls.append(("keys", (pattern,)))
        return [key for key in self.data if fnmatch.fnmatchcase(key, pattern)]

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def mock_redis_client():
    """Stateful in-memory Redis client for testing."""
    return InMemoryRedis()


class StaticSource:
    """In-memory ConfigSource returning a fixed (replaceable) payload."""

    def __init__(self, data: dict[str, Any], location: str = "memory://static", watchable: bool = False):
        self.type = "static"
        self.location = location
        self.data = data
        self.watchable = watchable
        self.resolve_count = 0
        self.fail_with: Exception | None = None
        self.callbacks: list = []

    async def resolve(self) -> dict[str, Any]:
        self.resolve_count += 1
        if self.fail_with is not None:
            raise self.fail_with
        return json.loads(json.dumps(self.data))

    def is_watchable(self) -> bool:
        return self.watchable

    def watch(self, callback):
        self.callbacks.append(callback)

        def unsubscribe():
            if callback in self.callbacks:
                self.callbacks.remove(callback)

        return unsubscribe

    async def fire(self) -> None:
        for callback in list(self.callbacks):
            await callback(self.data)


@pytest.fixture
def static_source():
    """Factory for in-memory sources."""
    def factory(data: dict[str, Any], **kwargs) -> StaticSource:
        return StaticSource(data, **kwargs)
    return factory


@pytest.fixture
def sample_config():
    """Sample configuration tree for testing."""
    return {
        "app": {
            "name": "billing",
            "debug": False,
            "workers": 4,
        },
        "database": {
            "host": "localhost",
            "port": 5432,
            "replicas": ["db-1", "db-2"],
        },
        "features": [
            {"name": "export", "enabled": True},
            {"name": "audit", "enabled": False},
        ],
        "timeout": None,
    }


# Pytest configuration
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_collection_modifyitems(config, items):
    """Add default markers to tests based on location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
