"""
Unit tests for the Redis-backed configuration store.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import redis.exceptions

from configsync.config.settings import EngineSettings
from configsync.stores import ConfigStore, RedisConfigStore
from configsync.utils.exceptions import InvalidPathError, RedisStoreError, StoreError


@pytest.fixture
def store(mock_redis_client):
    return RedisConfigStore(mock_redis_client, key_prefix="test:")


class TestRedisConfigStore:
    """Test Redis store functionality."""

    def test_satisfies_store_contract(self, store):
        assert isinstance(store, ConfigStore)
        assert store.root_key == "test:root"

    @pytest.mark.asyncio
    async def test_root_key_is_source_of_truth(self, store, mock_redis_client, sample_config):
        await store.load_data(sample_config)
        assert json.loads(mock_redis_client.data["test:root"]) == sample_config

    @pytest.mark.asyncio
    async def test_get_caches_leaf_with_ttl(self, store, mock_redis_client, sample_config):
        await store.load_data(sample_config)

        assert await store.get("database.port") == 5432
        assert mock_redis_client.data["test:cache:database.port"] == "5432"
        assert mock_redis_client.ttls["test:cache:database.port"] == 3600

        # Served from the leaf key without reading the root
        mock_redis_client.calls.clear()
        assert await store.get("database.port") == 5432
        assert mock_redis_client.calls == [("get", ("test:cache:database.port",))]

    @pytest.mark.asyncio
    async def test_missing_values_are_not_cached(self, store, mock_redis_client, sample_config):
        await store.load_data(sample_config)
        assert await store.get("database.nothing") is None
        assert "test:cache:database.nothing" not in mock_redis_client.data

    @pytest.mark.asyncio
    async def test_round_trip(self, store):
        await store.set("service.retry.max", 5)
        assert await store.get("service.retry.max") == 5
        assert await store.get("service") == {"retry": {"max": 5}}

    @pytest.mark.asyncio
    async def test_set_rejects_empty_path_before_backend(self, store, mock_redis_client):
        with pytest.raises(InvalidPathError):
            await store.set("", 1)
        assert mock_redis_client.calls == []

    @pytest.mark.asyncio
    async def test_ancestor_write_refreshes_descendant(self, store):
        await store.set("a.b.c", 1)
        assert await store.get("a.b.c") == 1
        assert await store.get("a") == {"b": {"c": 1}}

        await store.set("a.b", {"c": 2})
        assert await store.get("a.b.c") == 2
        assert await store.get("a") == {"b": {"c": 2}}

    @pytest.mark.asyncio
    async def test_write_evicts_ancestor_keys_only(self, store, mock_redis_client):
        await store.load_data({"a": {"x": 1, "y": 2}})
        await store.get("a")
        await store.get("a.x")

        await store.set("a.y", 3)
        assert "test:cache:a" not in mock_redis_client.data
        assert "test:cache:a.x" in mock_redis_client.data
        assert await store.get("a") == {"x": 1, "y": 3}

    @pytest.mark.asyncio
    async def test_replaced_list_drops_cached_elements(self, store, mock_redis_client):
        await store.load_data({"arr": [1, 2]})
        assert await store.get("arr.0") == 1

        await store.set("arr.name", "x")
        assert "test:cache:arr.0" not in mock_redis_client.data
        assert await store.get("arr.0") is None
        assert await store.has("arr.0") is False
        assert await store.snapshot() == {"arr": {"name": "x"}}

    @pytest.mark.asyncio
    async def test_replaced_scalar_drops_cached_siblings_only(self, store, mock_redis_client):
        await store.load_data({"a": {"b": 1, "c": 2}})
        assert await store.get("a.c") == 2

        await store.set("a.b.d", 3)
        assert await store.get("a.b") == {"d": 3}
        assert await store.get("a.c") == 2

    @pytest.mark.asyncio
    async def test_root_named_path_does_not_clobber_tree(self, store, mock_redis_client):
        await store.load_data({"a": 1})
        await store.set("root", "v")
        await store.set("__root__", "w")

        assert await store.snapshot() == {"a": 1, "root": "v", "__root__": "w"}
        assert await store.get("a") == 1
        assert await store.get("root") == "v"
        assert json.loads(mock_redis_client.data[store.root_key])["a"] == 1

    @pytest.mark.asyncio
    async def test_sparse_array_growth(self, store):
        await store.set("arr.0", "x")
        await store.set("arr.5", "y")
        assert await store.get("arr") == ["x", None, None, None, None, "y"]

    @pytest.mark.asyncio
    async def test_delete(self, store, sample_config):
        await store.load_data(sample_config)
        await store.get("app.workers")

        assert await store.delete("app.workers") is True
        assert await store.has("app.workers") is False
        assert await store.get("app") == {"name": "billing", "debug": False}

    @pytest.mark.asyncio
    async def test_delete_missing_path(self, store, mock_redis_client, sample_config):
        await store.load_data(sample_config)
        before = dict(mock_redis_client.data)
        assert await store.delete("app.nothing") is False
        assert mock_redis_client.data == before

    @pytest.mark.asyncio
    async def test_clear_removes_namespace_only(self, store, mock_redis_client, sample_config):
        mock_redis_client.data["other:key"] = "1"
        await store.load_data(sample_config)
        await store.get("app.name")

        await store.clear()
        assert mock_redis_client.data == {"other:key": "1"}
        assert await store.snapshot() == {}

    @pytest.mark.asyncio
    async def test_keys_and_snapshot(self, store):
        await store.load_data({"a": {"b": 1}})
        assert await store.keys() == ["a", "a.b"]
        assert await store.snapshot() == {"a": {"b": 1}}

    @pytest.mark.asyncio
    async def test_invalidate(self, store, sample_config):
        await store.load_data(sample_config)
        await store.invalidate()
        assert await store.get("app.name") is None
        assert await store.has("app") is False

        await store.set("app.name", "fresh")
        assert await store.get("app.name") == "fresh"

    @pytest.mark.asyncio
    async def test_backend_failure_is_wrapped_with_operation(self, store, mock_redis_client):
        mock_redis_client.get = AsyncMock(side_effect=redis.exceptions.ConnectionError("down"))

        with pytest.raises(RedisStoreError) as exc_info:
            await store.get("a.b")
        assert exc_info.value.operation == "get"
        assert exc_info.value.storage_type == "redis"
        assert isinstance(exc_info.value.__cause__, redis.exceptions.ConnectionError)

        with pytest.raises(StoreError) as exc_info:
            await store.set("a.b", 1)
        assert exc_info.value.operation == "set"

        with pytest.raises(StoreError) as exc_info:
            await store.snapshot()
        assert exc_info.value.operation == "snapshot"

    @pytest.mark.asyncio
    async def test_clear_failure_is_wrapped(self, store, mock_redis_client):
        mock_redis_client.keys = AsyncMock(side_effect=redis.exceptions.TimeoutError("slow"))
        with pytest.raises(RedisStoreError) as exc_info:
            await store.clear()
        assert exc_info.value.operation == "clear"

    @pytest.mark.asyncio
    async def test_close(self, store, mock_redis_client):
        await store.close()
        assert mock_redis_client.closed is True


def test_from_settings_uses_redis_from_url():
    settings = EngineSettings(
        redis_url="redis://cache:6379/2",
        redis_password="secret",
        redis_key_prefix="svc:",
        redis_cache_ttl_seconds=60,
    )
    client = MagicMock()
    with patch("configsync.stores.redis_store.redis.from_url", return_value=client) as from_url:
        store = RedisConfigStore.from_settings(settings)

    args, kwargs = from_url.call_args
    assert args == ("redis://cache:6379/2",)
    assert kwargs["decode_responses"] is True
    assert kwargs["password"] == "secret"
    assert store.redis_client is client
    assert store.key_prefix == "svc:"
    assert store.cache_ttl_seconds == 60
