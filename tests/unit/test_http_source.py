"""
Unit tests for the HTTP configuration source.
"""

import asyncio

import pytest
import pytest_asyncio
from aiohttp import test_utils, web

from configsync.core.types import HttpSourceOptions
from configsync.sources import ConfigSource, HttpConfigSource
from configsync.utils.exceptions import ConfigSourceError, SourceNotWatchableError


class ConfigEndpoint:
    """Mutable aiohttp handler serving a configuration document."""

    def __init__(self):
        self.payload = {"service": {"name": "billing"}}
        self.status = 200
        self.delay = 0.0
        self.last_modified = None
        self.requests: list[web.Request] = []

    async def handle(self, request: web.Request) -> web.StreamResponse:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.status != 200:
            return web.Response(status=self.status, text="unavailable")
        headers = {"Last-Modified": self.last_modified} if self.last_modified else None
        if isinstance(self.payload, str):
            return web.Response(text=self.payload, headers=headers)
        return web.json_response(self.payload, headers=headers)


@pytest.fixture
def endpoint():
    return ConfigEndpoint()


@pytest_asyncio.fixture
async def server(endpoint):
    app = web.Application()
    app.router.add_get("/config", endpoint.handle)
    test_server = test_utils.TestServer(app)
    await test_server.start_server()
    yield test_server
    await test_server.close()


def _url(server) -> str:
    return str(server.make_url("/config"))


class TestResolve:

    def test_satisfies_source_contract(self):
        source = HttpConfigSource("https://config.local/app.json")
        assert isinstance(source, ConfigSource)
        assert source.type == "http"
        assert source.location == "https://config.local/app.json"
        assert source.is_watchable() is False

    @pytest.mark.asyncio
    async def test_fetches_json_with_provenance(self, server, endpoint):
        source = HttpConfigSource(_url(server))
        data = await source.resolve()

        assert data["service"] == {"name": "billing"}
        assert data["__source"]["type"] == "http"
        assert data["__source"]["location"] == _url(server)

    @pytest.mark.asyncio
    async def test_sends_configured_headers(self, server, endpoint):
        source = HttpConfigSource(
            _url(server),
            HttpSourceOptions(headers={"Authorization": "Bearer token"}),
        )
        await source.resolve()
        assert endpoint.requests[0].headers["Authorization"] == "Bearer token"

    @pytest.mark.asyncio
    async def test_last_modified_header(self, server, endpoint):
        endpoint.last_modified = "Wed, 21 Oct 2015 07:28:00 GMT"
        data = await HttpConfigSource(_url(server)).resolve()
        assert data["__source"]["lastModified"].startswith("2015-10-21T07:28:00")

    @pytest.mark.asyncio
    async def test_non_json_content_type_still_parsed(self, server, endpoint):
        endpoint.payload = '{"plain": true}'
        data = await HttpConfigSource(_url(server)).resolve()
        assert data["plain"] is True

    @pytest.mark.asyncio
    async def test_non_object_body_yields_empty_tree(self, server, endpoint):
        endpoint.payload = [1, 2, 3]
        data = await HttpConfigSource(_url(server)).resolve()
        assert set(data) == {"__source"}

    @pytest.mark.asyncio
    async def test_non_2xx_status(self, server, endpoint):
        endpoint.status = 503
        with pytest.raises(ConfigSourceError) as exc_info:
            await HttpConfigSource(_url(server)).resolve()
        assert "HTTP 503" in str(exc_info.value)
        assert exc_info.value.details["status_code"] == 503

    @pytest.mark.asyncio
    async def test_invalid_body(self, server, endpoint):
        endpoint.payload = "not json"
        with pytest.raises(ConfigSourceError) as exc_info:
            await HttpConfigSource(_url(server)).resolve()
        assert exc_info.value.location == _url(server)

    @pytest.mark.asyncio
    async def test_timeout(self, server, endpoint):
        endpoint.delay = 0.5
        source = HttpConfigSource(_url(server), HttpSourceOptions(timeout_ms=50))
        with pytest.raises(ConfigSourceError) as exc_info:
            await source.resolve()
        assert "timed out after 50ms" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_unreachable_host(self, unused_tcp_port):
        source = HttpConfigSource(f"http://127.0.0.1:{unused_tcp_port}/config")
        with pytest.raises(ConfigSourceError) as exc_info:
            await source.resolve()
        assert exc_info.value.source_type == "http"


class TestWatch:

    def test_watch_without_poll_interval(self):
        source = HttpConfigSource("https://config.local/app.json")
        with pytest.raises(SourceNotWatchableError):
            source.watch(lambda data: None)

    @pytest.mark.asyncio
    async def test_polling_delivers_fresh_data(self, server, endpoint):
        source = HttpConfigSource(_url(server), HttpSourceOptions(poll_interval_ms=20))
        assert source.is_watchable()
        updated = asyncio.Event()
        received = []

        def on_change(data):
            received.append(data)
            if data["service"]["name"] == "payments":
                updated.set()

        unsubscribe = source.watch(on_change)
        try:
            endpoint.payload = {"service": {"name": "payments"}}
            await asyncio.wait_for(updated.wait(), timeout=2)
        finally:
            unsubscribe()

        assert received[-1]["service"] == {"name": "payments"}

    @pytest.mark.asyncio
    async def test_subscribers_share_one_timer(self, server):
        source = HttpConfigSource(_url(server), HttpSourceOptions(poll_interval_ms=1000))
        first = source.watch(lambda data: None)
        task = source._poll_task
        second = source.watch(lambda data: None)
        assert source._poll_task is task

        first()
        assert source.is_polling
        second()
        assert not source.is_polling

        await asyncio.sleep(0.01)
        assert task.done()

    @pytest.mark.asyncio
    async def test_poll_errors_keep_timer_running(self, server, endpoint):
        endpoint.status = 500
        source = HttpConfigSource(_url(server), HttpSourceOptions(poll_interval_ms=10))
        received = []
        unsubscribe = source.watch(received.append)
        try:
            await asyncio.sleep(0.1)
            assert received == []
            assert source.is_polling
            assert len(endpoint.requests) >= 2
        finally:
            unsubscribe()
