"""
Connection cache unit tests

Lazy creation, reuse, disconnect and best-effort teardown.
"""

import asyncio
from unittest.mock import Mock

import pytest

from core.config import GatewayConfig
from core.exceptions import BackendOperationError, UnknownBackendError
from database.connection_cache import ConnectionCache
from database.registry import BackendRegistry


@pytest.fixture
def registry(sql_config_data):
    return BackendRegistry(GatewayConfig.from_dict(sql_config_data, "sql").databases)


@pytest.fixture
def cache(registry, connector_factory):
    return ConnectionCache(registry, connector_factory)


class TestResolve:
    """resolve() tests"""

    @pytest.mark.asyncio
    async def test_second_resolve_is_cached(self, cache, connector_factory):
        """✅ Second resolve reuses the handle, no new connection"""
        first = await cache.resolve("A")
        second = await cache.resolve("A")

        assert first is second
        assert len(connector_factory.created) == 1
        first.open.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_each_name_gets_its_own_handle(self, cache, connector_factory):
        a = await cache.resolve("A")
        b = await cache.resolve("B")

        assert a is not b
        assert a.config.name == "A"
        assert b.config.name == "B"
        assert cache.connected_names() == ["A", "B"]

    @pytest.mark.asyncio
    async def test_unknown_name_never_constructs(self, registry):
        """❌ Unregistered name raises before building a connector"""
        factory = Mock()
        cache = ConnectionCache(registry, factory)

        with pytest.raises(UnknownBackendError):
            await cache.resolve("Z")

        factory.assert_not_called()
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_failed_open_is_not_cached(self, cache, connector_factory):
        """❌ A connector whose open fails is not stored"""
        original_factory = cache.connector_factory

        def failing_factory(config):
            connector = original_factory(config)
            connector.open.side_effect = BackendOperationError("Login failed")
            return connector

        cache.connector_factory = failing_factory

        with pytest.raises(BackendOperationError, match="Login failed"):
            await cache.resolve("A")

        assert not cache.is_connected("A")

    @pytest.mark.asyncio
    async def test_concurrent_resolve_creates_one_handle(self, cache, connector_factory):
        """✅ Concurrent resolves of one name share a single handle"""
        original_factory = cache.connector_factory

        def slow_factory(config):
            connector = original_factory(config)

            async def slow_open():
                await asyncio.sleep(0.01)

            connector.open.side_effect = slow_open
            return connector

        cache.connector_factory = slow_factory

        handles = await asyncio.gather(*(cache.resolve("A") for _ in range(5)))

        assert len(connector_factory.created) == 1
        assert all(handle is handles[0] for handle in handles)


class TestDisconnect:
    """disconnect() / disconnect_all() tests"""

    @pytest.mark.asyncio
    async def test_disconnect_closes_and_removes(self, cache):
        handle = await cache.resolve("A")

        await cache.disconnect("A")

        handle.close.assert_awaited_once()
        assert not cache.is_connected("A")

    @pytest.mark.asyncio
    async def test_disconnect_absent_is_noop(self, cache):
        """✅ Disconnecting an unopened name does nothing"""
        await cache.disconnect("A")
        await cache.disconnect("Z")

        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_disconnect_failure_still_removes(self, cache):
        """❌ Close failure is raised but the entry is gone"""
        handle = await cache.resolve("A")
        handle.close.side_effect = RuntimeError("socket closed")

        with pytest.raises(BackendOperationError, match="socket closed"):
            await cache.disconnect("A")

        assert not cache.is_connected("A")

    @pytest.mark.asyncio
    async def test_disconnect_all_survives_failure(self, cache, connector_factory):
        """✅ One failing close does not stop the others and the cache empties"""
        a = await cache.resolve("A")
        b = await cache.resolve("B")
        a.close.side_effect = RuntimeError("boom")

        await cache.disconnect_all()

        a.close.assert_awaited_once()
        b.close.assert_awaited_once()
        assert len(cache) == 0

        fresh = await cache.resolve("A")
        assert fresh is not a
        assert len(connector_factory.created) == 3

    @pytest.mark.asyncio
    async def test_disconnect_all_empty(self, cache):
        await cache.disconnect_all()
        assert cache.connected_names() == []


class TestClose:
    """close() tests"""

    @pytest.mark.asyncio
    async def test_close_refuses_new_connections(self, cache, connector_factory):
        await cache.resolve("A")

        await cache.close()

        assert cache.closed
        assert len(cache) == 0
        with pytest.raises(BackendOperationError, match="closed"):
            await cache.resolve("B")
        assert len(connector_factory.created) == 1

    @pytest.mark.asyncio
    async def test_connector_opening_during_close_is_discarded(self, cache, connector_factory):
        """❌ A handle that finishes opening after close() is closed, not cached"""
        opening = asyncio.Event()
        release = asyncio.Event()
        original_factory = cache.connector_factory

        def slow_factory(config):
            connector = original_factory(config)

            async def slow_open():
                opening.set()
                await release.wait()

            connector.open.side_effect = slow_open
            return connector

        cache.connector_factory = slow_factory

        pending = asyncio.ensure_future(cache.resolve("A"))
        await opening.wait()
        await cache.close()
        release.set()

        with pytest.raises(BackendOperationError, match="closed"):
            await pending

        assert not cache.is_connected("A")
        connector_factory.created[0].close.assert_awaited_once()
