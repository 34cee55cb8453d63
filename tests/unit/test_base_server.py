"""
MCP server shell unit tests

Call forwarding, shutdown sequencing and signal handling.
"""

import asyncio
import signal
from unittest.mock import AsyncMock, patch

import pytest
from mcp.types import TextContent

from protocol.base_server import BaseMCPServer
from protocol.stdio_server import StdioMCPServer
from tools.registry import ToolRegistry


@pytest.fixture
def server(sql_manager):
    return BaseMCPServer(sql_manager, ToolRegistry("sql"), "sqlserver-mcp")


class TestBaseMCPServer:
    """BaseMCPServer tests"""

    @pytest.mark.asyncio
    async def test_handle_call_returns_single_text_content(self, server):
        result = await server.handle_call("sql_databases", {})

        assert len(result) == 1
        assert isinstance(result[0], TextContent)
        assert '"totalCount": 2' in result[0].text

    @pytest.mark.asyncio
    async def test_handle_call_error_is_plain_text(self, server):
        """❌ Errors travel in the same text channel"""
        result = await server.handle_call("sql_nope", None)

        assert result[0].text == "Error: Unknown tool: sql_nope"

    @pytest.mark.asyncio
    async def test_shutdown_closes_connections_and_refuses_calls(self, server, connector_factory):
        """✅ After shutdown begins, new calls are refused"""
        await server.handle_call("sql_test_connection", {"database": "A"})
        assert server.manager.is_connected("A")

        await server.shutdown()

        assert server.accepting is False
        assert server.manager.connected_databases() == []
        connector_factory.created[0].close.assert_awaited_once()

        result = await server.handle_call("sql_databases", {})
        assert result[0].text == "Error: Server is shutting down"

    @pytest.mark.asyncio
    async def test_shutdown_closes_connection_still_opening(self, server, connector_factory):
        """✅ A call mid-open when shutdown starts leaves nothing connected"""
        opening = asyncio.Event()
        release = asyncio.Event()
        original_factory = server.manager.cache.connector_factory

        def slow_factory(config):
            connector = original_factory(config)

            async def slow_open():
                opening.set()
                await release.wait()

            connector.open.side_effect = slow_open
            return connector

        server.manager.cache.connector_factory = slow_factory

        call = asyncio.ensure_future(server.handle_call("sql_tables", {}))
        await opening.wait()
        await server.shutdown()
        release.set()
        result = await call

        assert result[0].text.startswith("Error:")
        assert server.manager.connected_databases() == []
        connector_factory.created[0].close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_shutdown_runs_once(self, server):
        server.manager.close = AsyncMock()

        await server.shutdown()
        await server.shutdown()

        server.manager.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_shutdown_tolerates_close_failure(self, server):
        server.manager.close = AsyncMock(side_effect=RuntimeError("network down"))

        await server.shutdown()

        assert server.accepting is False


class TestStdioMCPServer:
    """StdioMCPServer signal handling tests"""

    @pytest.mark.asyncio
    async def test_signal_triggers_shutdown_and_exit(self, sql_manager):
        server = StdioMCPServer(sql_manager, ToolRegistry("sql"), "sqlserver-mcp")
        server.manager.close = AsyncMock()

        with patch("protocol.stdio_server.os._exit") as mock_exit:
            server._on_signal(signal.SIGTERM)
            server._on_signal(signal.SIGINT)  # second signal is ignored
            await server._signal_task

        server.manager.close.assert_awaited_once()
        mock_exit.assert_called_once_with(0)

    @pytest.mark.asyncio
    async def test_signal_without_exit(self, sql_manager):
        server = StdioMCPServer(sql_manager, ToolRegistry("sql"), "sqlserver-mcp", exit_on_signal=False)
        server.manager.close = AsyncMock()

        with patch("protocol.stdio_server.os._exit") as mock_exit:
            server._on_signal(signal.SIGINT)
            await server._signal_task

        assert server.accepting is False
        mock_exit.assert_not_called()
