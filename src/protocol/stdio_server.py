"""STDIO transport MCP server."""

import asyncio
import logging
import os
import signal
import sys
from typing import Optional

from mcp.server.stdio import stdio_server

from core.config import AppConfig
from database.manager import BackendManager
from protocol.base_server import BaseMCPServer
from tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class StdioMCPServer(BaseMCPServer):
    """MCP server using STDIO transport."""

    SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)

    def __init__(
        self,
        manager: BackendManager,
        registry: ToolRegistry,
        server_name: str,
        exit_on_signal: bool = True
    ):
        """Initialize STDIO MCP server.

        Args:
            manager: BackendManager instance
            registry: ToolRegistry instance
            server_name: Name of the MCP server
            exit_on_signal: Terminate the process after signal-triggered shutdown
        """
        super().__init__(manager, registry, server_name)
        self.exit_on_signal = exit_on_signal
        self._signal_task: Optional[asyncio.Future] = None

    async def run(self):
        """Run the STDIO MCP server until the client disconnects or a signal arrives."""
        logger.info(f"Starting STDIO MCP server {self.server_name}")
        self._install_signal_handlers()
        try:
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options()
                )
        finally:
            self._remove_signal_handlers()
            await self.shutdown()

    def _install_signal_handlers(self):
        loop = asyncio.get_running_loop()
        for sig in self.SHUTDOWN_SIGNALS:
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
            except (NotImplementedError, RuntimeError):
                # Loops without Unix signal support (e.g. Windows Proactor)
                logger.debug(f"Signal handler for {sig.name} not supported on this event loop")

    def _remove_signal_handlers(self):
        loop = asyncio.get_running_loop()
        for sig in self.SHUTDOWN_SIGNALS:
            try:
                loop.remove_signal_handler(sig)
            except (NotImplementedError, RuntimeError):
                pass

    def _on_signal(self, sig: signal.Signals):
        if self._signal_task is not None:
            return
        logger.info(f"Received {sig.name}")
        self._signal_task = asyncio.ensure_future(self._shutdown_and_exit())

    async def _shutdown_and_exit(self):
        await self.shutdown()
        if self.exit_on_signal:
            # The stdin reader blocks in a worker thread, so unwinding the
            # transport could wait for input that never comes
            sys.stdout.flush()
            sys.stderr.flush()
            os._exit(0)


async def run_stdio_server(app_config: Optional[AppConfig] = None):
    """Run STDIO MCP server with given configuration.

    Args:
        app_config: App configuration (optional, defaults to env)

    Raises:
        ConfigurationError: If the databases configuration is invalid
    """
    app_config = app_config or AppConfig.from_env()

    # Configuration errors surface here, before any tool is advertised
    manager = BackendManager.from_app_config(app_config)
    registry = ToolRegistry(app_config.family, app_config.get_tool_prefix())

    server = StdioMCPServer(manager, registry, app_config.get_server_name())
    await server.run()
