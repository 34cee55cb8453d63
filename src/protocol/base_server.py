"""Base MCP server - Transport-agnostic MCP protocol implementation.

This module wires the tool registry and the backend manager into an MCP SDK
server, independent of the transport that carries the protocol.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from mcp.server import Server
from mcp.types import TextContent, Tool

from core.error_handling import format_error_response
from core.exceptions import MCPDBError
from database.manager import BackendManager
from tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

SERVER_VERSION = "2.0.0"


class BaseMCPServer:
    """Base MCP server providing core protocol functionality.

    Owns the shutdown sequence: once ``shutdown()`` starts, new tool calls
    are refused and every live backend connection is closed exactly once.
    """

    def __init__(self, manager: BackendManager, registry: ToolRegistry, server_name: str):
        """Initialize base MCP server.

        Args:
            manager: BackendManager owning registry, cache and default backend
            registry: ToolRegistry for the manager's backend family
            server_name: Name of the MCP server
        """
        self.manager = manager
        self.registry = registry
        self.server_name = server_name
        self.server = Server(server_name, version=SERVER_VERSION)
        self.accepting = True
        self._shutdown_task: Optional[asyncio.Future] = None
        self._setup_handlers()
        logger.debug(f"Initialized {server_name} MCP server")

    def _setup_handlers(self):
        """Setup MCP protocol handlers."""

        @self.server.list_tools()
        async def list_tools() -> List[Tool]:
            """List all available tools."""
            return self.registry.list_tools()

        # Input schemas are advertised only; handlers check required arguments
        @self.server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
            """Handle tool execution."""
            return await self.handle_call(name, arguments)

        @self.server.list_prompts()
        async def list_prompts():
            """List available prompts (currently none)."""
            return []

        @self.server.list_resources()
        async def list_resources():
            """List available resources (currently none)."""
            return []

    async def handle_call(self, name: str, arguments: Optional[Dict[str, Any]]) -> List[TextContent]:
        """Run one tool call and wrap the envelope text as MCP content."""
        if not self.accepting:
            text = format_error_response(MCPDBError("Server is shutting down"))
        else:
            text = await self.registry.dispatch(name, arguments or {}, self.manager)
        return [TextContent(type="text", text=text)]

    async def shutdown(self):
        """Stop accepting calls and close all backend connections."""
        self.accepting = False
        if self._shutdown_task is None:
            self._shutdown_task = asyncio.ensure_future(self._teardown())
        await self._shutdown_task

    async def _teardown(self):
        logger.info(f"Shutting down {self.server_name}...")
        try:
            await self.manager.close()
        except Exception as e:
            logger.warning(f"Error closing database connections: {e}")
        logger.info("Graceful shutdown completed")
