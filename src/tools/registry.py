"""Tool registry for routing MCP tool calls to handlers."""

import logging
from typing import Any, Dict, List, Optional, Tuple
from mcp.types import Tool

from core.error_handling import safe_execute_async
from core.exceptions import UnknownToolError
from tools.base import ToolHandler
from tools.definitions import get_all_tools, make_tool_name
from tools.handlers import (
    SqlQueryHandler,
    SqlSchemaHandler,
    CosmosQueryHandler,
    CosmosContainerHandler,
    ConnectionHandler,
    DatabasesHandler,
)

logger = logging.getLogger(__name__)


HANDLER_CLASSES = [
    SqlQueryHandler,
    SqlSchemaHandler,
    CosmosQueryHandler,
    CosmosContainerHandler,
    ConnectionHandler,
    DatabasesHandler,
]


class ToolRegistry:
    """
    Central registry for MCP tool handlers of one backend family.

    Routes tool calls to handlers by name. ``dispatch`` is the error boundary:
    whatever happens while routing or handling a call, the caller receives
    a single text payload and never an exception.
    """

    def __init__(self, family: str, prefix: Optional[str] = None):
        self.family = family
        self.prefix = prefix or family
        self.tools: List[Tool] = get_all_tools(family, self.prefix)
        self.handlers: Dict[str, Tuple[ToolHandler, str]] = {}
        self._register_handlers()

    def _register_handlers(self):
        """Register the handlers serving this family."""
        handler_count = 0
        for handler_class in HANDLER_CLASSES:
            if self.family not in handler_class.families:
                continue
            handler = handler_class(self.prefix, self.family)
            handler_count += 1
            for suffix in handler.tool_suffixes:
                tool_name = make_tool_name(self.prefix, suffix)
                self.handlers[tool_name] = (handler, suffix)
                logger.debug(f"Registered {tool_name} -> {handler_class.__name__}")

        declared = {tool.name for tool in self.tools}
        unhandled = declared - set(self.handlers)
        if unhandled:
            raise RuntimeError(f"Tools declared without a handler: {', '.join(sorted(unhandled))}")

        logger.debug(f"Registered {len(self.handlers)} MCP tools across {handler_count} handlers")

    def list_tools(self) -> List[Tool]:
        return list(self.tools)

    def is_tool_registered(self, tool_name: str) -> bool:
        """Check if a tool has a registered handler."""
        return tool_name in self.handlers

    async def invoke(self, tool_name: str, arguments: Optional[Dict[str, Any]], manager: Any) -> Any:
        """
        Route a tool call to its handler and return the raw result.

        Raises:
            UnknownToolError: If no handler is registered for `tool_name`
        """
        entry = self.handlers.get(tool_name)
        if entry is None:
            raise UnknownToolError(tool_name)

        handler, suffix = entry
        logger.debug(f"Routing {tool_name} to {handler.__class__.__name__}")
        return await handler.handle(suffix, arguments or {}, manager)

    async def dispatch(self, tool_name: str, arguments: Optional[Dict[str, Any]], manager: Any) -> str:
        """
        Invoke a tool and render the outcome as envelope text.

        Args:
            tool_name: Tool name from the MCP request
            arguments: Tool arguments from the MCP request
            manager: BackendManager instance

        Returns:
            JSON text on success, ``Error: <message>`` on any failure
        """
        return await safe_execute_async(lambda: self.invoke(tool_name, arguments, manager))
