"""MCP tools package for the Multi-Backend Database Gateway."""

from tools.base import ToolHandler
from tools.registry import ToolRegistry
from tools.definitions import get_all_tools, make_tool_name
from tools.validators import SQLValidator

__all__ = [
    'ToolHandler',
    'ToolRegistry',
    'get_all_tools',
    'make_tool_name',
    'SQLValidator',
]
