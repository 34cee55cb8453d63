"""Configured backend listing handler."""

from typing import Any, Dict, List

from tools.base import ToolHandler
from tools.definitions import TOOL_DATABASES


class DatabasesHandler(ToolHandler):
    """Handler listing registered backends; never touches the connection cache."""

    @property
    def tool_suffixes(self) -> List[str]:
        return [TOOL_DATABASES]

    async def handle(self, tool: str, arguments: Dict[str, Any], manager: Any) -> Dict[str, Any]:
        return manager.list_databases()
