"""Cosmos DB container listing handler."""

from typing import Any, Dict, List

from tools.base import ToolHandler
from tools.definitions import TOOL_CONTAINERS


class CosmosContainerHandler(ToolHandler):
    """Handler for listing containers of a Cosmos DB database."""

    families = ("cosmos",)

    @property
    def tool_suffixes(self) -> List[str]:
        return [TOOL_CONTAINERS]

    async def handle(self, tool: str, arguments: Dict[str, Any], manager: Any) -> Dict[str, Any]:
        name, connector = await manager.get_connector(self._database_argument(arguments))
        return {
            "database": name,
            "containers": await connector.list_containers()
        }
