"""Cosmos DB query and point-read handler."""

import logging
from typing import Any, Dict, List

from tools.base import ToolHandler
from tools.definitions import TOOL_QUERY, TOOL_GET_ITEM

logger = logging.getLogger(__name__)


class CosmosQueryHandler(ToolHandler):
    """Handler for container queries and item reads."""

    families = ("cosmos",)

    @property
    def tool_suffixes(self) -> List[str]:
        return [TOOL_QUERY, TOOL_GET_ITEM]

    async def handle(self, tool: str, arguments: Dict[str, Any], manager: Any) -> Dict[str, Any]:
        if tool == TOOL_GET_ITEM:
            return await self._get_item(arguments, manager)
        return await self._query(arguments, manager)

    async def _query(self, arguments: Dict[str, Any], manager: Any) -> Dict[str, Any]:
        """Run the caller's query text verbatim against one container."""
        self._require_arguments(arguments, "query", "container")
        query = arguments["query"]
        container = arguments["container"]

        name, connector = await manager.get_connector(self._database_argument(arguments))
        logger.debug(f"Querying '{name}/{container}': {str(query)[:200]}")
        results = await connector.query_items(container, query)

        return {
            "database": name,
            "container": container,
            "query": query,
            "resultCount": len(results),
            "results": results
        }

    async def _get_item(self, arguments: Dict[str, Any], manager: Any) -> Dict[str, Any]:
        """Point-read one item; a miss propagates the driver's error."""
        self._require_arguments(arguments, "itemId", "partitionKey", "container")
        item_id = arguments["itemId"]
        partition_key = arguments["partitionKey"]
        container = arguments["container"]

        name, connector = await manager.get_connector(self._database_argument(arguments))
        item = await connector.read_item(container, item_id, partition_key)

        return {
            "database": name,
            "container": container,
            "itemId": item_id,
            "partitionKey": partition_key,
            "item": item
        }
