"""Relational query and command execution handler."""

import logging
from typing import Any, Dict, List

from tools.base import ToolHandler
from tools.definitions import make_tool_name, TOOL_QUERY, TOOL_EXECUTE
from tools.validators import SQLValidator

logger = logging.getLogger(__name__)


class SqlQueryHandler(ToolHandler):
    """Handler for read-only queries and unrestricted commands."""

    families = ("sql",)

    @property
    def tool_suffixes(self) -> List[str]:
        return [TOOL_QUERY, TOOL_EXECUTE]

    async def handle(self, tool: str, arguments: Dict[str, Any], manager: Any) -> Dict[str, Any]:
        self._require_arguments(arguments, "query")
        query = arguments["query"]

        if tool == TOOL_QUERY:
            return await self._query(query, arguments, manager)
        return await self._execute(query, arguments, manager)

    async def _query(self, query: str, arguments: Dict[str, Any], manager: Any) -> Dict[str, Any]:
        """
        Execute a SELECT statement.

        The statement shape is checked before any connection is resolved, so a
        rejected statement never opens a pool.
        """
        SQLValidator.ensure_read_query(query, make_tool_name(self.prefix, TOOL_EXECUTE))

        name, connector = await manager.get_connector(self._database_argument(arguments))
        result = await connector.execute_query(query)
        rows = result["rows"]

        return {
            "database": name,
            "rowCount": len(rows),
            "data": rows
        }

    async def _execute(self, query: str, arguments: Dict[str, Any], manager: Any) -> Dict[str, Any]:
        name, connector = await manager.get_connector(self._database_argument(arguments))
        logger.debug(f"Executing command on '{name}': {str(query)[:200]}")
        result = await connector.execute_command(query)

        return {
            "database": name,
            "rowsAffected": result["rows_affected"],
            "output": {},
            "recordset": result["rows"]
        }
