"""Relational schema introspection handler."""

from typing import Any, Dict, List

from tools.base import ToolHandler
from tools.definitions import TOOL_TABLES, TOOL_DESCRIBE


class SqlSchemaHandler(ToolHandler):
    """Handler for table listing and table description."""

    families = ("sql",)

    @property
    def tool_suffixes(self) -> List[str]:
        return [TOOL_TABLES, TOOL_DESCRIBE]

    async def handle(self, tool: str, arguments: Dict[str, Any], manager: Any) -> Dict[str, Any]:
        if tool == TOOL_DESCRIBE:
            # Validate arguments before connecting
            self._require_arguments(arguments, "table")
            name, connector = await manager.get_connector(self._database_argument(arguments))
            table = arguments["table"]
            # An unknown table yields an empty column list, not an error
            columns = await connector.describe_table(table)
            return {
                "database": name,
                "table": table,
                "columns": columns
            }

        name, connector = await manager.get_connector(self._database_argument(arguments))
        return {
            "database": name,
            "tables": await connector.list_tables()
        }
