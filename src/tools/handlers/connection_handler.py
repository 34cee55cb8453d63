"""Connection status, testing and disconnect handler."""

import logging
from typing import Any, Dict, List

from tools.base import ToolHandler
from tools.definitions import (
    TOOL_CONNECTION_INFO, TOOL_DATABASE_INFO, TOOL_TEST_CONNECTION, TOOL_DISCONNECT
)

logger = logging.getLogger(__name__)


class ConnectionHandler(ToolHandler):
    """Handler for per-backend connection management.

    The info tools read only the registry and the cache's membership; they
    never open a connection. ``test_connection`` is the explicit way to
    connect and verify a backend.
    """

    @property
    def tool_suffixes(self) -> List[str]:
        info_tool = TOOL_DATABASE_INFO if self.family == "cosmos" else TOOL_CONNECTION_INFO
        return [info_tool, TOOL_TEST_CONNECTION, TOOL_DISCONNECT]

    async def handle(self, tool: str, arguments: Dict[str, Any], manager: Any) -> Dict[str, Any]:
        database = self._database_argument(arguments)

        if tool == TOOL_TEST_CONNECTION:
            return await self._test_connection(database, manager)
        if tool == TOOL_DISCONNECT:
            name, was_connected = await manager.disconnect(database)
            return {
                "database": name,
                "wasConnected": was_connected,
                "connected": False
            }
        return self._connection_info(database, manager)

    def _connection_info(self, database: Any, manager: Any) -> Dict[str, Any]:
        name, config = manager.get_config(database)
        connected = manager.is_connected(name)

        if self.family == "cosmos":
            return {
                "name": name,
                "endpoint": config.endpoint,
                "database": config.database,
                "type": config.type,
                "connected": connected
            }

        return {
            "database": name,
            "server": config.server,
            "port": config.port,
            "user": config.user,
            "connected": connected
        }

    async def _test_connection(self, database: Any, manager: Any) -> Dict[str, Any]:
        """Open (or reuse) the connection and round-trip to the backend."""
        name, connector = await manager.get_connector(database)
        server_info = await connector.test_connection()

        if self.family == "cosmos":
            return {
                "database": name,
                "connected": True,
                "account": server_info.get("account")
            }

        version = str(server_info.get("server_version", ""))
        return {
            "database": name,
            "connected": True,
            "serverVersion": version[:100] + "..." if len(version) > 100 else version
        }
