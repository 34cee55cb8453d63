"""MCP tool definitions for the Multi-Backend Database Gateway."""

from typing import Any, Dict, List, Optional
from mcp.types import Tool


def make_tool_name(prefix: str, suffix: str) -> str:
    """Generate a tool name with the given prefix.

    Args:
        prefix: Tool name prefix (e.g. 'sql' or 'cosmos')
        suffix: The tool suffix (e.g. 'query', 'describe')

    Returns:
        Full tool name (e.g. 'sql_query')
    """
    return f"{prefix}_{suffix}"


# Tool suffix constants (used for matching in handlers)
TOOL_QUERY = "query"
TOOL_EXECUTE = "execute"
TOOL_TABLES = "tables"
TOOL_DESCRIBE = "describe"
TOOL_CONNECTION_INFO = "connection_info"
TOOL_DATABASES = "databases"
TOOL_GET_ITEM = "get_item"
TOOL_CONTAINERS = "containers"
TOOL_DATABASE_INFO = "database_info"
TOOL_TEST_CONNECTION = "test_connection"
TOOL_DISCONNECT = "disconnect"


def _database_property(family: str) -> Dict[str, Any]:
    label = "Cosmos DB" if family == "cosmos" else "database"
    return {
        "type": "string",
        "description": f"Configured {label} name (optional, uses the default if omitted)"
    }


def _schema(properties: Dict[str, Any], required: Optional[List[str]] = None) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": properties,
        "required": required or []
    }


def _sql_tools(prefix: str) -> List[Tool]:
    database = _database_property("sql")
    return [
        Tool(
            name=make_tool_name(prefix, TOOL_QUERY),
            description=(
                "Execute a SELECT query on the selected database and return the rows. "
                f"READ-ONLY: statements not starting with SELECT are rejected; use {prefix}_{TOOL_EXECUTE} for other commands."
            ),
            inputSchema=_schema({
                "query": {"type": "string", "description": "The SELECT SQL query to execute"},
                "database": database
            }, ["query"])
        ),
        Tool(
            name=make_tool_name(prefix, TOOL_EXECUTE),
            description="Execute any SQL command (INSERT, UPDATE, DELETE, CREATE, etc.) on the selected database",
            inputSchema=_schema({
                "query": {"type": "string", "description": "The SQL command to execute"},
                "database": database
            }, ["query"])
        ),
        Tool(
            name=make_tool_name(prefix, TOOL_TABLES),
            description="List all base tables in the selected database",
            inputSchema=_schema({"database": database})
        ),
        Tool(
            name=make_tool_name(prefix, TOOL_DESCRIBE),
            description="Describe the columns of a table in the selected database",
            inputSchema=_schema({
                "table": {"type": "string", "description": "Name of the table to describe"},
                "database": database
            }, ["table"])
        ),
        Tool(
            name=make_tool_name(prefix, TOOL_CONNECTION_INFO),
            description="Show connection settings and status for a configured database (does not connect)",
            inputSchema=_schema({"database": database})
        ),
        Tool(
            name=make_tool_name(prefix, TOOL_DATABASES),
            description="List all configured databases and the default one",
            inputSchema=_schema({})
        ),
        Tool(
            name=make_tool_name(prefix, TOOL_TEST_CONNECTION),
            description="Connect to a configured database and report the server version",
            inputSchema=_schema({"database": database})
        ),
        Tool(
            name=make_tool_name(prefix, TOOL_DISCONNECT),
            description="Close the open connection pool of a configured database",
            inputSchema=_schema({"database": database})
        ),
    ]


def _cosmos_tools(prefix: str) -> List[Tool]:
    database = _database_property("cosmos")
    container = {"type": "string", "description": "Name of the container/collection"}
    return [
        Tool(
            name=make_tool_name(prefix, TOOL_QUERY),
            description="Execute a query in Cosmos DB (SQL API), e.g. SELECT * FROM c WHERE c.type = 'user'",
            inputSchema=_schema({
                "query": {"type": "string", "description": "Query text, sent to Cosmos DB unchanged"},
                "database": database,
                "container": container
            }, ["query", "container"])
        ),
        Tool(
            name=make_tool_name(prefix, TOOL_GET_ITEM),
            description="Read a single item by id and partition key",
            inputSchema=_schema({
                "itemId": {"type": "string", "description": "ID of the item to read"},
                "partitionKey": {"type": "string", "description": "Partition key value of the item"},
                "container": container,
                "database": database
            }, ["itemId", "partitionKey", "container"])
        ),
        Tool(
            name=make_tool_name(prefix, TOOL_CONTAINERS),
            description="List all containers/collections in the Cosmos DB database",
            inputSchema=_schema({"database": database})
        ),
        Tool(
            name=make_tool_name(prefix, TOOL_DATABASE_INFO),
            description="Show settings and status of a configured Cosmos DB database (does not connect)",
            inputSchema=_schema({"database": database})
        ),
        Tool(
            name=make_tool_name(prefix, TOOL_DATABASES),
            description="List all configured Cosmos DB databases and the default one",
            inputSchema=_schema({})
        ),
        Tool(
            name=make_tool_name(prefix, TOOL_TEST_CONNECTION),
            description="Connect to a configured Cosmos DB database and verify it can be read",
            inputSchema=_schema({"database": database})
        ),
        Tool(
            name=make_tool_name(prefix, TOOL_DISCONNECT),
            description="Dispose the open client of a configured Cosmos DB database",
            inputSchema=_schema({"database": database})
        ),
    ]


def get_all_tools(family: str, prefix: Optional[str] = None) -> List[Tool]:
    """Generate all MCP tool definitions for a backend family.

    Args:
        family: 'sql' or 'cosmos'
        prefix: Tool name prefix, defaults to the family name

    Returns:
        List of Tool objects with prefixed names
    """
    prefix = prefix or family
    if family == "cosmos":
        return _cosmos_tools(prefix)
    return _sql_tools(prefix)
