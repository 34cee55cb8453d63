"""Tool handlers package."""

from tools.handlers.sql_query_handler import SqlQueryHandler
from tools.handlers.sql_schema_handler import SqlSchemaHandler
from tools.handlers.cosmos_query_handler import CosmosQueryHandler
from tools.handlers.cosmos_container_handler import CosmosContainerHandler
from tools.handlers.connection_handler import ConnectionHandler
from tools.handlers.databases_handler import DatabasesHandler

__all__ = [
    'SqlQueryHandler',
    'SqlSchemaHandler',
    'CosmosQueryHandler',
    'CosmosContainerHandler',
    'ConnectionHandler',
    'DatabasesHandler',
]
