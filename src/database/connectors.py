"""Backend connector interface shared by all database families.

A connector is the live handle the connection cache owns for one backend
name. Every connector exposes ``open`` / ``close`` plus the operation
surface of its family; which concrete class is built is decided by the
backend config's family and kind.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import logging

from core.config import AppConfig, BackendConfig, CosmosBackendConfig, SqlBackendConfig
from core.exceptions import BackendOperationError, ConfigurationError

logger = logging.getLogger(__name__)


def driver_error_message(error: Exception) -> str:
    """Best human-readable message a driver exception carries."""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or type(error).__name__


class BackendConnector(ABC):
    """Abstract base class for backend connectors."""

    family: str = ""

    def __init__(self, config: BackendConfig):
        self.config = config
        self._opened = False

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def is_open(self) -> bool:
        return self._opened

    @abstractmethod
    async def open(self):
        """Create the client or pool and perform any handshake."""
        pass

    @abstractmethod
    async def close(self):
        """Dispose the client or pool."""
        pass

    @abstractmethod
    async def test_connection(self) -> Dict[str, Any]:
        """Round-trip to the backend and return server details."""
        pass

    def _require_open(self):
        if not self._opened:
            raise BackendOperationError(f"Connection to '{self.name}' is not open")


class DocumentStoreConnector(BackendConnector):
    """Operation surface of document/graph store backends."""

    family = "cosmos"

    @abstractmethod
    async def query_items(self, container: str, query: str) -> List[Dict[str, Any]]:
        """Run a native query against a container and return all results."""
        pass

    @abstractmethod
    async def read_item(self, container: str, item_id: str, partition_key: Any) -> Dict[str, Any]:
        """Point-read one item by id and partition key."""
        pass

    @abstractmethod
    async def list_containers(self) -> List[Dict[str, Any]]:
        """List containers with their partition key definitions."""
        pass


class RelationalConnector(BackendConnector):
    """Operation surface of relational backends."""

    family = "sql"

    @abstractmethod
    async def execute_query(self, query: str, params: Optional[List[Any]] = None) -> Dict[str, Any]:
        """Execute a query and return ``{"columns", "rows"}``."""
        pass

    @abstractmethod
    async def execute_command(self, command: str, params: Optional[List[Any]] = None) -> Dict[str, Any]:
        """Execute any statement and return ``{"rows_affected", "rows"}``."""
        pass

    @abstractmethod
    async def list_tables(self) -> List[Dict[str, Any]]:
        """List base tables."""
        pass

    @abstractmethod
    async def describe_table(self, table: str) -> List[Dict[str, Any]]:
        """Describe the columns of a table (empty if it does not exist)."""
        pass


def create_backend_connector(
    config: BackendConfig,
    app_config: Optional[AppConfig] = None
) -> BackendConnector:
    """
    Factory function to create a connector for a backend config.

    Args:
        config: Backend configuration from the registry
        app_config: Process settings (pool size, command timeout)

    Returns:
        Unopened BackendConnector instance

    Raises:
        ConfigurationError: If the config type is not supported
    """
    app_config = app_config or AppConfig()

    if isinstance(config, CosmosBackendConfig):
        from database.cosmos_connector import CosmosConnector
        return CosmosConnector(config)

    if isinstance(config, SqlBackendConfig):
        from database.sql_connectors import MSSQLConnector, PostgreSQLConnector
        if config.engine == "postgresql":
            return PostgreSQLConnector(config, app_config.pool_size, app_config.command_timeout)
        return MSSQLConnector(config, app_config.pool_size, app_config.command_timeout)

    raise ConfigurationError(f"Unsupported backend configuration: {type(config).__name__}")
