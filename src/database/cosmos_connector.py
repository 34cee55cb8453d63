"""Async Cosmos DB connector."""

from typing import Any, Dict, List
import logging

try:
    from azure.cosmos.aio import CosmosClient
except ImportError:
    CosmosClient = None

from core.config import CosmosBackendConfig
from core.exceptions import BackendOperationError
from database.connectors import DocumentStoreConnector, driver_error_message

logger = logging.getLogger(__name__)


class CosmosConnector(DocumentStoreConnector):
    """Cosmos DB connector using the azure-cosmos async client.

    The client is bound to one account endpoint; every operation targets the
    database id named in the backend config.
    """

    def __init__(self, config: CosmosBackendConfig):
        super().__init__(config)
        if CosmosClient is None:
            raise ImportError("azure-cosmos is required for Cosmos DB connections")
        self._client = None
        self._database = None

    async def open(self):
        """Create the Cosmos client and database proxy."""
        try:
            self._client = CosmosClient(self.config.endpoint, credential=self.config.key)
            self._database = self._client.get_database_client(self.config.database)
        except Exception as e:
            logger.debug(f"Failed to create Cosmos client for '{self.name}': {e}")
            raise BackendOperationError(driver_error_message(e)) from e

        self._opened = True
        logger.debug(f"Cosmos client for '{self.name}' created ({self.config.endpoint})")

    def _container(self, container: str):
        self._require_open()
        return self._database.get_container_client(container)

    async def query_items(self, container: str, query: str) -> List[Dict[str, Any]]:
        container_client = self._container(container)
        try:
            return [item async for item in container_client.query_items(query=query)]
        except Exception as e:
            logger.debug(f"Cosmos query error on '{self.name}/{container}': {e}")
            raise BackendOperationError(driver_error_message(e)) from e

    async def read_item(self, container: str, item_id: str, partition_key: Any) -> Dict[str, Any]:
        container_client = self._container(container)
        try:
            return await container_client.read_item(item=item_id, partition_key=partition_key)
        except Exception as e:
            logger.debug(f"Cosmos read error on '{self.name}/{container}': {e}")
            raise BackendOperationError(driver_error_message(e)) from e

    async def list_containers(self) -> List[Dict[str, Any]]:
        self._require_open()
        try:
            return [
                {"id": props.get("id"), "partitionKey": props.get("partitionKey")}
                async for props in self._database.list_containers()
            ]
        except Exception as e:
            logger.debug(f"Cosmos container listing error on '{self.name}': {e}")
            raise BackendOperationError(driver_error_message(e)) from e

    async def test_connection(self) -> Dict[str, Any]:
        """Read the database properties to verify endpoint, key and database id."""
        self._require_open()
        try:
            properties = await self._database.read()
        except Exception as e:
            logger.debug(f"Cosmos connection test failed for '{self.name}': {e}")
            raise BackendOperationError(driver_error_message(e)) from e

        return {
            "account": self.config.endpoint,
            "database": properties.get("id", self.config.database)
        }

    async def close(self):
        """Dispose the Cosmos client."""
        if self._client:
            await self._client.close()
            self._client = None
            self._database = None
            logger.debug(f"Cosmos client for '{self.name}' closed")
        self._opened = False
