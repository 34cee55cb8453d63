"""Backend manager: registry, connection cache and default backend."""

import logging
from functools import partial
from typing import Any, Dict, List, Optional, Tuple

from core.config import AppConfig, BackendConfig, GatewayConfig
from core.exceptions import NoBackendsConfiguredError
from database.connection_cache import ConnectionCache, ConnectorFactory
from database.connectors import BackendConnector, create_backend_connector
from database.registry import BackendRegistry, select_default_backend

logger = logging.getLogger(__name__)


class BackendManager:
    """
    Owns every piece of backend state for one server process.

    The manager is built once at startup from a validated GatewayConfig and
    handed to the tool dispatcher. ``close()`` tears down all live
    connections and is the only shutdown step the server needs.
    """

    def __init__(
        self,
        gateway_config: GatewayConfig,
        app_config: Optional[AppConfig] = None,
        connector_factory: Optional[ConnectorFactory] = None
    ):
        self.gateway_config = gateway_config
        self.app_config = app_config or AppConfig(family=gateway_config.family)
        self.family = gateway_config.family

        self.registry = BackendRegistry(gateway_config.databases)
        self.default_database = select_default_backend(
            self.registry, gateway_config.default_database
        )

        if connector_factory is None:
            connector_factory = partial(create_backend_connector, app_config=self.app_config)
        self.cache = ConnectionCache(self.registry, connector_factory)

        logger.debug(f"Loaded {len(self.registry)} {self.family} database(s): {', '.join(self.registry.list_names())}")
        logger.debug(f"Default database: {self.default_database}")

    @classmethod
    def from_app_config(
        cls,
        app_config: AppConfig,
        connector_factory: Optional[ConnectorFactory] = None
    ) -> "BackendManager":
        """
        Factory method loading the databases config file named by app_config.

        Raises:
            ConfigurationError: If the file is missing or invalid
        """
        config_path = app_config.get_config_path()
        gateway_config = GatewayConfig.from_file(config_path, app_config.family)
        logger.debug(f"Configuration loaded from {config_path}")
        return cls(gateway_config, app_config, connector_factory)

    def resolve_name(self, database: Optional[str] = None) -> str:
        """Explicit backend name, or the default when none is given."""
        name = database or self.default_database
        if not name:
            raise NoBackendsConfiguredError()
        return name

    def get_config(self, database: Optional[str] = None) -> Tuple[str, BackendConfig]:
        """Resolve a backend name and its config without connecting."""
        name = self.resolve_name(database)
        return name, self.registry.get(name)

    async def get_connector(self, database: Optional[str] = None) -> Tuple[str, BackendConnector]:
        """Resolve a backend name and its live connector."""
        name = self.resolve_name(database)
        connector = await self.cache.resolve(name)
        return name, connector

    def is_connected(self, name: str) -> bool:
        return self.cache.is_connected(name)

    def list_databases(self) -> Dict[str, Any]:
        names = self.registry.list_names()
        return {
            "defaultDatabase": self.default_database,
            "availableDatabases": names,
            "totalCount": len(names)
        }

    def connected_databases(self) -> List[str]:
        return self.cache.connected_names()

    async def disconnect(self, database: Optional[str] = None) -> Tuple[str, bool]:
        """Close the connection for one backend.

        Returns:
            (resolved name, whether a connection was open)
        """
        name, _ = self.get_config(database)
        was_connected = self.cache.is_connected(name)
        await self.cache.disconnect(name)
        return name, was_connected

    async def close(self):
        """Close all live connections."""
        await self.cache.close()
        logger.debug("BackendManager closed")
