"""Lazy per-backend connection cache."""

import asyncio
import logging
from typing import Callable, Dict, List

from core.config import BackendConfig
from core.exceptions import BackendOperationError
from database.connectors import BackendConnector, driver_error_message
from database.registry import BackendRegistry

logger = logging.getLogger(__name__)

ConnectorFactory = Callable[[BackendConfig], BackendConnector]


class ConnectionCache:
    """
    Holds at most one live connector per registered backend name.

    Connectors are created on first resolution and reused afterwards without
    liveness checks; a broken connection surfaces on the caller's next
    operation. Check-then-create runs under a per-name lock because event
    loop tasks interleave while a connector is opening.
    """

    def __init__(self, registry: BackendRegistry, connector_factory: ConnectorFactory):
        self.registry = registry
        self.connector_factory = connector_factory
        self._connectors: Dict[str, BackendConnector] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _lock_for(self, name: str) -> asyncio.Lock:
        lock = self._locks.get(name)
        if lock is None:
            lock = self._locks[name] = asyncio.Lock()
        return lock

    async def resolve(self, name: str) -> BackendConnector:
        """
        Return the live connector for `name`, opening one if needed.

        Raises:
            UnknownBackendError: If `name` is not registered (nothing is built)
            BackendOperationError: If the connector fails to open or the
                cache has been closed
        """
        connector = self._connectors.get(name)
        if connector is not None:
            return connector

        config = self.registry.get(name)
        self._ensure_open()

        async with self._lock_for(name):
            connector = self._connectors.get(name)
            if connector is not None:
                return connector

            connector = self.connector_factory(config)
            await connector.open()

            # close() may have run while open() was awaiting
            if self._closed:
                await self._discard(name, connector)
                self._ensure_open()

            self._connectors[name] = connector
            logger.debug(f"Connected to database '{name}' ({config.kind})")
            return connector

    async def disconnect(self, name: str):
        """Close and forget the connector for `name`; no-op if absent.

        The entry is removed before closing, so a failed close still leaves
        the cache without a handle for `name`.
        """
        connector = self._connectors.pop(name, None)
        if connector is None:
            return

        try:
            await connector.close()
        except Exception as e:
            logger.warning(f"Error closing connection to '{name}': {e}")
            raise BackendOperationError(driver_error_message(e), {"database": name}) from e
        logger.debug(f"Disconnected from database '{name}'")

    async def disconnect_all(self):
        """Disconnect every cached connector concurrently, best effort."""
        names = list(self._connectors.keys())
        if not names:
            return

        results = await asyncio.gather(
            *(self.disconnect(name) for name in names),
            return_exceptions=True
        )
        failed = [name for name, result in zip(names, results) if isinstance(result, BaseException)]
        if failed:
            logger.warning(f"Failed to cleanly disconnect: {', '.join(failed)}")
        logger.debug(f"Disconnected {len(names) - len(failed)}/{len(names)} database(s)")

    async def close(self):
        """Refuse new connections, then disconnect everything cached.

        A connector that finishes opening after this point is closed
        instead of being stored.
        """
        self._closed = True
        await self.disconnect_all()

    def _ensure_open(self):
        if self._closed:
            raise BackendOperationError("Connection cache is closed")

    async def _discard(self, name: str, connector: BackendConnector):
        try:
            await connector.close()
        except Exception as e:
            logger.warning(f"Error closing connection to '{name}' opened during shutdown: {e}")

    def is_connected(self, name: str) -> bool:
        return name in self._connectors

    def connected_names(self) -> List[str]:
        return list(self._connectors.keys())

    def __len__(self) -> int:
        return len(self._connectors)
