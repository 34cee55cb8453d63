"""Backend management modules for MCP Multi-Backend Database Gateway."""

from .connection_cache import ConnectionCache
from .connectors import BackendConnector, create_backend_connector
from .manager import BackendManager
from .registry import BackendRegistry, select_default_backend

__all__ = [
    "BackendConnector",
    "BackendManager",
    "BackendRegistry",
    "ConnectionCache",
    "create_backend_connector",
    "select_default_backend"
]
