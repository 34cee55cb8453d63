"""Core modules for MCP Multi-Backend Database Gateway."""

from .exceptions import (
    MCPDBError,
    ConfigurationError,
    UnknownBackendError,
    UnknownToolError,
    NoBackendsConfiguredError,
    NotAReadQueryError,
    BackendOperationError,
    ToolExecutionError
)

__all__ = [
    "MCPDBError",
    "ConfigurationError",
    "UnknownBackendError",
    "UnknownToolError",
    "NoBackendsConfiguredError",
    "NotAReadQueryError",
    "BackendOperationError",
    "ToolExecutionError"
]
