"""Custom exceptions for MCP Multi-Backend Database Gateway."""


class MCPDBError(Exception):
    """Base exception for all MCP database gateway errors."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to dictionary for logging and diagnostics."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ConfigurationError(MCPDBError):
    """Exception raised when the startup configuration is invalid."""
    pass


class UnknownBackendError(MCPDBError):
    """Exception raised when a backend name is not registered."""

    def __init__(self, name: str):
        super().__init__(f"Database '{name}' is not configured", {"database": name})
        self.name = name


class UnknownToolError(MCPDBError):
    """Exception raised when a tool name is not in the catalogue."""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}", {"tool": tool_name})
        self.tool_name = tool_name


class NoBackendsConfiguredError(MCPDBError):
    """Exception raised when no default backend is available."""

    def __init__(self):
        super().__init__("No databases are configured")


class NotAReadQueryError(MCPDBError):
    """Exception raised when a read-only tool receives a non-SELECT statement."""
    pass


class BackendOperationError(MCPDBError):
    """Exception raised when the underlying driver reports a failure."""
    pass


class ToolExecutionError(MCPDBError):
    """Exception raised when tool execution fails."""
    pass
