"""Base classes for MCP tool handlers."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from core.exceptions import ToolExecutionError


class ToolHandler(ABC):
    """Abstract base class for MCP tool handlers.

    A handler serves one or more tool suffixes for the families listed in
    ``families``. It returns plain data; the registry turns results and
    exceptions into the response envelope.
    """

    families: Tuple[str, ...] = ("sql", "cosmos")

    def __init__(self, prefix: str, family: str):
        self.prefix = prefix
        self.family = family

    @property
    @abstractmethod
    def tool_suffixes(self) -> List[str]:
        """Return the tool suffixes this handler supports."""
        pass

    @abstractmethod
    async def handle(self, tool: str, arguments: Dict[str, Any], manager: Any) -> Any:
        """
        Handle tool invocation.

        Args:
            tool: Tool suffix being invoked (e.g. 'query')
            arguments: Tool arguments from the caller
            manager: BackendManager instance

        Returns:
            JSON-serializable result
        """
        pass

    def _require_arguments(self, arguments: Dict[str, Any], *names: str):
        """Raise ToolExecutionError listing any absent or empty arguments."""
        missing = [name for name in names if arguments.get(name) in (None, "")]
        if missing:
            raise ToolExecutionError(
                f"Missing required argument(s): {', '.join(missing)}",
                {"missing": missing}
            )

    @staticmethod
    def _database_argument(arguments: Dict[str, Any]) -> Optional[str]:
        return arguments.get("database") or None
