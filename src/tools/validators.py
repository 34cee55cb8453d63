"""Input validators for tool arguments."""

from typing import Any

from core.exceptions import NotAReadQueryError


class SQLValidator:
    """Statement-shape check for the read-only query tool.

    Only the leading keyword is inspected; anything beyond that is left to
    the database.
    """

    READ_PREFIX = "select"

    @classmethod
    def is_read_query(cls, query: Any) -> bool:
        """True if the trimmed, lower-cased statement starts with ``select``."""
        if not isinstance(query, str):
            return False
        return query.strip().lower().startswith(cls.READ_PREFIX)

    @classmethod
    def ensure_read_query(cls, query: Any, execute_tool: str = "sql_execute"):
        """
        Raise NotAReadQueryError unless `query` is a SELECT statement.

        Args:
            query: SQL text from the caller
            execute_tool: Name of the unrestricted tool to point the caller to
        """
        if not cls.is_read_query(query):
            raise NotAReadQueryError(
                f"Only SELECT queries are allowed with this tool. Use {execute_tool} for other commands.",
                {"query": str(query)[:200]}
            )
