"""Uniform response envelope for MCP tool invocations.

Every tool call produces exactly one text payload. Successful results are
serialized as JSON; failures become a human-readable ``Error: <message>``
string. Nothing is reported through a separate error channel.
"""

import json
import logging
from typing import Any, Awaitable, Callable

from core.exceptions import MCPDBError

logger = logging.getLogger(__name__)


def format_error_response(error: Exception) -> str:
    """Format an exception as envelope text.

    Args:
        error: The exception that occurred

    Returns:
        Error text beginning with ``Error:``
    """
    error_message = error.message if isinstance(error, MCPDBError) else str(error)

    # Failures are part of normal tool output; details only with debug logging
    logger.debug(f"{type(error).__name__}: {error_message}", exc_info=error)

    return f"Error: {error_message}"


def format_success_response(data: Any) -> str:
    """Format a handler result as envelope text.

    Args:
        data: The response data

    Returns:
        JSON text for dicts and lists, the value itself for strings
    """
    if isinstance(data, str):
        return data

    if isinstance(data, (dict, list)):
        # default=str covers datetime, Decimal and UUID driver values
        return json.dumps(data, indent=2, ensure_ascii=False, default=str)

    return str(data)


async def safe_execute_async(func: Callable[[], Awaitable[Any]]) -> str:
    """Safely execute an async function and return envelope text.

    Args:
        func: Async function to execute

    Returns:
        Formatted success or error text
    """
    try:
        result = await func()
        return format_success_response(result)
    except Exception as e:
        return format_error_response(e)
