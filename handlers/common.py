"""
Shared handler helpers: result envelopes and backend error wrapping.
"""

import functools
import json
import logging
from typing import Any, Awaitable, Callable

from mcp import types

from errors import ToolError, internal_error

logger = logging.getLogger(__name__)


def json_text(payload: Any) -> list[types.TextContent]:
    """Wrap a JSON-serializable value as a single indented text block."""
    return [types.TextContent(type="text", text=json.dumps(payload, indent=2, default=str))]


def plain_text(text: str) -> list[types.TextContent]:
    return [types.TextContent(type="text", text=text)]


def success_text(result: Any = True) -> list[types.TextContent]:
    """Boolean acknowledgements from PocketBase become {"success": true}."""
    return json_text({"success": bool(result)})


def backend_errors(label: str) -> Callable:
    """
    Decorator for handlers that talk to PocketBase.

    ToolErrors raised by the handler (argument checks) pass through unchanged.
    Anything else becomes INTERNAL_ERROR "<label>: <original message>".
    """
    def decorator(func: Callable[..., Awaitable[list[types.TextContent]]]):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except ToolError:
                raise
            except Exception as e:
                logger.error(f"❌ {label}: {e}")
                raise internal_error(label, e) from e

        return wrapper

    return decorator
