"""
Tool dispatcher

Routes a tool call to its handler and normalizes every outcome:

- unknown tool name           -> ToolError(METHOD_NOT_FOUND, "Unknown tool: <name>")
- arguments fail validation   -> ToolError(INVALID_PARAMS, "Missing required parameter: ...")
- handler raises ToolError    -> passed through unchanged
- handler raises anything else -> ToolError(INTERNAL_ERROR, "PocketBase error: <message>")
- success                     -> list[TextContent]

Both the stdio server and the HTTP transport call through one dispatcher,
so tool behavior does not depend on the transport.
"""

import logging
from typing import Any, Optional

from mcp import types
from pydantic import ValidationError

from client import PocketBaseClient
from errors import ToolError, internal_error, invalid_params, method_not_found
from handlers import get_handler, list_all_handlers

logger = logging.getLogger(__name__)

# Label for failures that escape a handler's own error wrapping
DISPATCH_ERROR_LABEL = "PocketBase error"


def describe_validation_error(error: ValidationError) -> str:
    """One readable line per invalid argument, named as the caller spelled it."""
    messages = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail.get("loc", ())) or "arguments"
        if detail.get("type") == "missing":
            messages.append(f"Missing required parameter: {location}")
        else:
            messages.append(f"Invalid parameter '{location}': {detail.get('msg')}")
    return "; ".join(messages)


class ToolDispatcher:
    """
    Usage:
        dispatcher = ToolDispatcher(client)
        content = await dispatcher.dispatch("list_records", {"collection": "posts"})
    """

    def __init__(self, client: PocketBaseClient):
        self.client = client

    @property
    def tool_names(self) -> list[str]:
        return list_all_handlers()

    async def dispatch(self, name: str, arguments: Optional[dict[str, Any]] = None) -> list[types.TextContent]:
        handler_info = get_handler(name)
        if not handler_info:
            logger.warning(f"⚠️  Unknown tool requested: {name}")
            raise method_not_found(name)

        handler, args_model = handler_info

        try:
            args = args_model.model_validate(arguments or {})
        except ValidationError as e:
            message = describe_validation_error(e)
            logger.info(f"Rejected {name} call: {message}")
            raise invalid_params(message) from None

        try:
            return await handler(self.client, args)
        except ToolError as e:
            logger.info(f"Tool {name} failed: {e.code_name}: {e.message}")
            raise
        except Exception as e:
            logger.error(f"Error executing tool {name}: {e}", exc_info=True)
            raise internal_error(DISPATCH_ERROR_LABEL, e) from e
