"""
Tool error envelope

Every failed tool call reaches the caller as a ToolError carrying one of three
JSON-RPC codes:

- INVALID_PARAMS: the caller's arguments are wrong (fix the input and retry)
- METHOD_NOT_FOUND: the tool name is unknown
- INTERNAL_ERROR: PocketBase or the server failed; message keeps the original text

ToolError subclasses the MCP SDK's McpError so the SDK and the HTTP transport
can both surface the code unchanged.
"""

from mcp.shared.exceptions import McpError
from mcp.types import ErrorData, INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND

ERROR_CODE_NAMES = {
    INVALID_PARAMS: "InvalidParams",
    METHOD_NOT_FOUND: "MethodNotFound",
    INTERNAL_ERROR: "InternalError",
}


class ToolError(McpError):
    """Structured tool failure: {code, message}."""

    def __init__(self, code: int, message: str):
        super().__init__(ErrorData(code=code, message=message))

    @property
    def code(self) -> int:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def code_name(self) -> str:
        return ERROR_CODE_NAMES.get(self.code, str(self.code))

    def __repr__(self) -> str:
        return f"ToolError({self.code_name}, {self.message!r})"


def invalid_params(message: str) -> ToolError:
    return ToolError(INVALID_PARAMS, message)


def method_not_found(tool_name: str) -> ToolError:
    return ToolError(METHOD_NOT_FOUND, f"Unknown tool: {tool_name}")


def internal_error(label: str, error: BaseException) -> ToolError:
    """Wrap a downstream failure as '<label>: <original message>'."""
    return ToolError(INTERNAL_ERROR, f"{label}: {error}")


__all__ = [
    'ToolError',
    'invalid_params',
    'method_not_found',
    'internal_error',
    'INVALID_PARAMS',
    'METHOD_NOT_FOUND',
    'INTERNAL_ERROR',
]
