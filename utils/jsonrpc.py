"""
JSON-RPC 2.0 helpers for the HTTP transport.

Handles:
- Request/notification validation
- Error code constants (shared with errors.ToolError)
- Response formatting
"""

from typing import Any, Optional

from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST, METHOD_NOT_FOUND, PARSE_ERROR

JSONRPC_VERSION = "2.0"

# MCP protocol revisions accepted in the MCP-Protocol-Version header
SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05", "2025-03-26", "2025-06-18")
DEFAULT_PROTOCOL_VERSION = "2024-11-05"


class JsonRpcError:
    """Standard JSON-RPC 2.0 error codes"""
    PARSE_ERROR = PARSE_ERROR
    INVALID_REQUEST = INVALID_REQUEST
    METHOD_NOT_FOUND = METHOD_NOT_FOUND
    INVALID_PARAMS = INVALID_PARAMS
    INTERNAL_ERROR = INTERNAL_ERROR


def is_valid_jsonrpc(data: Any) -> bool:
    """
    True for a JSON-RPC 2.0 request or notification:
    an object with jsonrpc="2.0" and a string method.
    """
    if not isinstance(data, dict):
        return False
    if data.get("jsonrpc") != JSONRPC_VERSION:
        return False
    return isinstance(data.get("method"), str)


def is_notification(data: dict) -> bool:
    """Notifications carry no "id" and get no response."""
    return "id" not in data


def create_success_response(request_id: Any, result: Any) -> dict:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "result": result
    }


def create_error_response(request_id: Any, code: int, message: str, data: Any = None) -> dict:
    """
    Create a JSON-RPC error response.

    Args:
        request_id: ID from original request (None when it could not be read)
        code: Error code
        message: Error message
        data: Optional additional error data
    """
    error = {
        "code": code,
        "message": message
    }

    if data is not None:
        error["data"] = data

    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": error
    }


def validate_mcp_protocol_version(version: Optional[str]) -> bool:
    """Check the MCP-Protocol-Version header against the supported revisions."""
    if not version:
        return False
    return version in SUPPORTED_PROTOCOL_VERSIONS


def negotiate_protocol_version(requested: Optional[str]) -> str:
    """Echo the client's protocol version when supported, else offer the default."""
    if requested in SUPPORTED_PROTOCOL_VERSIONS:
        return requested
    return DEFAULT_PROTOCOL_VERSION
