"""
Streamable HTTP transport for MCP (Model Context Protocol).

Implements the MCP Streamable HTTP transport:
- Single /mcp endpoint for all JSON-RPC communication
- POST /mcp: accepts JSON-RPC requests, responds with JSON
- GET /mcp: optional persistent SSE stream for server notifications
- /healthz: health check endpoint (separate from /mcp)

Tool calls go through the same ToolDispatcher as the stdio server. A
ToolError becomes a JSON-RPC error whose code is the ToolError's code.
"""

import asyncio
import json
import logging
from typing import Optional

from fastapi import FastAPI, Request, Response, Header
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.status import HTTP_202_ACCEPTED, HTTP_400_BAD_REQUEST, HTTP_503_SERVICE_UNAVAILABLE
import uvicorn

from client import PocketBaseClient
from config import PocketBaseConfig
from dispatcher import ToolDispatcher
from errors import ToolError
from utils.jsonrpc import (
    is_valid_jsonrpc, is_notification,
    create_success_response, create_error_response,
    validate_mcp_protocol_version, negotiate_protocol_version, JsonRpcError
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SERVER_INFO = {"name": "pocketbase-mcp-server", "version": "0.1.0"}

# Global state (initialized at startup, or injected by tests)
client: Optional[PocketBaseClient] = None
dispatcher: Optional[ToolDispatcher] = None
app = FastAPI(title="PocketBase MCP Server - Streamable HTTP")

# Add CORS middleware to handle OPTIONS preflight requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["MCP-Protocol-Version"],
)


def set_dispatcher(new_dispatcher: Optional[ToolDispatcher]):
    """Install the dispatcher used for tools/call."""
    global dispatcher
    dispatcher = new_dispatcher


def get_tools_list() -> list[dict]:
    """Tool catalog as JSON-serializable dicts"""
    from tools import get_core_tool_catalog
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "inputSchema": tool.inputSchema
        }
        for tool in get_core_tool_catalog()
    ]


async def handle_mcp_request(request_data: dict) -> Optional[dict]:
    """
    Handle a single MCP JSON-RPC request.
    Routes to appropriate handler based on method.

    Returns JSON-RPC response dict, or None for notifications.
    """
    method = request_data.get("method")
    params = request_data.get("params") or {}
    request_id = request_data.get("id")

    try:
        if method == "initialize":
            result = {
                "protocolVersion": negotiate_protocol_version(params.get("protocolVersion")),
                "capabilities": {
                    "tools": {}
                },
                "serverInfo": SERVER_INFO
            }
            return create_success_response(request_id, result)

        elif method == "ping":
            return create_success_response(request_id, {})

        elif method == "tools/list":
            return create_success_response(request_id, {"tools": get_tools_list()})

        elif method == "tools/call":
            tool_name = params.get("name")
            tool_args = params.get("arguments") or {}

            if not tool_name:
                return create_error_response(
                    request_id, JsonRpcError.INVALID_PARAMS, "Missing tool name"
                )

            if dispatcher is None:
                return create_error_response(
                    request_id, JsonRpcError.INTERNAL_ERROR, "Server not initialized"
                )

            logger.info(f"[TOOL_CALL] {tool_name}")
            result = await dispatcher.dispatch(tool_name, tool_args)

            content_list = [{"type": item.type, "text": item.text} for item in result]
            return create_success_response(request_id, {"content": content_list})

        elif method.startswith("notifications/"):
            # Client notifications (initialized, cancelled, ...) need no response
            return None

        else:
            return create_error_response(
                request_id, JsonRpcError.METHOD_NOT_FOUND, f"Unknown method: {method}"
            )

    except ToolError as e:
        return create_error_response(request_id, e.code, e.message)

    except Exception as e:
        logger.error(f"Error handling method {method}: {e}", exc_info=True)
        return create_error_response(
            request_id, JsonRpcError.INTERNAL_ERROR, str(e)
        )


@app.post("/mcp")
async def mcp_post_endpoint(
    request: Request,
    mcp_protocol_version: Optional[str] = Header(None, alias="MCP-Protocol-Version")
):
    """
    POST /mcp - Main MCP endpoint for JSON-RPC requests.

    Returns:
    - 202 Accepted (for notifications - no response body)
    - 200 OK with Content-Type: application/json
    - 400 for unparseable bodies, bad JSON-RPC, or unsupported protocol versions
    """
    if mcp_protocol_version and not validate_mcp_protocol_version(mcp_protocol_version):
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST,
            content=create_error_response(
                None, JsonRpcError.INVALID_REQUEST,
                f"Unsupported MCP protocol version: {mcp_protocol_version}"
            )
        )

    try:
        body = await request.json()
    except json.JSONDecodeError as e:
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST,
            content=create_error_response(
                None, JsonRpcError.PARSE_ERROR, f"Invalid JSON: {str(e)}"
            )
        )

    if not is_valid_jsonrpc(body):
        request_id = body.get("id") if isinstance(body, dict) else None
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST,
            content=create_error_response(
                request_id, JsonRpcError.INVALID_REQUEST, "Invalid JSON-RPC request"
            )
        )

    if is_notification(body):
        # Handle notification asynchronously, return 202 immediately
        asyncio.create_task(handle_mcp_request(body))
        return Response(status_code=HTTP_202_ACCEPTED)

    response = await handle_mcp_request(body)

    if response is None:
        return Response(status_code=HTTP_202_ACCEPTED)

    return JSONResponse(content=response)


@app.get("/mcp")
async def mcp_get_endpoint():
    """
    GET /mcp - Optional persistent SSE stream for server-initiated notifications.

    The server sends no notifications yet, so the stream only carries keepalives.
    """
    async def event_generator():
        while True:
            yield ": keepalive\n\n"
            await asyncio.sleep(30)

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive"
        }
    )


@app.get("/healthz")
async def health_check():
    """Health check endpoint (separate from /mcp)"""
    if dispatcher is None:
        return JSONResponse(
            status_code=HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "error": "PocketBase client not initialized"}
        )

    session = dispatcher.client.auth_store
    return JSONResponse(content={
        "status": "healthy",
        "pocketbase": dispatcher.client.config.base_url,
        "authenticated": session.is_valid,
        "tools": len(dispatcher.tool_names),
    })


async def initialize_server():
    """Create the PocketBase client and dispatcher"""
    global client

    config = PocketBaseConfig.from_environment()
    client = PocketBaseClient(config)
    set_dispatcher(ToolDispatcher(client))

    logger.info(f"PocketBase URL: {config.base_url}")


async def shutdown_server():
    """Cleanup on shutdown"""
    global client
    if client:
        await client.close()
        client = None
    set_dispatcher(None)


def run_http_server(host: str = "127.0.0.1", port: int = 3333):
    """
    Run the MCP server with Streamable HTTP transport.

    Args:
        host: Host to bind to
        port: Port to listen on
    """

    @app.on_event("startup")
    async def startup_event():
        await initialize_server()
        logger.info(f"PocketBase MCP Server (HTTP) starting on http://{host}:{port}/mcp")

    @app.on_event("shutdown")
    async def shutdown_event():
        await shutdown_server()

    uvicorn.run(app, host=host, port=port, log_level="info")
