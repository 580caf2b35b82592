"""
MCP Server Entry Point for PocketBase
Run with: python server.py
"""

import asyncio
import logging
import sys
from typing import Optional

from mcp.server.models import InitializationOptions
from mcp.server import NotificationOptions, Server
from mcp.server.stdio import stdio_server
from mcp import types

from client import PocketBaseClient
from config import PocketBaseConfig, get_environment_mode
from dispatcher import ToolDispatcher
from errors import INTERNAL_ERROR, ToolError

__version__ = "0.1.0"

SERVER_NAME = "pocketbase-mcp-server"

# Initialize logging (stderr; stdout is the MCP stdio channel)
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Initialize server
app = Server(SERVER_NAME)
client: Optional[PocketBaseClient] = None
dispatcher: Optional[ToolDispatcher] = None


@app.list_tools()
async def handle_list_tools() -> list[types.Tool]:
    """
    List available MCP tools.

    The catalog is static: collections, records, auth flows, backup/import,
    migration, aggregation queries and index management.
    """
    from tools import get_core_tool_catalog
    return get_core_tool_catalog()


async def handle_call_tool(request: types.CallToolRequest) -> types.ServerResult:
    """
    Handle tool execution.

    All tool handlers are organized in the handlers/ directory by category;
    routing and error normalization live in dispatcher.ToolDispatcher.

    Registered directly as the tools/call request handler: a ToolError (an
    McpError) propagates to the SDK and reaches the caller as a JSON-RPC
    error carrying its code.
    """
    if dispatcher is None:
        raise ToolError(INTERNAL_ERROR, "Server not initialized: PocketBase client is not connected")

    content = await dispatcher.dispatch(request.params.name, request.params.arguments)
    return types.ServerResult(types.CallToolResult(content=content))


app.request_handlers[types.CallToolRequest] = handle_call_tool


async def main():
    """Main entry point for MCP server"""
    global client, dispatcher

    try:
        # Load PocketBase configuration (environment-aware)
        # Note: config.py handles loading .env.{mode} based on APP_ENV
        config = PocketBaseConfig.from_environment()

        client = PocketBaseClient(config)
        dispatcher = ToolDispatcher(client)

        logger.info("PocketBase MCP Server starting...")
        logger.info(f"Environment: {get_environment_mode()}")
        logger.info(f"PocketBase URL: {config.base_url}")
        if config.has_admin_credentials:
            logger.info("Admin credentials configured (used by authenticate_user with isAdmin=true)")

        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name=SERVER_NAME,
                    server_version=__version__,
                    capabilities=app.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={}
                    )
                )
            )
    except Exception as e:
        logger.error(f"Failed to start MCP server: {e}", exc_info=True)
        raise
    finally:
        if client:
            await client.close()
            logger.info("PocketBase client closed")


def cli_entry():
    """Entry point for console script - wraps async main()"""
    import argparse

    parser = argparse.ArgumentParser(description="PocketBase MCP Server")
    parser.add_argument('--version', '-v', action='store_true', help='Show version')
    parser.add_argument('--http', action='store_true', help='Run in HTTP mode (Streamable HTTP transport)')
    parser.add_argument('--port', type=int, default=3333, help='Port for HTTP mode (default: 3333)')
    parser.add_argument('--host', type=str, default='127.0.0.1', help='Host for HTTP mode (default: 127.0.0.1)')

    args = parser.parse_args()

    # Handle --version flag
    if args.version:
        print(f"{SERVER_NAME} version {__version__}")
        sys.exit(0)

    try:
        # Handle --http flag for HTTP server mode (Streamable HTTP per MCP spec)
        if args.http:
            logger.info(f"Starting in HTTP mode (Streamable HTTP) on {args.host}:{args.port}/mcp")
            from transport.http import run_http_server
            run_http_server(host=args.host, port=args.port)
        else:
            # Default: stdio mode
            logger.info("Starting in stdio mode...")
            asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        sys.exit(0)


if __name__ == "__main__":
    cli_entry()
