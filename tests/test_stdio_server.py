"""
Tests for the stdio server's tools/call request handler.
"""

import pytest
from mcp import types
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND

import server
from dispatcher import ToolDispatcher
from errors import ToolError


def call_request(name, arguments=None):
    return types.CallToolRequest(
        method="tools/call",
        params=types.CallToolRequestParams(name=name, arguments=arguments),
    )


@pytest.fixture
def stdio_handler(pb, monkeypatch):
    monkeypatch.setattr(server, "dispatcher", ToolDispatcher(pb))
    return server.app.request_handlers[types.CallToolRequest]


class TestCallToolHandler:

    @pytest.mark.asyncio
    async def test_success_returns_tool_result(self, stdio_handler, pb):
        pb.add_collection("posts", records=[{"id": "p1"}])

        response = await stdio_handler(call_request("delete_record", {"collection": "posts", "id": "p1"}))

        result = response.root
        assert isinstance(result, types.CallToolResult)
        assert not result.isError
        assert result.content[0].text == "Successfully deleted record p1 from collection posts"

    @pytest.mark.asyncio
    async def test_unknown_tool_keeps_method_not_found_code(self, stdio_handler):
        with pytest.raises(ToolError) as exc_info:
            await stdio_handler(call_request("nope", {}))

        assert exc_info.value.error.code == METHOD_NOT_FOUND
        assert exc_info.value.error.message == "Unknown tool: nope"

    @pytest.mark.asyncio
    async def test_invalid_arguments_keep_invalid_params_code(self, stdio_handler):
        with pytest.raises(ToolError) as exc_info:
            await stdio_handler(call_request("create_record", {"data": {}}))

        assert exc_info.value.error.code == INVALID_PARAMS

    @pytest.mark.asyncio
    async def test_backend_failure_keeps_internal_error_code(self, stdio_handler):
        with pytest.raises(ToolError) as exc_info:
            await stdio_handler(call_request("get_collection_schema", {"collection": "ghost"}))

        assert exc_info.value.error.code == INTERNAL_ERROR
        assert exc_info.value.error.message.startswith("Failed to get collection schema: ")

    @pytest.mark.asyncio
    async def test_not_initialized(self, monkeypatch):
        monkeypatch.setattr(server, "dispatcher", None)
        handler = server.app.request_handlers[types.CallToolRequest]

        with pytest.raises(ToolError) as exc_info:
            await handler(call_request("auth_refresh"))

        assert exc_info.value.error.code == INTERNAL_ERROR
