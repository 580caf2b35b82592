"""
Record MCP Tools
CRUD on the records of a collection, plus filtered queries with aggregates.
"""

from mcp import types


def create_record() -> types.Tool:
    return types.Tool(
        name="create_record",
        description="Create a new record in a collection",
        inputSchema={
            "type": "object",
            "properties": {
                "collection": {
                    "type": "string",
                    "description": "Collection name"
                },
                "data": {
                    "type": "object",
                    "description": "Record data"
                }
            },
            "required": ["collection", "data"]
        }
    )


def list_records() -> types.Tool:
    return types.Tool(
        name="list_records",
        description="List records from a collection with optional filters. Filter and sort use PocketBase syntax, e.g. filter \"status = 'active' && created > '2024-01-01'\", sort \"-created\".",
        inputSchema={
            "type": "object",
            "properties": {
                "collection": {
                    "type": "string",
                    "description": "Collection name"
                },
                "filter": {
                    "type": "string",
                    "description": "Filter query"
                },
                "sort": {
                    "type": "string",
                    "description": "Sort field and direction"
                },
                "page": {
                    "type": "number",
                    "description": "Page number (default: 1)",
                    "default": 1
                },
                "perPage": {
                    "type": "number",
                    "description": "Items per page (default: 50)",
                    "default": 50
                },
                "expand": {
                    "type": "string",
                    "description": "Relations to expand"
                }
            },
            "required": ["collection"]
        }
    )


def update_record() -> types.Tool:
    return types.Tool(
        name="update_record",
        description="Update an existing record",
        inputSchema={
            "type": "object",
            "properties": {
                "collection": {
                    "type": "string",
                    "description": "Collection name"
                },
                "id": {
                    "type": "string",
                    "description": "Record ID"
                },
                "data": {
                    "type": "object",
                    "description": "Updated record data"
                }
            },
            "required": ["collection", "id", "data"]
        }
    )


def delete_record() -> types.Tool:
    return types.Tool(
        name="delete_record",
        description="Delete a record",
        inputSchema={
            "type": "object",
            "properties": {
                "collection": {
                    "type": "string",
                    "description": "Collection name"
                },
                "id": {
                    "type": "string",
                    "description": "Record ID"
                }
            },
            "required": ["collection", "id"]
        }
    )


def query_collection() -> types.Tool:
    """
    Filtered query with client-side aggregation over the first page.
    """
    return types.Tool(
        name="query_collection",
        description=(
            "Advanced query with filtering, sorting, and aggregation. Returns up to 100 matching records. "
            "Aggregates are computed over those returned records only. "
            "Supported aggregates: sum(field), avg(field), count(field)."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "collection": {
                    "type": "string",
                    "description": "Collection name"
                },
                "filter": {
                    "type": "string",
                    "description": "Filter expression"
                },
                "sort": {
                    "type": "string",
                    "description": "Sort expression"
                },
                "aggregate": {
                    "type": "object",
                    "description": "Aggregation settings: {outputName: \"func(field)\"}, e.g. {\"total\": \"sum(amount)\", \"n\": \"count(id)\"}",
                    "additionalProperties": {"type": "string"}
                },
                "expand": {
                    "type": "string",
                    "description": "Relations to expand"
                }
            },
            "required": ["collection"]
        }
    )
