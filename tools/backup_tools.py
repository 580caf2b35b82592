"""
Backup and Import MCP Tools
"""

from mcp import types


def backup_database() -> types.Tool:
    return types.Tool(
        name="backup_database",
        description="Create a backup of the PocketBase database: the schema and all records of each collection (first 100 collections).",
        inputSchema={
            "type": "object",
            "properties": {
                "format": {
                    "type": "string",
                    "enum": ["json", "csv"],
                    "description": "Export format (default: json)",
                    "default": "json"
                }
            },
            "required": []
        }
    )


def import_data() -> types.Tool:
    return types.Tool(
        name="import_data",
        description=(
            "Import data into a collection, one record at a time. "
            "Modes: create (default), update (every record needs an id), "
            "upsert (update by id, create when the update fails or there is no id)."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "collection": {
                    "type": "string",
                    "description": "Collection name"
                },
                "data": {
                    "type": "array",
                    "description": "Array of records to import",
                    "items": {"type": "object"}
                },
                "mode": {
                    "type": "string",
                    "enum": ["create", "update", "upsert"],
                    "description": "Import mode (default: create)",
                    "default": "create"
                }
            },
            "required": ["collection", "data"]
        }
    )
