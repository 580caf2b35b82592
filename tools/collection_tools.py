"""
Collection MCP Tools
Create collections, inspect their fields, migrate them, and manage indexes.
"""

from mcp import types

FIELD_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "type": {"type": "string", "description": "Field type: text, number, bool, email, url, date, select, file, relation, json, ..."},
        "required": {"type": "boolean"},
        "options": {"type": "object"}
    },
    "required": ["name", "type"]
}


def create_collection() -> types.Tool:
    return types.Tool(
        name="create_collection",
        description="Create a new collection in PocketBase. Requires a superuser session (authenticate_user with isAdmin=true).",
        inputSchema={
            "type": "object",
            "properties": {
                "name": {
                    "type": "string",
                    "description": "Collection name"
                },
                "schema": {
                    "type": "array",
                    "description": "Collection schema fields",
                    "items": FIELD_SCHEMA
                },
                "type": {
                    "type": "string",
                    "enum": ["base", "auth", "view"],
                    "description": "Collection type (default: base)",
                    "default": "base"
                }
            },
            "required": ["name", "schema"]
        }
    )


def get_collection_schema() -> types.Tool:
    return types.Tool(
        name="get_collection_schema",
        description="Get schema details (the field list) for a collection",
        inputSchema={
            "type": "object",
            "properties": {
                "collection": {
                    "type": "string",
                    "description": "Collection name"
                }
            },
            "required": ["collection"]
        }
    )


def migrate_collection() -> types.Tool:
    """
    Schema migration with data preservation.
    """
    return types.Tool(
        name="migrate_collection",
        description=(
            "Migrate collection schema with data preservation. Creates a temporary collection with the new schema, "
            "copies every record (applying dataTransforms), deletes the original and renames the temporary "
            "collection to the original name. There is NO rollback: if a step fails, the temporary collection "
            "(<collection>_migration_<timestamp>) is left in place for manual recovery."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "collection": {
                    "type": "string",
                    "description": "Collection name"
                },
                "newSchema": {
                    "type": "array",
                    "description": "New collection schema",
                    "items": FIELD_SCHEMA
                },
                "dataTransforms": {
                    "type": "object",
                    "description": (
                        "Field transformation mappings: {field: expression}. The expression sees the field's current "
                        "value as `oldValue`, e.g. {\"price\": \"oldValue * 100\", \"title\": \"oldValue.toUpperCase()\"}"
                    ),
                    "additionalProperties": {"type": "string"}
                }
            },
            "required": ["collection", "newSchema"]
        }
    )


def manage_indexes() -> types.Tool:
    return types.Tool(
        name="manage_indexes",
        description="Manage collection indexes: create (replaces an index with the same name), delete by name, or list",
        inputSchema={
            "type": "object",
            "properties": {
                "collection": {
                    "type": "string",
                    "description": "Collection name"
                },
                "action": {
                    "type": "string",
                    "enum": ["create", "delete", "list"],
                    "description": "Action to perform"
                },
                "index": {
                    "type": "object",
                    "description": "Index configuration (create: name, fields, unique; delete: name)",
                    "properties": {
                        "name": {"type": "string"},
                        "fields": {"type": "array", "items": {"type": "string"}},
                        "unique": {"type": "boolean"}
                    }
                }
            },
            "required": ["collection", "action"]
        }
    )
