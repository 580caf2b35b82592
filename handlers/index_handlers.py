"""
Index management for manage_indexes.

A collection's indexes are rewritten as a whole: read the collection, compute
the new index list, and write it back with a single update. Entries may be
descriptor objects ({name, fields, unique}) or the SQL strings PocketBase
stores (CREATE [UNIQUE] INDEX `name` ON ...); both forms are matched by name.
"""

import logging
import re
from typing import Any, Optional

from mcp import types
from pydantic import ValidationError

from client import PocketBaseClient
from errors import invalid_params
from handlers.common import backend_errors, json_text
from models import IndexDescriptor, ManageIndexesArgs

logger = logging.getLogger(__name__)

VALID_INDEX_ACTIONS = ("create", "delete", "list")

_SQL_INDEX_NAME = re.compile(
    r"CREATE\s+(?:UNIQUE\s+)?INDEX\s+(?:IF\s+NOT\s+EXISTS\s+)?[`\"\[]?(\w+)[`\"\]]?",
    re.IGNORECASE,
)


def index_name(entry: Any) -> Optional[str]:
    """Name of an index entry, whichever form it is stored in."""
    if isinstance(entry, dict):
        return entry.get("name")
    if isinstance(entry, str):
        match = _SQL_INDEX_NAME.search(entry)
        return match.group(1) if match else None
    return None


def add_index(indexes: list, descriptor: IndexDescriptor) -> list:
    """Append `descriptor`, replacing any entry with the same name."""
    kept = [entry for entry in indexes if index_name(entry) != descriptor.name]
    return [*kept, descriptor.to_payload()]


def remove_index(indexes: list, name: str) -> list:
    return [entry for entry in indexes if index_name(entry) != name]


@backend_errors("Failed to manage indexes")
async def handle_manage_indexes(client: PocketBaseClient, args: ManageIndexesArgs) -> list[types.TextContent]:
    """
    Create, delete, or list a collection's indexes.

    create: needs index {name, fields, unique}; returns the updated list
    delete: needs index.name; deleting an unknown name is a no-op
    list:   returns the current list without writing
    """
    if args.action not in VALID_INDEX_ACTIONS:
        raise invalid_params(f"Invalid index action: {args.action}")

    descriptor = None
    if args.action == "create":
        try:
            descriptor = IndexDescriptor.model_validate(args.index or {})
        except ValidationError:
            raise invalid_params("Index configuration required for create action") from None

    elif args.action == "delete":
        if not args.index or not args.index.get("name"):
            raise invalid_params("Index name required for delete action")

    collection = await client.collections.get_one(args.collection)
    current = list(collection.get("indexes") or [])

    if args.action == "list":
        return json_text(current)

    if args.action == "create":
        indexes = add_index(current, descriptor)
        logger.info(f"🗂️  Creating index '{descriptor.name}' on '{args.collection}'")
    else:
        name = args.index["name"]
        indexes = remove_index(current, name)
        if len(indexes) == len(current):
            logger.info(f"Index '{name}' not found on '{args.collection}', nothing to delete")
        else:
            logger.info(f"🗂️  Deleting index '{name}' from '{args.collection}'")

    updated = await client.collections.update(collection["id"], {**collection, "indexes": indexes})
    return json_text(updated.get("indexes") or [])
