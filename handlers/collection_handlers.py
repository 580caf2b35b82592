import logging

from mcp import types

from backup.export import collection_fields
from client import PocketBaseClient
from handlers.common import backend_errors, json_text
from models import CreateCollectionArgs, GetCollectionSchemaArgs

logger = logging.getLogger(__name__)


@backend_errors("Failed to create collection")
async def handle_create_collection(client: PocketBaseClient, args: CreateCollectionArgs) -> list[types.TextContent]:
    """
    Create a new collection with the given fields.
    """
    payload = {
        "name": args.name,
        "type": args.type,
        "fields": [field.to_payload() for field in args.fields],
    }
    result = await client.collections.create(payload)
    logger.info(f"✅ Created collection '{args.name}' ({len(args.fields)} fields)")
    return json_text(result)


@backend_errors("Failed to get collection schema")
async def handle_get_collection_schema(client: PocketBaseClient, args: GetCollectionSchemaArgs) -> list[types.TextContent]:
    """
    Return the field list of a collection.
    """
    collection = await client.collections.get_one(args.collection)
    return json_text(collection_fields(collection))
