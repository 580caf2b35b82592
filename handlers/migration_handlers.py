"""
Collection migration for migrate_collection.

Protocol:
    0. compile every transform expression (bad expression -> InvalidParams)
    1. create <collection>_migration_<unix-ms> with the new fields
    2. read every record of the source collection
    3. copy each record, applying the transforms field by field
    4. create the copies in the temp collection, one at a time, in read order
    5. delete the source collection
    6. rename the temp collection to the source name

There is no rollback. A failure after step 1 leaves the temp collection in
place (and after step 5, the data only exists there); its name is logged so
it can be recovered by hand.
"""

import logging
import time
from typing import Any

from mcp import types

from client import PocketBaseClient
from errors import invalid_params
from handlers.common import backend_errors, json_text
from models import MigrateCollectionArgs
from utils.expressions import ExpressionError, TransformExpression, compile_expression

logger = logging.getLogger(__name__)


def temp_collection_name(collection: str) -> str:
    return f"{collection}_migration_{int(time.time() * 1000)}"


def compile_transforms(data_transforms: dict[str, str]) -> dict[str, TransformExpression]:
    """
    Raises:
        ToolError: InvalidParams naming the first field whose expression is invalid
    """
    compiled = {}
    for field, expression in data_transforms.items():
        try:
            compiled[field] = compile_expression(expression)
        except ExpressionError as e:
            raise invalid_params(f"Invalid transform expression for field '{field}': {e}") from None
    return compiled


def transform_record(record: dict[str, Any], transforms: dict[str, TransformExpression]) -> dict[str, Any]:
    """
    Shallow-copy `record` and apply each transform to its field.

    A transform that fails is logged and the field keeps its copied value.
    """
    new_record = dict(record)
    for field, transform in transforms.items():
        try:
            new_record[field] = transform.evaluate(record.get(field))
        except ExpressionError as e:
            logger.warning(f"⚠️  Failed to transform field {field} of record {record.get('id')}: {e}")
    return new_record


@backend_errors("Failed to migrate collection")
async def handle_migrate_collection(client: PocketBaseClient, args: MigrateCollectionArgs) -> list[types.TextContent]:
    transforms = compile_transforms(args.data_transforms)

    temp_name = temp_collection_name(args.collection)
    step = "create temp collection"
    try:
        logger.info(f"🚚 Migrating '{args.collection}' via '{temp_name}'")
        await client.collections.create({
            "name": temp_name,
            "fields": [field.to_payload() for field in args.new_schema],
        })

        step = "read source records"
        old_records = await client.collection(args.collection).get_full_list()
        logger.info(f"  |- read {len(old_records)} records")

        step = "copy records"
        temp_records = client.collection(temp_name)
        for record in old_records:
            await temp_records.create(transform_record(record, transforms))
        logger.info(f"  |- copied {len(old_records)} records")

        step = "delete source collection"
        await client.collections.delete(args.collection)

        step = "rename temp collection"
        renamed = await client.collections.update(temp_name, {"name": args.collection})

    except Exception as e:
        logger.error(
            f"❌ Migration of '{args.collection}' failed at step '{step}': {e}. "
            f"No rollback performed; temp collection '{temp_name}' may need manual cleanup"
        )
        raise

    logger.info(f"✅ Migrated '{args.collection}'")
    return json_text(renamed)
