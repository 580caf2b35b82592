import logging

from mcp import types

from client import ClientResponseError, PocketBaseClient
from errors import invalid_params
from handlers.common import backend_errors, json_text, plain_text
from models import (
    CreateRecordArgs,
    DeleteRecordArgs,
    ImportDataArgs,
    ListRecordsArgs,
    UpdateRecordArgs,
)

logger = logging.getLogger(__name__)


@backend_errors("Failed to create record")
async def handle_create_record(client: PocketBaseClient, args: CreateRecordArgs) -> list[types.TextContent]:
    result = await client.collection(args.collection).create(args.data)
    return json_text(result)


@backend_errors("Failed to list records")
async def handle_list_records(client: PocketBaseClient, args: ListRecordsArgs) -> list[types.TextContent]:
    """
    List one page of records. filter/sort/expand are passed to PocketBase verbatim.
    """
    result = await client.collection(args.collection).get_list(
        args.page,
        args.per_page,
        filter=args.filter,
        sort=args.sort,
        expand=args.expand,
    )
    return json_text(result)


@backend_errors("Failed to update record")
async def handle_update_record(client: PocketBaseClient, args: UpdateRecordArgs) -> list[types.TextContent]:
    result = await client.collection(args.collection).update(args.id, args.data)
    return json_text(result)


@backend_errors("Failed to delete record")
async def handle_delete_record(client: PocketBaseClient, args: DeleteRecordArgs) -> list[types.TextContent]:
    await client.collection(args.collection).delete(args.id)
    return plain_text(f"Successfully deleted record {args.id} from collection {args.collection}")


@backend_errors("Failed to import data")
async def handle_import_data(client: PocketBaseClient, args: ImportDataArgs) -> list[types.TextContent]:
    """
    Import records into a collection, one request per record, in input order.

    Modes:
    - create: create every record
    - update: update every record by id (all records must carry an id)
    - upsert: update by id, falling back to create when the update fails;
      records without an id are created
    """
    if args.mode == "update":
        # Checked for the whole batch before anything is written
        if any(not record.get("id") for record in args.data):
            raise invalid_params("Record ID required for update mode")

    records = client.collection(args.collection)
    results = []

    for record in args.data:
        record_id = record.get("id")

        if args.mode == "create":
            results.append(await records.create(record))

        elif args.mode == "update":
            results.append(await records.update(record_id, record))

        else:
            if record_id:
                try:
                    results.append(await records.update(record_id, record))
                    continue
                except ClientResponseError as e:
                    logger.info(f"Upsert: update of {record_id} failed ({e.status}), creating instead")
            results.append(await records.create(record))

    logger.info(f"✅ Imported {len(results)} records into '{args.collection}' (mode={args.mode})")
    return json_text(results)
