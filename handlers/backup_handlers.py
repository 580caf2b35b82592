import logging

from mcp import types

from backup.export import build_backup_entry, render_backup
from client import PocketBaseClient
from handlers.common import backend_errors, plain_text
from models import BackupDatabaseArgs

logger = logging.getLogger(__name__)

# Only the first page of collections is included in a backup
BACKUP_COLLECTION_PAGE_SIZE = 100


@backend_errors("Failed to backup database")
async def handle_backup_database(client: PocketBaseClient, args: BackupDatabaseArgs) -> list[types.TextContent]:
    """
    Snapshot every collection (schema + all records) as JSON or CSV-like text.
    """
    page = await client.collections.get_list(1, BACKUP_COLLECTION_PAGE_SIZE)
    collections = page.get("items") or []

    backup = {}
    for collection in collections:
        name = collection["name"]
        records = await client.collection(name).get_full_list()
        backup[name] = build_backup_entry(collection, records)
        logger.info(f"  |- {name}: {len(records)} records")

    logger.info(f"✅ Backed up {len(backup)} collections ({args.format})")
    return plain_text(render_backup(backup, args.format))
