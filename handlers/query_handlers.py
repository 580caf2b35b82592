import logging

from mcp import types

from client import PocketBaseClient
from errors import invalid_params
from handlers.common import backend_errors, json_text
from models import QueryCollectionArgs
from query.aggregations import (
    AGGREGATE_PAGE_SIZE,
    AggregationError,
    compute_aggregates,
    parse_aggregates,
)

logger = logging.getLogger(__name__)


@backend_errors("Failed to query collection")
async def handle_query_collection(client: PocketBaseClient, args: QueryCollectionArgs) -> list[types.TextContent]:
    """
    Filtered/sorted query with optional client-side aggregates.

    Aggregates are computed over the fetched page only (the first 100 matches),
    not the whole collection.

    Example aggregate: {"total": "sum(amount)", "n": "count(id)"}
    """
    specs = []
    if args.aggregate:
        try:
            specs = parse_aggregates(args.aggregate)
        except AggregationError as e:
            raise invalid_params(str(e)) from None

    page = await client.collection(args.collection).get_list(
        1,
        AGGREGATE_PAGE_SIZE,
        filter=args.filter,
        sort=args.sort,
        expand=args.expand,
    )
    items = page.get("items") or []

    result = {"items": items}
    if args.aggregate:
        result["aggregations"] = compute_aggregates(specs, items)
        if page.get("totalItems", 0) > len(items):
            logger.info(
                f"Aggregates for '{args.collection}' cover {len(items)} of {page['totalItems']} matching records"
            )

    return json_text(result)
