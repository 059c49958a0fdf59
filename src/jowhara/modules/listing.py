"""
Jowhara Modules - Shared listing helpers.

One-shot fetches for JSON list endpoints and SSE streams of result-set
snapshots for live endpoints.
"""

import asyncio
import json
import logging
from typing import Any, AsyncGenerator

from jowhara.core.adapter import ResultSet, TableAdapter
from jowhara.core.query import QueryConfig
from jowhara.core.supabase_client import SERVICE_NAME, StoreClient
from jowhara.core.tables import Table
from jowhara.exceptions import ExternalServiceException

logger = logging.getLogger(__name__)

SNAPSHOT_EVENT = "snapshot"


def raise_for_result(result: ResultSet) -> ResultSet:
    """Turn a failed fetch into an exception at the HTTP edge."""
    if result.error is not None:
        raise ExternalServiceException(SERVICE_NAME, result.error)
    return result


async def fetch_once(store: StoreClient, table: Table | str, config: QueryConfig) -> ResultSet:
    """Single fetch without a subscription; raises if the fetch failed."""
    adapter = TableAdapter(store, table, config.model_copy(update={"realtime": False}))
    try:
        return raise_for_result(await adapter.fetch())
    finally:
        await adapter.close()


async def stream_result_sets(adapter: TableAdapter) -> AsyncGenerator[dict[str, Any], None]:
    """
    Yield an SSE event for every result set the adapter applies.

    Starts the adapter and closes it when the consumer goes away
    (client disconnect cancels the generator).
    """
    queue: asyncio.Queue[ResultSet] = asyncio.Queue()
    adapter.add_listener(queue.put_nowait)
    try:
        await adapter.start()
        while True:
            result = await queue.get()
            yield {
                "event": SNAPSHOT_EVENT,
                "data": json.dumps(result.to_dict(), default=str),
            }
    finally:
        await adapter.close()
        logger.info(f"Live stream on {adapter.table} closed")
