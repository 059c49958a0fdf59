"""
Jowhara Core - Table adapter.

Generic data access for one logical table: composes a filtered, sorted,
limited query from a QueryConfig, owns the resulting ResultSet, and, when
realtime is requested, keeps it fresh by re-fetching on every change the
store reports for the table.

Fetches can overlap (a notification may arrive while a fetch is in
flight). Each fetch takes a sequence number and only a result newer than
the last applied one may replace the visible ResultSet.
"""

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable
from uuid import UUID

from postgrest.exceptions import APIError

from jowhara.core.query import QueryConfig, compose_query
from jowhara.core.realtime import TableSubscription
from jowhara.core.supabase_client import (
    SERVICE_NAME,
    StoreClient,
    describe_store_error,
    translate_store_error,
)
from jowhara.core.tables import Table, table_name
from jowhara.exceptions import (
    ExternalServiceException,
    JowharaException,
    NotFoundException,
    ValidationException,
)
from jowhara.observability import MetricsStore, get_metrics_store

logger = logging.getLogger(__name__)

Listener = Callable[["ResultSet"], Any]


@dataclass(frozen=True)
class ResultSet:
    """Rows, exact filtered total, and status of one configuration."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    total: int = 0
    loading: bool = True
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": self.rows,
            "total": self.total,
            "loading": self.loading,
            "error": self.error,
        }


def _error_code(exc: Exception) -> str:
    if isinstance(exc, JowharaException):
        return exc.code
    if isinstance(exc, APIError) and exc.code:
        return str(exc.code)
    return "STORE_ERROR"


class TableAdapter:
    """
    Query/subscription adapter bound to one table.

    Usage:
        async with TableAdapter(store, Table.PRODUCTS, QueryConfig(realtime=True)) as products:
            products.add_listener(render)
            ...
    """

    def __init__(
        self,
        store: StoreClient,
        table: Table | str,
        config: QueryConfig | None = None,
        metrics: MetricsStore | None = None,
    ):
        name = table_name(table)
        if not name:
            raise ValidationException("Table name must not be empty")
        self._store = store
        self._table = name
        self._config = config or QueryConfig()
        self._metrics = metrics or get_metrics_store()
        self._state = ResultSet()
        self._subscription: TableSubscription | None = None
        self._listeners: list[Listener] = []
        self._refetches: set[asyncio.Task] = set()
        self._sequence = 0
        self._applied_sequence = 0
        self._closed = False
        # Serializes start and reconfigure, so subscription swaps never interleave
        self._lifecycle = asyncio.Lock()

    async def __aenter__(self) -> "TableAdapter":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def table(self) -> str:
        return self._table

    @property
    def config(self) -> QueryConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscription(self) -> TableSubscription | None:
        return self._subscription

    def snapshot(self) -> ResultSet:
        """The currently visible result set."""
        return self._state

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """
        Call ``listener`` with every applied ResultSet.

        Coroutine functions are awaited. Returns a function that removes
        the listener.
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> ResultSet:
        """First fetch, then the change subscription if realtime is on."""
        async with self._lifecycle:
            return await self._start()

    async def _start(self) -> ResultSet:
        result = await self.fetch()
        if self._config.realtime and self._subscription is None and not self._closed:
            await self._subscribe()
        return result

    async def reconfigure(
        self,
        config: QueryConfig | None = None,
        table: Table | str | None = None,
    ) -> ResultSet:
        """
        Switch to a new table and/or configuration.

        The open subscription is closed before anything else; a new one is
        opened after the fetch if the new configuration is realtime.
        Reconfiguring to the active configuration does nothing. Concurrent
        calls run one after the other; the last one wins.
        """
        if table is not None and not table_name(table):
            raise ValidationException("Table name must not be empty")

        async with self._lifecycle:
            new_config = config if config is not None else self._config
            new_table = table_name(table) if table is not None else self._table
            if new_config == self._config and new_table == self._table:
                return self._state

            await self._unsubscribe()
            # Anything still in flight belongs to the old configuration
            self._applied_sequence = self._sequence
            self._config = new_config
            self._table = new_table
            return await self._start()

    async def close(self) -> None:
        """
        Release the subscription and stop applying results. Idempotent.

        Does not wait for a start or reconfigure in progress; a subscription
        that one of them is still opening is released as soon as it opens.
        """
        if self._closed:
            return
        self._closed = True
        await self._unsubscribe()
        for task in list(self._refetches):
            task.cancel()
        self._refetches.clear()
        self._listeners.clear()

    async def wait_for_refetches(self) -> None:
        """Wait until re-fetches triggered by notifications have settled."""
        while self._refetches:
            await asyncio.gather(*list(self._refetches), return_exceptions=True)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def fetch(self) -> ResultSet:
        """
        Run the query for the active configuration.

        Failures never raise: they settle as an empty ResultSet carrying
        the error message.
        """
        if self._closed:
            return self._state

        self._sequence += 1
        sequence = self._sequence
        table = self._table
        config = self._config
        self._state = ResultSet(
            rows=self._state.rows,
            total=self._state.total,
            loading=True,
            error=self._state.error,
        )

        started = time.perf_counter()
        try:
            query = self._store.table(table).select("*", count="exact")
            response = await compose_query(query, table, config).execute()
        except Exception as exc:
            message = describe_store_error(exc)
            logger.warning(f"Fetch from {table} failed: {message}")
            self._metrics.record_fetch_error(table, _error_code(exc))
            result = ResultSet(rows=[], total=0, loading=False, error=message)
        else:
            rows = response.data or []
            result = ResultSet(rows=rows, total=response.count or 0, loading=False)
        finally:
            self._metrics.record_fetch_latency(table, (time.perf_counter() - started) * 1000)

        return await self._apply(sequence, result)

    async def _apply(self, sequence: int, result: ResultSet) -> ResultSet:
        if self._closed or sequence <= self._applied_sequence:
            logger.debug(f"Discarding stale fetch #{sequence} from {self._table}")
            self._metrics.record_stale_fetch(self._table)
            if self._state.loading and (self._closed or sequence == self._sequence):
                # Nothing newer will settle the visible state
                self._state = ResultSet(
                    rows=self._state.rows,
                    total=self._state.total,
                    loading=False,
                    error=self._state.error,
                )
            return self._state

        self._applied_sequence = sequence
        self._state = result
        for listener in list(self._listeners):
            try:
                outcome = listener(result)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                logger.exception(f"Result listener failed for {self._table}")
        return result

    # -------------------------------------------------------------------------
    # Realtime
    # -------------------------------------------------------------------------

    async def _subscribe(self) -> None:
        await self._unsubscribe()
        subscription = await TableSubscription.open(
            self._store,
            self._table,
            self._handle_change,
        )
        if self._closed:
            logger.debug(f"Adapter for {self._table} closed while subscribing, releasing channel")
            await subscription.close()
            return
        self._subscription = subscription

    async def _unsubscribe(self) -> None:
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            await subscription.close()

    def _handle_change(self, payload: dict[str, Any]) -> None:
        """One notification, one re-fetch with whatever config is active then."""
        if self._closed:
            return
        self._metrics.record_notification(self._table)
        logger.debug(f"Change on {self._table}, re-fetching")
        task = asyncio.get_running_loop().create_task(self.fetch())
        self._refetches.add(task)
        task.add_done_callback(self._refetches.discard)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def insert(self, row: dict[str, Any]) -> dict[str, Any]:
        """
        Insert one row and return it as stored.

        Server-assigned fields (id, created_at, updated_at) may be omitted.
        The visible ResultSet is not touched; re-fetch or rely on realtime.
        """
        try:
            response = await self._store.table(self._table).insert(row).execute()
        except APIError as exc:
            raise translate_store_error(exc, self._table) from exc
        if not response.data:
            raise ExternalServiceException(SERVICE_NAME, f"insert into {self._table} returned no row")
        logger.info(f"Inserted into {self._table}: {response.data[0].get('id')}")
        return response.data[0]

    async def update(self, id: UUID | str, data: dict[str, Any]) -> dict[str, Any]:
        """Update the row with ``id``; raises NotFoundException if none matches."""
        if not data:
            raise ValidationException("Nothing to update")
        try:
            response = await self._store.table(self._table).update(data).eq("id", str(id)).execute()
        except APIError as exc:
            raise translate_store_error(exc, self._table, id) from exc
        if not response.data:
            raise NotFoundException(self._table, id)
        logger.info(f"Updated {self._table}: {id}")
        return response.data[0]

    async def remove(self, id: UUID | str) -> None:
        """Delete the row with ``id``. Deleting a missing row is not an error."""
        try:
            await self._store.table(self._table).delete().eq("id", str(id)).execute()
        except APIError as exc:
            raise translate_store_error(exc, self._table, id) from exc
        logger.info(f"Deleted from {self._table}: {id}")
