"""
Jowhara Core - Realtime subscriptions.

One TableSubscription is one channel on the Supabase change feed for one
table, all event kinds, no row filter. Payloads are passed through to the
owner; once closed, nothing is delivered.
"""

import logging
from typing import Any, Callable
from uuid import uuid4

from jowhara.core.supabase_client import StoreClient
from jowhara.core.tables import Table, table_name

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[dict[str, Any]], None]

ALL_EVENTS = "*"
SCHEMA = "public"


class TableSubscription:
    """Handle on an open change-notification channel."""

    def __init__(self, store: StoreClient, table: Table | str, on_change: ChangeCallback):
        self._store = store
        self._table = table_name(table)
        self._on_change = on_change
        self._channel: Any = None
        self._closed = False
        # Unique per handle so two adapters on one table never share a channel
        self.topic = f"{self._table}_changes:{uuid4().hex[:8]}"

    @classmethod
    async def open(
        cls,
        store: StoreClient,
        table: Table | str,
        on_change: ChangeCallback,
    ) -> "TableSubscription":
        """Create the channel and wait for the subscription to be sent."""
        subscription = cls(store, table, on_change)
        await subscription._subscribe()
        return subscription

    @property
    def table(self) -> str:
        return self._table

    @property
    def active(self) -> bool:
        return self._channel is not None and not self._closed

    async def _subscribe(self) -> None:
        channel = self._store.channel(self.topic)
        channel.on_postgres_changes(
            event=ALL_EVENTS,
            schema=SCHEMA,
            table=self._table,
            callback=self._dispatch,
        )
        self._channel = channel
        await channel.subscribe(self._log_status)
        logger.info(f"Subscribed to changes on {self._table} [{self.topic}]")

    def _log_status(self, status: Any, error: Exception | None = None) -> None:
        if error is not None:
            logger.warning(f"Realtime channel {self.topic} reported {status}: {error}")
        else:
            logger.debug(f"Realtime channel {self.topic} is {status}")

    def _dispatch(self, payload: dict[str, Any]) -> None:
        if not self.active:
            return
        self._on_change(payload)

    async def close(self) -> None:
        """Remove the channel. Safe to call more than once; only the first call acts."""
        if self._closed:
            return
        self._closed = True
        channel, self._channel = self._channel, None
        if channel is not None:
            await self._store.remove_channel(channel)
            logger.info(f"Unsubscribed from changes on {self._table} [{self.topic}]")
