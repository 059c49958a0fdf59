"""
Jowhara Core - Supabase Client.

Owns the Supabase async client for the lifetime of the application.
The handle is created in the app lifespan and passed to whoever needs it;
nothing in the package reaches for a module-level client.
"""

import logging
from typing import Any

from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from jowhara.config import SupabaseSettings
from jowhara.exceptions import (
    ConflictException,
    ExternalServiceException,
    JowharaException,
    NotFoundException,
    StoreNotConnectedException,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "supabase"

# PostgREST answers with this code when .single() matches no row
NO_ROWS_CODE = "PGRST116"


class StoreClient:
    """
    Connection handle on the remote Supabase store.

    Wraps the query builder (table), stored procedures (rpc) and the
    realtime change feed (channel). Must be connected before use and
    closed at shutdown.
    """

    def __init__(self, settings: SupabaseSettings, client: AsyncClient | None = None):
        self._settings = settings
        self._client = client

    @property
    def connected(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> AsyncClient:
        """The underlying Supabase client. Raises when not connected."""
        if self._client is None:
            raise StoreNotConnectedException()
        return self._client

    async def connect(self) -> "StoreClient":
        """Create the Supabase client. Idempotent."""
        if self._client is None:
            logger.info(f"Connecting to Supabase at {self._settings.url}")
            self._client = await acreate_client(
                self._settings.url,
                self._settings.api_key,
            )
        return self

    async def close(self) -> None:
        """Release all realtime channels and drop the client. Idempotent."""
        if self._client is None:
            return
        client, self._client = self._client, None
        await client.remove_all_channels()
        logger.info("Supabase client closed")

    def table(self, name: str) -> Any:
        """Return a PostgREST query builder for ``name``."""
        return self.client.table(name)

    def rpc(self, function_name: str, params: dict[str, Any]) -> Any:
        """Return a stored procedure call; await ``.execute()`` on it."""
        return self.client.rpc(function_name, params)

    def channel(self, topic: str) -> Any:
        """Return a realtime channel (not yet subscribed)."""
        return self.client.channel(topic)

    async def remove_channel(self, channel: Any) -> None:
        """Unsubscribe and discard a realtime channel."""
        if self._client is None:
            # close() already removed every channel
            return
        await self._client.remove_channel(channel)


def describe_store_error(exc: Exception) -> str:
    """Human-readable message for a failed remote call."""
    if isinstance(exc, APIError):
        return exc.message or str(exc)
    if isinstance(exc, JowharaException):
        return exc.message
    return str(exc) or "An error occurred"


def translate_store_error(exc: APIError, resource_type: str, resource_id: Any = None) -> JowharaException:
    """
    Map a PostgREST error onto the application exception hierarchy.

    SQLSTATE class 23 (integrity constraint violation) becomes a conflict,
    PGRST116 a not-found, anything else an external service failure.
    """
    code = exc.code or ""
    message = exc.message or str(exc)

    if code.startswith("23"):
        return ConflictException(message, constraint=exc.details, sqlstate=code)
    if code == NO_ROWS_CODE:
        return NotFoundException(resource_type, resource_id if resource_id is not None else "?")
    return ExternalServiceException(
        SERVICE_NAME,
        message,
        details={"code": code} if code else None,
    )
