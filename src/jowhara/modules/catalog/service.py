"""
Jowhara Catalog - Service.

Listing and maintenance of categories, brands and gender categories.
"""

from typing import Any, Callable
from uuid import UUID

from pydantic import BaseModel

from jowhara.core.adapter import ResultSet, TableAdapter
from jowhara.core.query import FilterSpec, QueryConfig, SortSpec
from jowhara.core.supabase_client import StoreClient
from jowhara.core.tables import Table
from jowhara.modules.catalog import presets
from jowhara.modules.listing import fetch_once

_LIVE_PRESETS: dict[Table, Callable[..., TableAdapter]] = {
    Table.CATEGORIES: presets.categories,
    Table.BRANDS: presets.brands,
    Table.GENDER_CATEGORIES: presets.gender_categories,
}


class CatalogService:
    """Service for one catalog table."""

    def __init__(self, store: StoreClient, table: Table):
        self.store = store
        self.table = table

    async def list_entries(
        self,
        status: str | None = None,
        search: str | None = None,
        sort: SortSpec | None = None,
        limit: int | None = None,
    ) -> ResultSet:
        """List entries; status "active" keeps active ones, anything else inactive ones."""
        config = QueryConfig(
            filter=FilterSpec(status=status, search=search),
            sort=sort,
            limit=limit,
        )
        return await fetch_once(self.store, self.table, config)

    def live(self, active_only: bool = False) -> TableAdapter:
        """Realtime adapter for the live endpoint (not started)."""
        return _LIVE_PRESETS[self.table](self.store, active_only=active_only)

    async def create(self, payload: BaseModel) -> dict[str, Any]:
        return await TableAdapter(self.store, self.table).insert(payload.model_dump())

    async def update(self, entry_id: UUID, payload: BaseModel) -> dict[str, Any]:
        return await TableAdapter(self.store, self.table).update(
            entry_id,
            payload.model_dump(exclude_unset=True),
        )

    async def delete(self, entry_id: UUID) -> None:
        await TableAdapter(self.store, self.table).remove(entry_id)
