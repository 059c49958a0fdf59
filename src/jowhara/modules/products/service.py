"""
Jowhara Products - Service.

Business logic for the product catalog.
"""

from typing import Any
from uuid import UUID

from jowhara.core.adapter import ResultSet, TableAdapter
from jowhara.core.query import FilterSpec, QueryConfig, SortSpec
from jowhara.core.supabase_client import StoreClient
from jowhara.core.tables import Table
from jowhara.modules.catalog import presets
from jowhara.modules.listing import fetch_once
from jowhara.modules.products.schemas import ProductCreate, ProductUpdate
from jowhara.modules.products.search import get_product_details, search_products


class ProductsService:
    """Service for product operations."""

    def __init__(self, store: StoreClient):
        self.store = store

    def _adapter(self) -> TableAdapter:
        return TableAdapter(self.store, Table.PRODUCTS)

    async def list_products(
        self,
        filters: FilterSpec | None = None,
        sort: SortSpec | None = None,
        limit: int | None = None,
    ) -> ResultSet:
        """List products; total ignores ``limit``."""
        config = QueryConfig(filter=filters, sort=sort, limit=limit)
        return await fetch_once(self.store, Table.PRODUCTS, config)

    def live(
        self,
        filters: FilterSpec | None = None,
        sort: SortSpec | None = None,
        limit: int | None = None,
    ) -> TableAdapter:
        """Realtime product adapter for the live endpoint (not started)."""
        return presets.products(self.store, filters=filters, sort=sort, limit=limit)

    async def search(self, query: str, filters: FilterSpec | None = None) -> list[dict[str, Any]]:
        return await search_products(self.store, query, filters)

    async def get_product(self, product_id: UUID) -> dict[str, Any]:
        return await get_product_details(self.store, product_id)

    async def create_product(self, request: ProductCreate) -> dict[str, Any]:
        """Create a product; id and timestamps come back from the store."""
        return await self._adapter().insert(request.model_dump())

    async def update_product(self, product_id: UUID, request: ProductUpdate) -> dict[str, Any]:
        return await self._adapter().update(product_id, request.model_dump(exclude_unset=True))

    async def delete_product(self, product_id: UUID) -> None:
        await self._adapter().remove(product_id)
