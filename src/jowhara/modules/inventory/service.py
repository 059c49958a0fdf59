"""
Jowhara Inventory - Service.

Stock adjustments run through the ``update_product_inventory`` stored
procedure, which updates the stock figure and writes the journal row.
"""

import logging
from typing import Any

from postgrest.exceptions import APIError

from jowhara.core.adapter import ResultSet
from jowhara.core.query import FilterSpec, QueryConfig
from jowhara.core.supabase_client import StoreClient, translate_store_error
from jowhara.core.tables import Table
from jowhara.modules.inventory.schemas import (
    InventoryAdjustmentRequest,
    InventoryAdjustmentResponse,
)
from jowhara.modules.listing import fetch_once

logger = logging.getLogger(__name__)

ADJUST_INVENTORY_RPC = "update_product_inventory"


async def adjust_inventory(
    store: StoreClient,
    product_id: str,
    quantity_change: int,
    change_type: str,
    variant_id: str | None = None,
    reference_id: str | None = None,
    reference_type: str | None = None,
    notes: str | None = None,
) -> Any:
    """Apply a stock movement; returns what the procedure returns."""
    params = {
        "p_product_id": product_id,
        "p_variant_id": variant_id,
        "p_quantity_change": quantity_change,
        "p_change_type": change_type,
        "p_reference_id": reference_id,
        "p_reference_type": reference_type,
        "p_notes": notes,
    }
    try:
        response = await store.rpc(ADJUST_INVENTORY_RPC, params).execute()
    except APIError as exc:
        raise translate_store_error(exc, Table.PRODUCTS.value, product_id) from exc
    logger.info(f"Inventory {change_type} of {quantity_change:+d} on product {product_id}")
    return response.data


class InventoryService:
    """Service for inventory operations."""

    def __init__(self, store: StoreClient):
        self.store = store

    async def adjust(self, request: InventoryAdjustmentRequest) -> InventoryAdjustmentResponse:
        result = await adjust_inventory(self.store, **request.model_dump())
        return InventoryAdjustmentResponse(
            product_id=request.product_id,
            variant_id=request.variant_id,
            quantity_change=request.quantity_change,
            change_type=request.change_type,
            result=result,
        )

    async def list_logs(self, product_id: str | None = None, limit: int | None = None) -> ResultSet:
        """Inventory journal, newest first."""
        config = QueryConfig(filter=FilterSpec(product=product_id), limit=limit)
        return await fetch_once(self.store, Table.INVENTORY_LOGS, config)
