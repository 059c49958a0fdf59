"""
Jowhara Inventory - Router.

API endpoints for stock adjustments and the inventory journal.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query

from jowhara.core.supabase_client import StoreClient
from jowhara.deps import get_store, require_inventory
from jowhara.modules.inventory.schemas import (
    InventoryAdjustmentRequest,
    InventoryAdjustmentResponse,
)
from jowhara.modules.inventory.service import InventoryService
from jowhara.schemas import ListResponse

router = APIRouter(
    prefix="/inventory",
    tags=["inventory"],
    dependencies=[require_inventory],
)


def get_service(store: StoreClient = Depends(get_store)) -> InventoryService:
    """Get inventory service instance."""
    return InventoryService(store)


@router.post("/adjustments", response_model=InventoryAdjustmentResponse, status_code=201)
async def adjust_inventory(
    request: InventoryAdjustmentRequest,
    service: InventoryService = Depends(get_service),
):
    """Apply a stock adjustment and record it in the journal."""
    return await service.adjust(request)


@router.get("/logs", response_model=ListResponse[dict[str, Any]])
async def list_inventory_logs(
    product_id: str | None = None,
    limit: int | None = Query(default=None, ge=1, le=1000),
    service: InventoryService = Depends(get_service),
):
    """Inventory journal, newest first."""
    result = await service.list_logs(product_id=product_id, limit=limit)
    return ListResponse[dict[str, Any]](items=result.rows, total=result.total)
