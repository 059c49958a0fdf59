"""
Jowhara Orders - Router.

API endpoints for orders.
"""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sse_starlette.sse import EventSourceResponse

from jowhara.config import Settings, get_settings
from jowhara.core.supabase_client import StoreClient
from jowhara.deps import get_store, require_orders, require_realtime
from jowhara.modules.listing import stream_result_sets
from jowhara.modules.orders.schemas import (
    OrderCreatedResponse,
    OrderCreateRequest,
    OrderUpdateRequest,
)
from jowhara.modules.orders.service import OrdersService
from jowhara.schemas import ListResponse

router = APIRouter(
    prefix="/orders",
    tags=["orders"],
    dependencies=[require_orders],
)


def get_service(store: StoreClient = Depends(get_store)) -> OrdersService:
    """Get orders service instance."""
    return OrdersService(store)


@router.get("", response_model=ListResponse[dict[str, Any]])
async def list_orders(
    status: str | None = None,
    customer_id: str | None = None,
    search: str | None = None,
    limit: int | None = Query(default=None, ge=1, le=1000),
    service: OrdersService = Depends(get_service),
):
    """List orders, newest first."""
    result = await service.list_orders(status=status, customer_id=customer_id, search=search, limit=limit)
    return ListResponse[dict[str, Any]](items=result.rows, total=result.total)


@router.get("/live", dependencies=[require_realtime])
async def live_orders(
    customer_id: str | None = None,
    service: OrdersService = Depends(get_service),
    settings: Settings = Depends(get_settings),
):
    """Stream order list snapshots (SSE)."""
    return EventSourceResponse(
        stream_result_sets(service.live(customer_id)),
        ping=settings.live.ping_seconds,
    )


@router.get("/{order_id}")
async def get_order(
    order_id: UUID,
    service: OrdersService = Depends(get_service),
) -> dict[str, Any]:
    """Order with its line items."""
    return await service.get_order(order_id)


@router.post("", response_model=OrderCreatedResponse, status_code=201)
async def create_order(
    request: OrderCreateRequest,
    service: OrdersService = Depends(get_service),
):
    """Create an order and its items atomically."""
    return await service.create_order(request)


@router.patch("/{order_id}")
async def update_order(
    order_id: UUID,
    request: OrderUpdateRequest,
    service: OrdersService = Depends(get_service),
) -> dict[str, Any]:
    """Update order status fields."""
    return await service.update_order(order_id, request)


@router.delete("/{order_id}", status_code=204)
async def delete_order(
    order_id: UUID,
    service: OrdersService = Depends(get_service),
):
    """Delete an order."""
    await service.delete_order(order_id)
