"""
Jowhara Orders - Service.

Order listing and maintenance. New orders go through the
``create_order_with_items`` stored procedure so the order and its lines
are written atomically.
"""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from postgrest.exceptions import APIError

from jowhara.core.adapter import ResultSet, TableAdapter
from jowhara.core.query import FilterSpec, QueryConfig, SortSpec
from jowhara.core.supabase_client import StoreClient, translate_store_error
from jowhara.core.tables import Table
from jowhara.exceptions import NotFoundException
from jowhara.modules.catalog import presets
from jowhara.modules.listing import fetch_once
from jowhara.modules.orders.schemas import (
    OrderCreatedResponse,
    OrderCreateRequest,
    OrderUpdateRequest,
)

logger = logging.getLogger(__name__)

CREATE_ORDER_RPC = "create_order_with_items"


def new_order_number(now: datetime | None = None) -> str:
    """JW-20261018-4F2A9C style order number."""
    now = now or datetime.now(timezone.utc)
    return f"JW-{now:%Y%m%d}-{uuid4().hex[:6].upper()}"


def build_order_payload(request: OrderCreateRequest) -> tuple[dict[str, Any], list[dict[str, Any]]]:
    """Split a request into the order row and its line rows, with totals filled in."""
    items = []
    for item in request.items:
        line = item.model_dump(exclude_none=True)
        line["total_price"] = round(item.quantity * item.unit_price, 2)
        items.append(line)

    subtotal = round(sum(line["total_price"] for line in items), 2)
    order = request.model_dump(exclude={"items"}, exclude_none=True)
    order["order_number"] = request.order_number or new_order_number()
    order["subtotal"] = subtotal
    order["total_amount"] = round(
        subtotal + request.tax_amount + request.shipping_amount - request.discount_amount,
        2,
    )
    return order, items


async def create_order(store: StoreClient, order: dict[str, Any], items: list[dict[str, Any]]) -> Any:
    """Insert an order and its line items atomically; returns what the procedure returns."""
    try:
        response = await store.rpc(
            CREATE_ORDER_RPC,
            {"order_data": order, "items_data": items},
        ).execute()
    except APIError as exc:
        raise translate_store_error(exc, Table.ORDERS.value) from exc
    logger.info(f"Created order {order.get('order_number')} with {len(items)} item(s)")
    return response.data


class OrdersService:
    """Service for order operations."""

    def __init__(self, store: StoreClient):
        self.store = store

    async def list_orders(
        self,
        status: str | None = None,
        customer_id: str | None = None,
        search: str | None = None,
        limit: int | None = None,
    ) -> ResultSet:
        config = QueryConfig(
            filter=FilterSpec(status=status, customer=customer_id, search=search),
            sort=SortSpec(column="created_at", ascending=False),
            limit=limit,
        )
        return await fetch_once(self.store, Table.ORDERS, config)

    def live(self, customer_id: str | None = None) -> TableAdapter:
        return presets.orders(self.store, customer_id=customer_id)

    async def get_order(self, order_id: UUID) -> dict[str, Any]:
        """Order with its line items."""
        try:
            response = await (
                self.store.table(Table.ORDERS.value)
                .select(f"*, {Table.ORDER_ITEMS.value}(*)")
                .eq("id", str(order_id))
                .limit(1)
                .execute()
            )
        except APIError as exc:
            raise translate_store_error(exc, Table.ORDERS.value, order_id) from exc
        if not response.data:
            raise NotFoundException(Table.ORDERS.value, order_id)
        return response.data[0]

    async def create_order(self, request: OrderCreateRequest) -> OrderCreatedResponse:
        order, items = build_order_payload(request)
        result = await create_order(self.store, order, items)
        return OrderCreatedResponse(
            order_number=order["order_number"],
            subtotal=order["subtotal"],
            total_amount=order["total_amount"],
            result=result,
        )

    async def update_order(self, order_id: UUID, request: OrderUpdateRequest) -> dict[str, Any]:
        return await TableAdapter(self.store, Table.ORDERS).update(
            order_id,
            request.model_dump(exclude_unset=True),
        )

    async def delete_order(self, order_id: UUID) -> None:
        await TableAdapter(self.store, Table.ORDERS).remove(order_id)
