"""
Jowhara Orders - Schemas.

Pydantic models for order creation and status updates.
"""

from typing import Any

from pydantic import BaseModel, Field


class OrderItemInput(BaseModel):
    """One line of a new order."""

    product_id: str = Field(..., min_length=1)
    variant_id: str | None = None
    product_name: str = Field(..., min_length=1)
    variant_name: str | None = None
    sku: str | None = None
    quantity: int = Field(..., ge=1)
    unit_price: float = Field(..., ge=0)


class OrderCreateRequest(BaseModel):
    """Request to create an order with its line items in one transaction."""

    order_number: str | None = None
    customer_id: str | None = None
    customer_name: str = Field(..., min_length=1)
    customer_email: str | None = None
    customer_phone: str = Field(..., min_length=1)
    billing_address: dict[str, Any] | None = None
    shipping_address: dict[str, Any] | None = None
    tax_amount: float = Field(default=0, ge=0)
    shipping_amount: float = Field(default=0, ge=0)
    discount_amount: float = Field(default=0, ge=0)
    currency: str | None = None
    payment_method: str | None = None
    notes: str | None = None
    tags: list[str] | None = None
    items: list[OrderItemInput] = Field(..., min_length=1)


class OrderUpdateRequest(BaseModel):
    """Status and bookkeeping fields an admin may change."""

    order_status: str | None = None
    payment_status: str | None = None
    fulfillment_status: str | None = None
    payment_reference: str | None = None
    notes: str | None = None
    tags: list[str] | None = None


class OrderCreatedResponse(BaseModel):
    """Outcome of order creation; ``result`` is whatever the procedure returned."""

    order_number: str
    subtotal: float
    total_amount: float
    result: Any = None
