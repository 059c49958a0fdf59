"""
Jowhara Inventory - Schemas.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class InventoryAdjustmentRequest(BaseModel):
    """A stock movement for a product or one of its variants."""

    product_id: str = Field(..., min_length=1)
    quantity_change: int = Field(..., description="Positive to add stock, negative to remove")
    change_type: str = Field(..., min_length=1, description="e.g. restock, sale, return, adjustment")
    variant_id: str | None = None
    reference_id: str | None = None
    reference_type: str | None = None
    notes: str | None = None

    @field_validator("quantity_change")
    @classmethod
    def non_zero(cls, v: int) -> int:
        if v == 0:
            raise ValueError("quantity_change must not be zero")
        return v


class InventoryAdjustmentResponse(BaseModel):
    """Outcome of an adjustment; ``result`` is whatever the procedure returned."""

    product_id: str
    variant_id: str | None = None
    quantity_change: int
    change_type: str
    result: Any = None
