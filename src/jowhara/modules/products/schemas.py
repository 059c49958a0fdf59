"""
Jowhara Products - Schemas.

Pydantic models for product create/update. Numeric inputs are coerced
rather than rejected, blank images/tags are dropped and the slug is
derived from the name when missing.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from jowhara.core.query import coerce_number
from jowhara.forms import coerce_float, coerce_int, drop_blank, slugify

ProductStatus = Literal["active", "inactive", "draft", "archived"]
GenderCategory = Literal["Women", "Men", "Unisex"]

# field -> default used when the input is not a number
_INT_DEFAULTS = {"stock_quantity": 0, "low_stock_threshold": 5, "sort_order": 0}
_OPTIONAL_FLOATS = ("compare_price", "cost_price", "weight")


class _ProductFields(BaseModel):
    """Coercions shared by create and update."""

    @field_validator("price", mode="before", check_fields=False)
    @classmethod
    def _coerce_price(cls, value: Any) -> Any:
        return coerce_number(value, 0.0)

    @field_validator(*_OPTIONAL_FLOATS, mode="before", check_fields=False)
    @classmethod
    def _coerce_optional_float(cls, value: Any) -> Any:
        return coerce_float(value, None)

    @field_validator(*_INT_DEFAULTS, mode="before", check_fields=False)
    @classmethod
    def _coerce_int(cls, value: Any, info: ValidationInfo) -> Any:
        return coerce_int(value, _INT_DEFAULTS[info.field_name])

    @field_validator("images", "tags", mode="before", check_fields=False)
    @classmethod
    def _drop_blank(cls, value: Any) -> Any:
        return drop_blank(value)


class ProductCreate(_ProductFields):
    """Request to create a product. Only the name is required."""

    name: str = Field(..., min_length=1, max_length=300)
    slug: str = Field(..., min_length=1)
    sku: str | None = None
    brand_id: str | None = None
    category_id: str | None = None
    gender_category: GenderCategory = "Unisex"
    price: float = Field(default=0.0, ge=0)
    compare_price: float | None = None
    cost_price: float | None = None
    description: str | None = None
    short_description: str | None = None
    ingredients: str | None = None
    usage_instructions: str | None = None
    benefits: str | None = None
    images: list[str] = Field(default_factory=list)
    video_url: str | None = None
    weight: float | None = None
    stock_quantity: int = 0
    low_stock_threshold: int = 5
    track_inventory: bool = True
    allow_backorder: bool = False
    featured: bool = False
    status: ProductStatus = "active"
    seo_title: str | None = None
    seo_description: str | None = None
    tags: list[str] = Field(default_factory=list)
    sort_order: int = 0

    @model_validator(mode="before")
    @classmethod
    def _derive_slug(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("slug") and data.get("name"):
            data = {**data, "slug": slugify(data["name"])}
        return data

    @field_validator("sku", "brand_id", "category_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ProductUpdate(_ProductFields):
    """Partial product update; only fields sent are written."""

    name: str | None = Field(default=None, min_length=1, max_length=300)
    slug: str | None = Field(default=None, min_length=1)
    sku: str | None = None
    brand_id: str | None = None
    category_id: str | None = None
    gender_category: GenderCategory | None = None
    price: float | None = Field(default=None, ge=0)
    compare_price: float | None = None
    cost_price: float | None = None
    description: str | None = None
    short_description: str | None = None
    ingredients: str | None = None
    usage_instructions: str | None = None
    benefits: str | None = None
    images: list[str] | None = None
    video_url: str | None = None
    weight: float | None = None
    stock_quantity: int | None = None
    low_stock_threshold: int | None = None
    track_inventory: bool | None = None
    allow_backorder: bool | None = None
    featured: bool | None = None
    status: ProductStatus | None = None
    seo_title: str | None = None
    seo_description: str | None = None
    tags: list[str] | None = None
    sort_order: int | None = None

