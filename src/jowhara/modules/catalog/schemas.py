"""
Jowhara Catalog - Schemas.

Pydantic models for categories, brands and gender categories.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from jowhara.forms import coerce_int, slugify


class _CatalogEntryCreate(BaseModel):
    """Derives ``slug`` from ``name`` when left out; coerces ``sort_order``."""

    @model_validator(mode="before")
    @classmethod
    def _derive_slug(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("slug") and data.get("name"):
            data = {**data, "slug": slugify(data["name"])}
        return data

    @field_validator("sort_order", mode="before", check_fields=False)
    @classmethod
    def _coerce_sort_order(cls, value: Any) -> Any:
        return coerce_int(value, 0)


# =============================================================================
# Categories
# =============================================================================


class CategoryCreate(_CatalogEntryCreate):
    """Request to create a category."""

    name: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1)
    description: str | None = None
    image: str | None = None
    parent_id: str | None = None
    sort_order: int = 0
    active: bool = True


class CategoryUpdate(BaseModel):
    """Partial category update."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    slug: str | None = Field(default=None, min_length=1)
    description: str | None = None
    image: str | None = None
    parent_id: str | None = None
    sort_order: int | None = None
    active: bool | None = None

    @field_validator("sort_order", mode="before")
    @classmethod
    def _coerce_sort_order(cls, value: Any) -> Any:
        return None if value is None else coerce_int(value, 0)


# =============================================================================
# Brands
# =============================================================================


class BrandCreate(_CatalogEntryCreate):
    """Request to create a brand."""

    name: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1)
    description: str | None = None
    logo: str | None = None
    website: str | None = None
    country: str | None = None
    active: bool = True
    featured: bool = False
    sort_order: int = 0


class BrandUpdate(BaseModel):
    """Partial brand update."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    slug: str | None = Field(default=None, min_length=1)
    description: str | None = None
    logo: str | None = None
    website: str | None = None
    country: str | None = None
    active: bool | None = None
    featured: bool | None = None
    sort_order: int | None = None

    @field_validator("sort_order", mode="before")
    @classmethod
    def _coerce_sort_order(cls, value: Any) -> Any:
        return None if value is None else coerce_int(value, 0)


# =============================================================================
# Gender categories
# =============================================================================


class GenderCategoryCreate(BaseModel):
    """Request to create a gender category (Women, Men, Unisex...)."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    image: str | None = None
    active: bool = True


class GenderCategoryUpdate(BaseModel):
    """Partial gender category update."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    image: str | None = None
    active: bool | None = None
