"""
Jowhara Products - Router.

API endpoints for products.
"""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sse_starlette.sse import EventSourceResponse

from jowhara.config import Settings, get_settings
from jowhara.core.query import FilterSpec, SortSpec
from jowhara.core.supabase_client import StoreClient
from jowhara.deps import get_store, require_products, require_realtime
from jowhara.modules.listing import stream_result_sets
from jowhara.modules.products.schemas import ProductCreate, ProductUpdate
from jowhara.modules.products.service import ProductsService
from jowhara.schemas import ListResponse

router = APIRouter(
    prefix="/products",
    tags=["products"],
    dependencies=[require_products],
)


def get_service(store: StoreClient = Depends(get_store)) -> ProductsService:
    """Get products service instance."""
    return ProductsService(store)


def product_filters(
    search: str | None = None,
    category: str | None = None,
    brand: str | None = None,
    gender: str | None = None,
    price_min: str | None = None,
    price_max: str | None = None,
    featured: bool | None = None,
    status: str | None = None,
) -> FilterSpec:
    """
    Filters from query parameters.

    A price range needs both bounds; unparseable bounds become 0.
    """
    price_range = (price_min, price_max) if price_min is not None and price_max is not None else None
    return FilterSpec(
        search=search,
        category=category,
        brand=brand,
        gender=gender,
        price_range=price_range,
        featured=featured,
        status=status,
    )


def product_sort(sort: str | None = None, desc: bool = False) -> SortSpec | None:
    return SortSpec(column=sort, ascending=not desc) if sort else None


@router.get("", response_model=ListResponse[dict[str, Any]])
async def list_products(
    filters: FilterSpec = Depends(product_filters),
    sort: SortSpec | None = Depends(product_sort),
    limit: int | None = Query(default=None, ge=1, le=1000),
    service: ProductsService = Depends(get_service),
):
    """List products. Featured first, newest first, unless ``sort`` is given."""
    result = await service.list_products(filters, sort, limit)
    return ListResponse[dict[str, Any]](items=result.rows, total=result.total)


@router.get("/live", dependencies=[require_realtime])
async def live_products(
    filters: FilterSpec = Depends(product_filters),
    sort: SortSpec | None = Depends(product_sort),
    limit: int | None = Query(default=None, ge=1, le=1000),
    service: ProductsService = Depends(get_service),
    settings: Settings = Depends(get_settings),
):
    """Stream product list snapshots (SSE), re-sent on every product change."""
    return EventSourceResponse(
        stream_result_sets(service.live(filters, sort, limit)),
        ping=settings.live.ping_seconds,
    )


@router.get("/search")
async def search_products(
    q: str = "",
    filters: FilterSpec = Depends(product_filters),
    service: ProductsService = Depends(get_service),
) -> list[dict[str, Any]]:
    """Active products matching ``q`` in name, description or ingredients."""
    return await service.search(q, filters)


@router.get("/{product_id}")
async def get_product(
    product_id: UUID,
    service: ProductsService = Depends(get_service),
) -> dict[str, Any]:
    """Product with category, brand, variants and approved reviews."""
    return await service.get_product(product_id)


@router.post("", status_code=201)
async def create_product(
    request: ProductCreate,
    service: ProductsService = Depends(get_service),
) -> dict[str, Any]:
    """Create a product."""
    return await service.create_product(request)


@router.patch("/{product_id}")
async def update_product(
    product_id: UUID,
    request: ProductUpdate,
    service: ProductsService = Depends(get_service),
) -> dict[str, Any]:
    """Update a product."""
    return await service.update_product(product_id, request)


@router.delete("/{product_id}", status_code=204)
async def delete_product(
    product_id: UUID,
    service: ProductsService = Depends(get_service),
):
    """Delete a product. Deleting a missing product succeeds."""
    await service.delete_product(product_id)
