"""
Jowhara Catalog - Router.

API endpoints for categories, brands and gender categories. The three
tables share one shape, so their routers come from one factory.
"""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sse_starlette.sse import EventSourceResponse

from jowhara.config import Settings, get_settings
from jowhara.core.query import SortSpec
from jowhara.core.supabase_client import StoreClient
from jowhara.core.tables import Table
from jowhara.deps import (
    get_store,
    require_brands,
    require_categories,
    require_gender,
    require_realtime,
)
from jowhara.modules.catalog.schemas import (
    BrandCreate,
    BrandUpdate,
    CategoryCreate,
    CategoryUpdate,
    GenderCategoryCreate,
    GenderCategoryUpdate,
)
from jowhara.modules.catalog.service import CatalogService
from jowhara.modules.listing import stream_result_sets
from jowhara.schemas import ListResponse


def build_catalog_router(
    prefix: str,
    tag: str,
    table: Table,
    guard: Any,
    create_model: type[BaseModel],
    update_model: type[BaseModel],
) -> APIRouter:
    """Router with list, live, create, update and delete for one catalog table."""
    router = APIRouter(prefix=prefix, tags=[tag], dependencies=[guard])

    def get_service(store: StoreClient = Depends(get_store)) -> CatalogService:
        return CatalogService(store, table)

    @router.get("", response_model=ListResponse[dict[str, Any]])
    async def list_entries(
        status: str | None = None,
        search: str | None = None,
        sort: str | None = None,
        desc: bool = False,
        limit: int | None = Query(default=None, ge=1, le=1000),
        service: CatalogService = Depends(get_service),
    ):
        """List entries. ``status=active`` keeps only active ones."""
        sort_spec = SortSpec(column=sort, ascending=not desc) if sort else None
        result = await service.list_entries(status=status, search=search, sort=sort_spec, limit=limit)
        return ListResponse[dict[str, Any]](items=result.rows, total=result.total)

    @router.get("/live", dependencies=[require_realtime])
    async def live_entries(
        active_only: bool = False,
        service: CatalogService = Depends(get_service),
        settings: Settings = Depends(get_settings),
    ):
        """Stream snapshots (SSE) whenever the table changes."""
        return EventSourceResponse(
            stream_result_sets(service.live(active_only=active_only)),
            ping=settings.live.ping_seconds,
        )

    @router.post("", status_code=201)
    async def create_entry(
        payload: create_model,  # type: ignore[valid-type]
        service: CatalogService = Depends(get_service),
    ) -> dict[str, Any]:
        return await service.create(payload)

    @router.patch("/{entry_id}")
    async def update_entry(
        entry_id: UUID,
        payload: update_model,  # type: ignore[valid-type]
        service: CatalogService = Depends(get_service),
    ) -> dict[str, Any]:
        return await service.update(entry_id, payload)

    @router.delete("/{entry_id}", status_code=204)
    async def delete_entry(
        entry_id: UUID,
        service: CatalogService = Depends(get_service),
    ):
        await service.delete(entry_id)

    return router


categories_router = build_catalog_router(
    "/categories", "categories", Table.CATEGORIES, require_categories, CategoryCreate, CategoryUpdate
)
brands_router = build_catalog_router(
    "/brands", "brands", Table.BRANDS, require_brands, BrandCreate, BrandUpdate
)
gender_router = build_catalog_router(
    "/gender-categories",
    "gender-categories",
    Table.GENDER_CATEGORIES,
    require_gender,
    GenderCategoryCreate,
    GenderCategoryUpdate,
)
