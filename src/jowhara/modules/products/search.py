"""
Jowhara Products - Search and details.

Read-only, single-shot queries that embed related rows (category, brand,
variants, reviews). No count, no subscription.
"""

from typing import Any
from uuid import UUID

from postgrest.exceptions import APIError

from jowhara.core.query import FilterSpec, apply_filters, ilike_any
from jowhara.core.supabase_client import StoreClient, translate_store_error
from jowhara.core.tables import Table, default_sort
from jowhara.exceptions import NotFoundException

SEARCH_SELECT = (
    f"*, {Table.CATEGORIES.value}!inner(name, slug), "
    f"{Table.BRANDS.value}(name, slug)"
)
DETAILS_SELECT = (
    f"*, {Table.CATEGORIES.value}(name, slug, description), "
    f"{Table.BRANDS.value}(name, slug, description), "
    f"{Table.PRODUCT_VARIANTS.value}(*), "
    f"{Table.PRODUCT_REVIEWS.value}(id, rating, title, review_text, customer_name, "
    "verified_purchase, created_at)"
)

_match_text = ilike_any("name", "description", "ingredients")


async def search_products(
    store: StoreClient,
    query: str,
    filters: FilterSpec | None = None,
) -> list[dict[str, Any]]:
    """
    Active products whose name, description or ingredients contain ``query``.

    Each row carries its category (required) and brand display fields.
    ``filters`` narrows further; its status and search keys are ignored
    because search always means active products matching ``query``.
    """
    builder = store.table(Table.PRODUCTS.value).select(SEARCH_SELECT).eq("status", "active")
    if query and query.strip():
        builder = _match_text(builder, query)
    if filters is not None:
        builder = apply_filters(
            builder,
            Table.PRODUCTS,
            filters.model_copy(update={"status": None, "search": None}),
        )
    for column, ascending in default_sort(Table.PRODUCTS):
        builder = builder.order(column, desc=not ascending)

    try:
        response = await builder.execute()
    except APIError as exc:
        raise translate_store_error(exc, Table.PRODUCTS.value) from exc
    return response.data or []


async def get_product_details(store: StoreClient, product_id: UUID | str) -> dict[str, Any]:
    """One product with category, brand, variants and approved reviews."""
    try:
        response = await (
            store.table(Table.PRODUCTS.value)
            .select(DETAILS_SELECT)
            .eq("id", str(product_id))
            .eq(f"{Table.PRODUCT_REVIEWS.value}.status", "approved")
            .limit(1)
            .execute()
        )
    except APIError as exc:
        raise translate_store_error(exc, Table.PRODUCTS.value, product_id) from exc
    if not response.data:
        raise NotFoundException(Table.PRODUCTS.value, product_id)
    return response.data[0]
