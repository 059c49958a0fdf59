"""
Jowhara Core - Table registry.

Logical tables of the catalog and their default ordering.
"""

from enum import Enum


class Table(str, Enum):
    """Known logical tables in the Supabase project."""

    PRODUCTS = "enhanced_products"
    CATEGORIES = "enhanced_categories"
    BRANDS = "enhanced_brands"
    GENDER_CATEGORIES = "gender_categories"
    ORDERS = "enhanced_orders"
    ORDER_ITEMS = "order_items"
    PRODUCT_VARIANTS = "product_variants"
    PRODUCT_REVIEWS = "product_reviews"
    INVENTORY_LOGS = "inventory_logs"
    BANNERS = "enhanced_banners"


# (column, ascending) pairs applied in order when no explicit sort is given
PRODUCT_DEFAULT_SORT: tuple[tuple[str, bool], ...] = (("featured", False), ("created_at", False))
CATALOG_DEFAULT_SORT: tuple[tuple[str, bool], ...] = (("sort_order", True), ("name", True))
JOURNAL_DEFAULT_SORT: tuple[tuple[str, bool], ...] = (("created_at", False),)

DEFAULT_SORTS: dict[str, tuple[tuple[str, bool], ...]] = {
    Table.PRODUCTS.value: PRODUCT_DEFAULT_SORT,
    Table.CATEGORIES.value: CATALOG_DEFAULT_SORT,
    Table.BRANDS.value: CATALOG_DEFAULT_SORT,
    Table.BANNERS.value: CATALOG_DEFAULT_SORT,
    Table.GENDER_CATEGORIES.value: (("name", True),),
    Table.ORDERS.value: JOURNAL_DEFAULT_SORT,
    Table.ORDER_ITEMS.value: JOURNAL_DEFAULT_SORT,
    Table.PRODUCT_VARIANTS.value: JOURNAL_DEFAULT_SORT,
    Table.PRODUCT_REVIEWS.value: JOURNAL_DEFAULT_SORT,
    Table.INVENTORY_LOGS.value: JOURNAL_DEFAULT_SORT,
}


def table_name(table: "Table | str") -> str:
    """Plain table name for a Table member or a raw string."""
    return table.value if isinstance(table, Table) else table


def default_sort(table: "Table | str") -> tuple[tuple[str, bool], ...]:
    """Default ordering for ``table``; unknown tables sort like catalog tables."""
    return DEFAULT_SORTS.get(table_name(table), CATALOG_DEFAULT_SORT)
