"""
Jowhara Catalog - Adapter presets.

Fixed table, realtime on by default, optional "active only" filter.
All filtering and ordering is left to the generic adapter.
"""

from jowhara.core.adapter import TableAdapter
from jowhara.core.query import FilterSpec, QueryConfig, SortSpec
from jowhara.core.supabase_client import StoreClient
from jowhara.core.tables import Table
from jowhara.observability import MetricsStore

ACTIVE = "active"


def products(
    store: StoreClient,
    filters: FilterSpec | None = None,
    sort: SortSpec | None = None,
    limit: int | None = None,
    realtime: bool = True,
    metrics: MetricsStore | None = None,
) -> TableAdapter:
    """Products, featured first then newest, unless ``sort`` says otherwise."""
    config = QueryConfig(filter=filters, sort=sort, limit=limit, realtime=realtime)
    return TableAdapter(store, Table.PRODUCTS, config, metrics=metrics)


def _catalog(
    store: StoreClient,
    table: Table,
    active_only: bool,
    realtime: bool,
    metrics: MetricsStore | None,
) -> TableAdapter:
    filters = FilterSpec(status=ACTIVE) if active_only else None
    return TableAdapter(store, table, QueryConfig(filter=filters, realtime=realtime), metrics=metrics)


def categories(
    store: StoreClient,
    active_only: bool = True,
    realtime: bool = True,
    metrics: MetricsStore | None = None,
) -> TableAdapter:
    return _catalog(store, Table.CATEGORIES, active_only, realtime, metrics)


def brands(
    store: StoreClient,
    active_only: bool = True,
    realtime: bool = True,
    metrics: MetricsStore | None = None,
) -> TableAdapter:
    return _catalog(store, Table.BRANDS, active_only, realtime, metrics)


def gender_categories(
    store: StoreClient,
    active_only: bool = True,
    realtime: bool = True,
    metrics: MetricsStore | None = None,
) -> TableAdapter:
    return _catalog(store, Table.GENDER_CATEGORIES, active_only, realtime, metrics)


def orders(
    store: StoreClient,
    customer_id: str | None = None,
    realtime: bool = True,
    metrics: MetricsStore | None = None,
) -> TableAdapter:
    """Orders, newest first, optionally for one customer."""
    config = QueryConfig(
        filter=FilterSpec(customer=customer_id) if customer_id else None,
        sort=SortSpec(column="created_at", ascending=False),
        realtime=realtime,
    )
    return TableAdapter(store, Table.ORDERS, config, metrics=metrics)
