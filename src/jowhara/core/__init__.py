"""
Jowhara Core - Data access against the Supabase store.

- supabase_client: connection handle with an explicit connect/close lifetime
- tables: known logical tables and their default ordering
- query: filter/sort/limit configuration and its translation to PostgREST
- realtime: change-feed subscription handle
- adapter: the generic query/subscription adapter
"""

from jowhara.core.adapter import ResultSet, TableAdapter
from jowhara.core.query import FilterSpec, QueryConfig, SortSpec
from jowhara.core.supabase_client import StoreClient
from jowhara.core.tables import Table

__all__ = [
    "FilterSpec",
    "QueryConfig",
    "ResultSet",
    "SortSpec",
    "StoreClient",
    "Table",
    "TableAdapter",
]
