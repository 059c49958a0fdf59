"""
Jowhara Core - Query composition.

Turns a declarative QueryConfig into PostgREST builder calls.

Filter translation is a lookup table keyed by (table, filter key). A key
that has no entry for the queried table is ignored, so the filters each
table understands can be read straight off FILTER_RULES.
"""

import math
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jowhara.core.tables import Table, default_sort, table_name

PredicateBuilder = Callable[[Any, Any], Any]

# Characters PostgREST treats as syntax inside an or=(...) expression
_RESERVED_IN_OR = set(',()"\\:')


def parse_number(value: Any) -> float | None:
    """Finite float from a number or numeric string, None otherwise."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def coerce_number(value: Any, default: float = 0.0) -> float:
    """Parse a numeric input, falling back to ``default`` instead of failing."""
    number = parse_number(value)
    return default if number is None else number


# =============================================================================
# Configuration models
# =============================================================================


class FilterSpec(BaseModel):
    """Caller-supplied constraints. None means "no constraint"."""

    model_config = ConfigDict(frozen=True)

    category: str | None = None
    brand: str | None = None
    gender: str | None = None
    price_range: tuple[float, float] | None = None
    featured: bool | None = None
    status: str | None = None
    search: str | None = None
    customer: str | None = None
    product: str | None = None

    @field_validator("price_range", mode="before")
    @classmethod
    def _coerce_price_range(cls, value: Any) -> Any:
        if value is None:
            return None
        low, high = value
        return (coerce_number(low), coerce_number(high))


class SortSpec(BaseModel):
    """Explicit ordering; replaces the table default entirely."""

    model_config = ConfigDict(frozen=True)

    column: str = Field(..., min_length=1)
    ascending: bool = True


class QueryConfig(BaseModel):
    """Everything that determines what an adapter fetches."""

    model_config = ConfigDict(frozen=True)

    filter: FilterSpec | None = None
    sort: SortSpec | None = None
    limit: int | None = Field(default=None, gt=0)
    realtime: bool = False


# =============================================================================
# Predicate builders
# =============================================================================


@dataclass(frozen=True)
class FilterRule:
    """How one filter key narrows one table."""

    build: PredicateBuilder
    # False and "" still constrain (e.g. featured=False)
    keep_falsy: bool = False


def quote_or_value(value: str) -> str:
    """Quote a value for an or=(...) expression when it carries PostgREST syntax."""
    if not any(char in _RESERVED_IN_OR for char in value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def ilike_any(*columns: str) -> PredicateBuilder:
    """Case-insensitive substring match on any of ``columns``."""

    def build(query: Any, value: str) -> Any:
        pattern = quote_or_value(f"%{value.strip()}%")
        return query.or_(",".join(f"{column}.ilike.{pattern}" for column in columns))

    return build


def equals(column: str) -> PredicateBuilder:
    def build(query: Any, value: Any) -> Any:
        return query.eq(column, value)

    return build


def active_flag(query: Any, value: str) -> Any:
    return query.eq("active", value == "active")


def price_between(query: Any, value: tuple[float, float]) -> Any:
    low, high = value
    return query.gte("price", low).lte("price", high)


_name_or_description = ilike_any("name", "description")
_catalog_rules = {
    "status": FilterRule(active_flag, keep_falsy=True),
    "search": FilterRule(_name_or_description),
}

FILTER_RULES: dict[tuple[str, str], FilterRule] = {
    (Table.PRODUCTS.value, "category"): FilterRule(equals("category_id")),
    (Table.PRODUCTS.value, "brand"): FilterRule(equals("brand_id")),
    (Table.PRODUCTS.value, "gender"): FilterRule(equals("gender_category")),
    (Table.PRODUCTS.value, "price_range"): FilterRule(price_between),
    (Table.PRODUCTS.value, "featured"): FilterRule(equals("featured"), keep_falsy=True),
    (Table.PRODUCTS.value, "status"): FilterRule(equals("status")),
    (Table.PRODUCTS.value, "search"): FilterRule(_name_or_description),
    **{(Table.CATEGORIES.value, key): rule for key, rule in _catalog_rules.items()},
    **{(Table.BRANDS.value, key): rule for key, rule in _catalog_rules.items()},
    **{(Table.GENDER_CATEGORIES.value, key): rule for key, rule in _catalog_rules.items()},
    (Table.BANNERS.value, "status"): FilterRule(active_flag, keep_falsy=True),
    (Table.BANNERS.value, "search"): FilterRule(ilike_any("title", "description")),
    (Table.ORDERS.value, "status"): FilterRule(equals("order_status")),
    (Table.ORDERS.value, "customer"): FilterRule(equals("customer_id")),
    (Table.ORDERS.value, "search"): FilterRule(
        ilike_any("order_number", "customer_name", "customer_phone")
    ),
    (Table.INVENTORY_LOGS.value, "product"): FilterRule(equals("product_id")),
    (Table.PRODUCT_VARIANTS.value, "product"): FilterRule(equals("product_id")),
    (Table.PRODUCT_REVIEWS.value, "product"): FilterRule(equals("product_id")),
    (Table.PRODUCT_REVIEWS.value, "status"): FilterRule(equals("status")),
}


def recognized_filters(table: Table | str) -> set[str]:
    """Filter keys that have an effect on ``table``."""
    name = table_name(table)
    return {key for (rule_table, key) in FILTER_RULES if rule_table == name}


# =============================================================================
# Composition
# =============================================================================


def apply_filters(query: Any, table: Table | str, spec: FilterSpec | None) -> Any:
    """Apply every filter key that is set and registered for ``table``."""
    if spec is None:
        return query

    name = table_name(table)
    for key, value in spec.model_dump().items():
        if value is None:
            continue
        rule = FILTER_RULES.get((name, key))
        if rule is None:
            continue
        if not value and not rule.keep_falsy:
            continue
        if isinstance(value, str) and not rule.keep_falsy and not value.strip():
            continue
        query = rule.build(query, value)
    return query


def apply_sort(query: Any, table: Table | str, sort: SortSpec | None) -> Any:
    """Explicit sort, or the table's default ordering."""
    if sort is not None:
        return query.order(sort.column, desc=not sort.ascending)
    for column, ascending in default_sort(table):
        query = query.order(column, desc=not ascending)
    return query


def compose_query(query: Any, table: Table | str, config: QueryConfig) -> Any:
    """Filters, then ordering, then limit. Count mode is set by the caller's select."""
    query = apply_filters(query, table, config.filter)
    query = apply_sort(query, table, config.sort)
    if config.limit is not None:
        query = query.limit(config.limit)
    return query
