"""
Shared fixtures.

FakeSupabase stands in for the supabase AsyncClient: an in-memory
PostgREST-like store (filters, ordering, exact counts, embedded
relations, unique and foreign-key constraints), the two stored
procedures and the realtime change feed.
"""

import asyncio
import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from jowhara.config import SupabaseSettings, get_settings
from jowhara.core.supabase_client import StoreClient
from jowhara.main import app
from jowhara.observability import MetricsStore, get_metrics_store

TABLES = (
    "enhanced_products",
    "enhanced_categories",
    "enhanced_brands",
    "gender_categories",
    "enhanced_orders",
    "order_items",
    "product_variants",
    "product_reviews",
    "inventory_logs",
    "enhanced_banners",
)

UNIQUE = {
    "enhanced_products": ("slug", "sku"),
    "enhanced_categories": ("slug",),
    "enhanced_brands": ("slug",),
    "gender_categories": ("name",),
    "enhanced_orders": ("order_number",),
}

FOREIGN_KEYS = {
    "enhanced_products": {"category_id": "enhanced_categories", "brand_id": "enhanced_brands"},
    "order_items": {"order_id": "enhanced_orders"},
    "product_variants": {"product_id": "enhanced_products"},
    "product_reviews": {"product_id": "enhanced_products"},
    "inventory_logs": {"product_id": "enhanced_products"},
}

# (table, embedded) -> ("one", fk on table) | ("many", fk on embedded)
RELATIONS = {
    ("enhanced_products", "enhanced_categories"): ("one", "category_id"),
    ("enhanced_products", "enhanced_brands"): ("one", "brand_id"),
    ("enhanced_products", "product_variants"): ("many", "product_id"),
    ("enhanced_products", "product_reviews"): ("many", "product_id"),
    ("enhanced_orders", "order_items"): ("many", "order_id"),
}

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


def api_error(code: str, message: str, details: str | None = None) -> APIError:
    return APIError({"code": code, "message": message, "details": details, "hint": None})


def ilike(value: Any, pattern: str) -> bool:
    if value is None:
        return False
    regex = "".join(".*" if c == "%" else "." if c == "_" else re.escape(c) for c in pattern)
    return re.fullmatch(regex, str(value), re.IGNORECASE | re.DOTALL) is not None


def split_top_level(text: str, quotes: bool = False) -> list[str]:
    """Split on commas outside parentheses (and, optionally, double quotes)."""
    parts, buf, depth, quoted, escaped = [], [], 0, False, False
    for char in text:
        if escaped:
            buf.append(char)
            escaped = False
            continue
        if quotes and quoted and char == "\\":
            buf.append(char)
            escaped = True
            continue
        if quotes and char == '"':
            quoted = not quoted
        elif not quoted and char == "(":
            depth += 1
        elif not quoted and char == ")":
            depth -= 1
        elif char == "," and depth == 0 and not quoted:
            parts.append("".join(buf).strip())
            buf = []
            continue
        buf.append(char)
    parts.append("".join(buf).strip())
    return [part for part in parts if part]


def unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return re.sub(r"\\(.)", r"\1", value[1:-1])
    return value


def parse_or(expression: str):
    predicates = []
    for part in split_top_level(expression, quotes=True):
        column, operator, value = part.split(".", 2)
        assert operator == "ilike", f"unsupported or_ operator {operator}"
        pattern = unquote(value)
        predicates.append(lambda row, c=column, p=pattern: ilike(row.get(c), p))
    return lambda row: any(predicate(row) for predicate in predicates)


def parse_select(columns: str) -> tuple[bool, list[tuple[str, bool, list[str]]]]:
    """'*, rel!inner(a, b)' -> (star, [(rel, inner, [a, b])])."""
    star = False
    embeds = []
    for item in split_top_level(columns):
        if item == "*":
            star = True
            continue
        match = re.fullmatch(r"(\w+)(!inner)?\((.*)\)", item, re.DOTALL)
        assert match, f"unsupported select item {item!r}"
        fields = [field.strip() for field in match.group(3).split(",") if field.strip()]
        embeds.append((match.group(1), bool(match.group(2)), fields))
    return star, embeds


def project(row: dict[str, Any], fields: list[str]) -> dict[str, Any]:
    if fields == ["*"]:
        return dict(row)
    return {field: row.get(field) for field in fields}


class FakeResponse:
    def __init__(self, data: Any, count: int | None = None):
        self.data = data
        self.count = count


class FakeQuery:
    """Chainable query builder over one FakeSupabase table."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.columns = "*"
        self.count_mode: str | None = None
        self.payload: Any = None
        self.predicates: list = []
        self.embedded_predicates: dict[str, list] = {}
        self.orders: list[tuple[str, bool]] = []
        self.row_limit: int | None = None

    # Operations

    def select(self, columns: str = "*", count: str | None = None) -> "FakeQuery":
        self.columns = columns
        self.count_mode = count
        return self

    def insert(self, rows: Any) -> "FakeQuery":
        self.op, self.payload = "insert", rows
        return self

    def update(self, data: dict[str, Any]) -> "FakeQuery":
        self.op, self.payload = "update", data
        return self

    def delete(self) -> "FakeQuery":
        self.op = "delete"
        return self

    # Filters

    def _add(self, column: str, predicate) -> "FakeQuery":
        if "." in column:
            relation, field = column.split(".", 1)
            self.embedded_predicates.setdefault(relation, []).append(
                lambda row, f=field: predicate(row.get(f))
            )
        else:
            self.predicates.append(lambda row, c=column: predicate(row.get(c)))
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        return self._add(column, lambda v: v == value)

    def gte(self, column: str, value: Any) -> "FakeQuery":
        return self._add(column, lambda v: v is not None and v >= value)

    def lte(self, column: str, value: Any) -> "FakeQuery":
        return self._add(column, lambda v: v is not None and v <= value)

    def ilike(self, column: str, pattern: str) -> "FakeQuery":
        return self._add(column, lambda v: ilike(v, pattern))

    def or_(self, expression: str) -> "FakeQuery":
        self.predicates.append(parse_or(expression))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.orders.append((column, desc))
        return self

    def limit(self, size: int) -> "FakeQuery":
        self.row_limit = size
        return self

    # Execution

    def _matches(self, row: dict[str, Any]) -> bool:
        return all(predicate(row) for predicate in self.predicates)

    def _sorted(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        # PostgREST: nulls last ascending, nulls first descending
        for column, desc in reversed(self.orders):
            present = [row for row in rows if row.get(column) is not None]
            missing = [row for row in rows if row.get(column) is None]
            present.sort(key=lambda row: row[column], reverse=desc)
            rows = missing + present if desc else present + missing
        return rows

    def _embed(self, row: dict[str, Any], embeds) -> dict[str, Any] | None:
        for relation, inner, fields in embeds:
            kind, fk = RELATIONS[(self.table, relation)]
            checks = self.embedded_predicates.get(relation, [])
            if kind == "one":
                target = self.db.find(relation, row.get(fk))
                if target is not None and not all(check(target) for check in checks):
                    target = None
                if target is None and inner:
                    return None
                row[relation] = project(target, fields) if target is not None else None
            else:
                children = [
                    project(child, fields)
                    for child in self.db.rows(relation)
                    if child.get(fk) == row.get("id") and all(check(child) for check in checks)
                ]
                if inner and not children:
                    return None
                row[relation] = children
        return row

    def _select(self) -> FakeResponse:
        star, embeds = parse_select(self.columns)
        rows = []
        for stored in self.db.rows(self.table):
            if not self._matches(stored):
                continue
            row = dict(stored) if star else {}
            row = self._embed(row, embeds)
            if row is not None:
                rows.append(row)
        rows = self._sorted(rows)
        count = len(rows) if self.count_mode == "exact" else None
        if self.row_limit is not None:
            rows = rows[: self.row_limit]
        return FakeResponse(rows, count)

    async def execute(self) -> FakeResponse:
        self.db.check(self.table)
        if self.op == "insert":
            rows = self.payload if isinstance(self.payload, list) else [self.payload]
            return FakeResponse(self.db.insert_rows(self.table, rows))
        if self.op == "update":
            return FakeResponse(self.db.update_rows(self.table, self._matches, self.payload))
        if self.op == "delete":
            return FakeResponse(self.db.delete_rows(self.table, self._matches))

        response = self._select()
        self.db.select_count[self.table] = self.db.select_count.get(self.table, 0) + 1
        if self.table in self.db.held_tables:
            gate = asyncio.get_running_loop().create_future()
            self.db.pending.append(gate)
            await gate
        return response


class FakeRpc:
    def __init__(self, db: "FakeSupabase", function_name: str, params: dict[str, Any]):
        self.db = db
        self.function_name = function_name
        self.params = params

    async def execute(self) -> FakeResponse:
        self.db.rpc_calls.append((self.function_name, self.params))
        if self.function_name in self.db.errors:
            raise self.db.errors[self.function_name]
        handler = RPC_HANDLERS.get(self.function_name)
        if handler is None:
            raise api_error("PGRST202", f"Could not find the function public.{self.function_name}")
        return FakeResponse(handler(self.db, self.params))


class FakeChannel:
    def __init__(self, db: "FakeSupabase", topic: str):
        self.db = db
        self.topic = topic
        self.bindings: list[tuple[str, str, str, Any]] = []
        self.subscribed = False

    def on_postgres_changes(self, event, callback, table="*", schema="public", filter=None):
        self.bindings.append((event, schema, table, callback))
        return self

    async def subscribe(self, callback=None):
        if self.db.join_gate is not None:
            self.db.joining += 1
            await self.db.join_gate.wait()
        if self not in self.db.channels:
            return self
        self.subscribed = True
        if callback is not None:
            callback("SUBSCRIBED", None)
        return self


class FakeSupabase:
    """In-memory replacement for supabase.AsyncClient."""

    def __init__(self):
        self.data: dict[str, list[dict[str, Any]]] = {table: [] for table in TABLES}
        self.errors: dict[str, Exception] = {}
        self.channels: list[FakeChannel] = []
        self.rpc_calls: list[tuple[str, dict[str, Any]]] = []
        self.select_count: dict[str, int] = {}
        self.held_tables: set[str] = set()
        self.pending: list[asyncio.Future] = []
        self.join_gate: asyncio.Event | None = None
        self.joining = 0
        self._clock = 0

    # Client surface

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, function_name: str, params: dict[str, Any]) -> FakeRpc:
        return FakeRpc(self, function_name, params)

    def channel(self, topic: str) -> FakeChannel:
        channel = FakeChannel(self, topic)
        self.channels.append(channel)
        return channel

    async def remove_channel(self, channel: FakeChannel) -> None:
        channel.subscribed = False
        if channel in self.channels:
            self.channels.remove(channel)

    async def remove_all_channels(self) -> None:
        for channel in self.channels:
            channel.subscribed = False
        self.channels.clear()

    # Storage

    def check(self, table: str) -> None:
        if table in self.errors:
            raise self.errors[table]
        if table not in self.data:
            raise api_error("42P01", f'relation "public.{table}" does not exist')

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self.data.get(table, [])

    def find(self, table: str, row_id: Any) -> dict[str, Any] | None:
        if row_id is None:
            return None
        return next((row for row in self.rows(table) if row["id"] == row_id), None)

    def _now(self) -> str:
        self._clock += 1
        return (BASE_TIME + timedelta(seconds=self._clock)).isoformat()

    def _check_constraints(self, table: str, row: dict[str, Any], ignore_id: Any = None) -> None:
        for column in UNIQUE.get(table, ()):
            value = row.get(column)
            if value is None:
                continue
            for other in self.rows(table):
                if other["id"] != ignore_id and other.get(column) == value:
                    raise api_error(
                        "23505",
                        f'duplicate key value violates unique constraint "{table}_{column}_key"',
                        f"Key ({column})=({value}) already exists.",
                    )
        for column, target in FOREIGN_KEYS.get(table, {}).items():
            value = row.get(column)
            if value is not None and self.find(target, value) is None:
                raise api_error(
                    "23503",
                    f'insert or update on table "{table}" violates foreign key constraint '
                    f'"{table}_{column}_fkey"',
                    f'Key ({column})=({value}) is not present in table "{target}".',
                )

    def insert_rows(self, table: str, rows: list[dict[str, Any]], emit: bool = True) -> list[dict[str, Any]]:
        created = []
        for row in rows:
            now = self._now()
            stored = {"id": str(uuid.uuid4()), "created_at": now, "updated_at": now, **row}
            self._check_constraints(table, stored)
            self.data[table].append(stored)
            created.append(dict(stored))
            if emit:
                self.emit(table, "INSERT", new=stored)
        return created

    def update_rows(self, table: str, matches, changes: dict[str, Any]) -> list[dict[str, Any]]:
        updated = []
        for index, row in enumerate(self.data[table]):
            if not matches(row):
                continue
            new = {**row, **changes, "updated_at": self._now()}
            self._check_constraints(table, new, ignore_id=row["id"])
            self.data[table][index] = new
            updated.append(dict(new))
            self.emit(table, "UPDATE", new=new, old=row)
        return updated

    def delete_rows(self, table: str, matches) -> list[dict[str, Any]]:
        removed = [row for row in self.data[table] if matches(row)]
        self.data[table] = [row for row in self.data[table] if not matches(row)]
        for row in removed:
            self.emit(table, "DELETE", old=row)
        return removed

    def seed(self, table: str, **row: Any) -> dict[str, Any]:
        """Insert a row without notifying subscribers."""
        return self.insert_rows(table, [row], emit=False)[0]

    # Realtime

    def emit(self, table: str, event_type: str, new: dict | None = None, old: dict | None = None) -> None:
        payload = {
            "schema": "public",
            "table": table,
            "eventType": event_type,
            "new": dict(new or {}),
            "old": dict(old or {}),
        }
        for channel in list(self.channels):
            if not channel.subscribed:
                continue
            for event, _schema, bound_table, callback in channel.bindings:
                if bound_table in ("*", table) and event in ("*", event_type):
                    callback(payload)

    def subscriptions(self, table: str) -> list[FakeChannel]:
        return [
            channel
            for channel in self.channels
            if channel.subscribed and any(binding[2] == table for binding in channel.bindings)
        ]

    # Gating selects, for interleaving concurrent fetches

    def hold(self, table: str) -> None:
        self.held_tables.add(table)

    async def wait_for_pending(self, count: int) -> None:
        for _ in range(100):
            if len(self.pending) >= count:
                return
            await asyncio.sleep(0)
        raise AssertionError(f"expected {count} pending selects, got {len(self.pending)}")

    def release(self, index: int) -> None:
        self.pending.pop(index).set_result(None)

    # Gating channel joins, for interleaving subscribe with close and reconfigure

    def hold_joins(self) -> asyncio.Event:
        self.join_gate = asyncio.Event()
        return self.join_gate

    async def wait_for_joins(self, count: int) -> None:
        for _ in range(100):
            if self.joining >= count:
                return
            await asyncio.sleep(0)
        raise AssertionError(f"expected {count} channel joins, got {self.joining}")


def _create_order_with_items(db: FakeSupabase, params: dict[str, Any]) -> str:
    order = db.insert_rows("enhanced_orders", [params["order_data"]])[0]
    db.insert_rows("order_items", [{**item, "order_id": order["id"]} for item in params["items_data"]])
    return order["id"]


def _update_product_inventory(db: FakeSupabase, params: dict[str, Any]) -> dict[str, Any]:
    product = db.find("enhanced_products", params["p_product_id"])
    if product is None:
        raise api_error("P0002", f"Product {params['p_product_id']} not found")
    previous = product.get("stock_quantity") or 0
    new_quantity = previous + params["p_quantity_change"]
    db.update_rows("enhanced_products", lambda row: row["id"] == product["id"], {"stock_quantity": new_quantity})
    db.insert_rows(
        "inventory_logs",
        [
            {
                "product_id": params["p_product_id"],
                "variant_id": params["p_variant_id"],
                "change_type": params["p_change_type"],
                "quantity_change": params["p_quantity_change"],
                "previous_quantity": previous,
                "new_quantity": new_quantity,
                "reference_id": params["p_reference_id"],
                "reference_type": params["p_reference_type"],
                "notes": params["p_notes"],
            }
        ],
    )
    return {"previous_quantity": previous, "new_quantity": new_quantity}


RPC_HANDLERS = {
    "create_order_with_items": _create_order_with_items,
    "update_product_inventory": _update_product_inventory,
}


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def store(fake) -> StoreClient:
    return StoreClient(SupabaseSettings(), client=fake)


@pytest.fixture
def metrics() -> MetricsStore:
    return MetricsStore()


@pytest.fixture(autouse=True)
def _reset_global_state():
    get_settings.cache_clear()
    get_metrics_store().reset()
    yield
    get_settings.cache_clear()
    get_metrics_store().reset()


@pytest.fixture
def client(store):
    """Test client bound to the fake store; the lifespan is not run."""
    app.state.store = store
    yield TestClient(app)
    app.state.store = None
