"""
Jowhara - Admin form helpers.

Admin payloads are forgiving: malformed numbers fall back to a default
instead of failing validation, blank list entries are dropped, and slugs
are derived from names.
"""

import re
from typing import Any

from jowhara.core.query import parse_number

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """'Rose & Oud Perfume' -> 'rose-oud-perfume'."""
    return _NON_SLUG.sub("-", name.lower()).strip("-")


def coerce_int(value: Any, default: int) -> int:
    # Zero counts as unset too, so a low-stock threshold of 0 becomes 5
    number = parse_number(value)
    return default if number is None else int(number) or default


def coerce_float(value: Any, default: float | None) -> float | None:
    # Zero counts as unset, so an optional price of 0 becomes None
    number = parse_number(value)
    return number or default


def drop_blank(values: Any) -> list[str]:
    """Keep non-blank strings from a list; anything else becomes []."""
    if not isinstance(values, list):
        return []
    return [value.strip() for value in values if isinstance(value, str) and value.strip()]
