"""
Utility helpers shared across routers/services.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import Path, Query

from .config import get_settings
from .exceptions import ParametersException

# Largest identifier accepted from clients; fits every backend's BIGINT and a JS number.
MAX_SAFE_ID = 2**53 - 1
_MAX_SAFE_DIGITS = len(str(MAX_SAFE_ID))


def to_safe_int(value: Any) -> Optional[int]:
    """Return `value` as an int, or None when it is not an integral number.

    Values outside +/- MAX_SAFE_ID are treated as invalid too, so callers never
    hand an oversized integer to the database.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if abs(value) <= MAX_SAFE_ID else None
    text = str(value if value is not None else "").strip()
    if text[:1] in "+-":
        sign, digits = text[:1], text[1:]
    else:
        sign, digits = "", text
    if not digits.isdecimal():
        return None
    digits = digits.lstrip("0") or "0"
    if len(digits) > _MAX_SAFE_DIGITS:
        return None
    number = int(sign + digits)
    return number if abs(number) <= MAX_SAFE_ID else None


def get_safe_param_id(id: str = Path(...)) -> int:
    """Route dependency: coerce the `{id}` path segment to a positive int."""
    value = to_safe_int(id)
    if value is None or value <= 0:
        raise ParametersException(msg="invalid route parameter")
    return value


class Pagination:
    """Offset/limit pair derived from the `page` and `count` query parameters."""

    def __init__(self, start: int, count: int):
        self.start = start
        self.count = count

    def __repr__(self) -> str:
        return f"Pagination(start={self.start}, count={self.count})"


def paginate(
    page: Optional[str] = Query(None),
    count: Optional[str] = Query(None),
) -> Pagination:
    """Route dependency: `count` falls back to COUNT_DEFAULT and is capped at COUNT_MAX."""
    settings = get_settings()
    count_value = settings.count_default if count in (None, "") else to_safe_int(count)
    page_value = 0 if page in (None, "") else to_safe_int(page)
    if count_value is None or count_value < 1:
        raise ParametersException(msg="count must be a positive integer")
    if page_value is None or page_value < 0:
        raise ParametersException(msg="page must be a non-negative integer")
    count_value = min(count_value, settings.count_max)
    start = page_value * count_value
    if start > MAX_SAFE_ID:
        raise ParametersException(msg="page is out of range")
    return Pagination(start=start, count=count_value)
