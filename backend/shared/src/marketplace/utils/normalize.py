"""Coercion helpers for loosely-typed payloads and stored documents.

Request bodies, lead metadata and resource attributes arrive as JSON-like
values of uncertain shape. These helpers turn them into canonical Python
values (or None) before any validation logic runs.
"""

import datetime as dt
import json
import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

_WHITESPACE = re.compile(r"\s+")
_CENT = Decimal("0.01")
MAX_MONEY = Decimal("999999999999.99")
_EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.UTC)

DAY_IN_MS = 24 * 60 * 60 * 1000


def has_value(value: Any) -> bool:
    """True unless value is None or blank once stringified."""
    return value is not None and str(value).strip() != ""


def normalize_text(value: Any, max_length: int = 0) -> str:
    """Trim, collapse inner whitespace and optionally truncate."""
    normalized = _WHITESPACE.sub(" ", str(value if value is not None else "").strip())
    if not max_length:
        return normalized
    return normalized[:max_length]


def first_text(*values: Any, max_length: int = 0) -> str:
    """Return the first candidate that normalizes to a non-empty string."""
    for value in values:
        text = normalize_text(value, max_length)
        if text:
            return text
    return ""


def _to_decimal(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        number = Decimal(str(value))
    else:
        try:
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    if not number.is_finite():
        return None
    return number


def round_money(value: Decimal) -> Decimal:
    """Round to the cent, half away from zero."""
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def to_money(value: Any, fallback: Decimal | None = None) -> Decimal | None:
    """Parse a non-negative monetary amount rounded to 2 decimal places.

    Missing values, values that are not finite non-negative numbers and
    values above MAX_MONEY return ``fallback``.
    """
    if value is None or (isinstance(value, str) and value == ""):
        return fallback
    number = _to_decimal(value)
    if number is None or number < 0 or number > MAX_MONEY:
        return fallback
    return round_money(number)


def to_non_negative_int(value: Any, fallback: int | None = None) -> int | None:
    """Truncate a number toward zero; negatives and junk return fallback."""
    if value is None:
        return fallback
    number = _to_decimal(value)
    if number is None:
        return fallback
    truncated = int(number)
    return truncated if truncated >= 0 else fallback


def clamp_int(value: Any, minimum: int, maximum: int, fallback: int) -> int:
    """Parse an integer and clamp it to [minimum, maximum]."""
    parsed = to_non_negative_int(value, fallback)
    if parsed is None:
        return fallback
    return max(minimum, min(maximum, parsed))


def parse_instant(value: Any) -> dt.datetime | None:
    """Parse an absolute instant, returning an aware UTC datetime or None.

    Accepts ISO-8601 strings (date-only strings mean midnight UTC, naive
    timestamps are read as UTC), date/datetime objects and epoch
    milliseconds.
    """
    if not has_value(value) or isinstance(value, bool):
        return None

    try:
        if isinstance(value, dt.datetime):
            parsed = value
        elif isinstance(value, dt.date):
            parsed = dt.datetime(value.year, value.month, value.day)
        elif isinstance(value, (int, float, Decimal)):
            number = _to_decimal(value)
            if number is None:
                return None
            return _EPOCH + dt.timedelta(milliseconds=int(number))
        else:
            parsed = dt.datetime.fromisoformat(str(value).strip())
    except (ValueError, OverflowError):
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)


def to_epoch_ms(instant: dt.datetime) -> int:
    """Milliseconds since the Unix epoch for an aware datetime."""
    return (instant - _EPOCH) // dt.timedelta(milliseconds=1)


def parse_json_object(value: Any) -> dict[str, Any]:
    """Return value as a dict, decoding JSON strings; anything else is {}."""
    if isinstance(value, dict):
        return value
    if not has_value(value) or not isinstance(value, str):
        return {}
    try:
        parsed = json.loads(value)
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def parse_string_list(value: Any, max_length: int = 80) -> list[str]:
    """Parse a list (or JSON-encoded list) into lower-case normalized strings."""
    if isinstance(value, str):
        try:
            value = json.loads(value or "[]")
        except ValueError:
            return []
    if not isinstance(value, (list, tuple, set)):
        return []
    items = (normalize_text(item, max_length).lower() for item in value)
    return [item for item in items if item]


def safe_json(value: Any, max_length: int = 20000) -> str:
    """Serialize to JSON truncated to max_length; unserializable → '{}'."""
    try:
        return json.dumps(value, default=str)[:max_length]
    except (TypeError, ValueError):
        return "{}"
