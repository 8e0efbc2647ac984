"""Formatting, coercion and text-fitting helpers."""

from __future__ import annotations

import json
import math
import re
from typing import Any, Iterable, List, Optional, Protocol

from dateutil import parser as dateutil_parser

PLACEHOLDER = "—"
ELLIPSIS = "…"

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_AMOUNT = re.compile(r"[+-]?\$?[+-]?(?:\d[\d,]*(?:\.\d*)?|\.\d+)")


class TextWidthProvider(Protocol):
    def text_width(self, text: str, size: float, style: str = "") -> float:
        ...


def money(amount: Any, symbol: str = "$") -> str:
    value = finite_number(amount)
    if value is None:
        value = 0.0
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def fmt_qty(qty: Any) -> str:
    quantity = finite_number(qty)
    if quantity is None:
        return ""
    if quantity.is_integer():
        return str(int(quantity))
    return f"{quantity:.2f}"


def finite_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None when it is not numeric.

    Booleans are rejected. Strings are accepted only when the whole string is
    an amount, optionally with a dollar sign and thousands separators
    ("$1,200.50", "-$3"). Free text such as "5 to 7 days" is not a number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not _AMOUNT.fullmatch(text):
            return None
        cleaned = text.replace("$", "").replace(",", "")
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def safe_float(value: Any, default: float = 0.0) -> float:
    number = finite_number(value)
    return default if number is None else number


def coalesce_number(*values: Any) -> Optional[float]:
    """First finite numeric value among ``values``, in order."""
    for value in values:
        number = finite_number(value)
        if number is not None:
            return number
    return None


def normalize_string(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def coalesce_string(*values: Any) -> Optional[str]:
    """First non-blank string among ``values``, trimmed."""
    for value in values:
        normalized = normalize_string(value)
        if normalized:
            return normalized
    return None


def to_string_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return ""
        return str(int(value)) if value.is_integer() else repr(value)
    try:
        return json.dumps(value, separators=(",", ":"))
    except (TypeError, ValueError):
        return ""


def to_string_array(value: Any) -> List[str]:
    """Coerce a list, a delimited string or a JSON-encoded list into strings."""
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        result = []
        for item in value:
            text = normalize_string(item if isinstance(item, str) else to_string_value(item))
            if text:
                result.append(text)
        return result
    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return []
        if trimmed.startswith("[") or trimmed.startswith("{"):
            try:
                parsed = json.loads(trimmed)
            except ValueError:
                parsed = None
            if isinstance(parsed, list):
                return to_string_array(parsed)
        return [part.strip() for part in re.split(r"[,;|]", trimmed) if part.strip()]
    text = normalize_string(to_string_value(value))
    return [text] if text else []


def merge_unique_strings(*arrays: Iterable[str]) -> List[str]:
    seen = set()
    result: List[str] = []
    for array in arrays:
        for value in array:
            if not value or value in seen:
                continue
            seen.add(value)
            result.append(value)
    return result


def normalize_date(raw: Any) -> str:
    """Return a date as YYYY-MM-DD, the raw text when unparseable, or a dash."""
    text = normalize_string(raw)
    if not text:
        return PLACEHOLDER
    if _ISO_DATE.match(text):
        return text
    try:
        return dateutil_parser.parse(text).strftime("%Y-%m-%d")
    except (ValueError, OverflowError):
        return text


def split_lines(text: str) -> List[str]:
    if not text:
        return []
    return [line.strip() for line in text.splitlines() if line.strip() != ""]


def clip_text(
    fonts_obj: TextWidthProvider,
    text: str,
    size: float,
    max_width: float,
    style: str = "",
    ellipsis: str = ELLIPSIS,
) -> str:
    """Fit ``text`` into ``max_width``, truncating with ``ellipsis`` if needed.

    The prefix is grown one character at a time while ``prefix + ellipsis``
    still fits, so the result can be one character shorter than the best
    possible cut but is never wider than ``max_width``. When not even the
    ellipsis fits, the ellipsis alone is returned.
    """
    if fonts_obj.text_width(text, size, style) <= max_width:
        return text

    result = ""
    for char in text:
        candidate = result + char
        if fonts_obj.text_width(candidate + ellipsis, size, style) > max_width:
            break
        result = candidate
    return result + ellipsis if result else ellipsis


def fmt_percent(rate: float) -> str:
    text = f"{rate:.2f}"
    return text[:-3] if text.endswith(".00") else text
