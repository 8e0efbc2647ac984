"""Derive option summaries, option details and upgrades from cart metadata.

Line items carry free-form key/value metadata copied from the checkout
session (``option1_name``/``option1_value``, ``vehicle``, ``upgrades`` ...).
The helpers here turn those entries into display strings. Malformed entries
are dropped one at a time; nothing in this module raises on bad input.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from .formatting import to_string_value

OPTION_KEYWORDS = (
    "option",
    "vehicle",
    "fitment",
    "model",
    "variant",
    "trim",
    "package",
    "selection",
    "config",
    "size",
    "color",
)
UPGRADE_KEYWORDS = ("upgrade", "addon", "add_on", "add-on", "accessory")
IGNORE_OPTION_KEYS = (
    "shipping_option",
    "shipping_options",
    "shippingoption",
    "shipping_amount",
    "shipping_carrier",
    "shipping_service",
    "shipping_service_code",
    "shipping_service_name",
    "shipping_currency",
    "shipping_delivery_days",
    "shipping_estimated_delivery_date",
    "option_upcharge",
    "option_upcharge_display",
    "optionupcharge",
    "option_summary",
    "option_summary_display",
    "options_readable",
    "selected_options",
    "selected_options_json",
    "option_details_json",
    "configuration_signature",
    "option1_name",
    "option1_value",
    "option2_name",
    "option2_value",
    "option3_name",
    "option3_value",
    "base_price",
    "base_price_display",
    "baseprice",
    "display",
)
GENERIC_LABELS = {
    "variation",
    "variant",
    "option",
    "selected",
    "selection",
    "attribute",
    "config",
    "configured",
    "value",
    "name",
}
HIDDEN_SEGMENT_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"^base price",
        r"^option upcharge",
        r"^product image",
        r"^product url",
        r"^product name",
        r"^sanity ",
        r"^quantity:",
        r"^unit price",
        r"^shipping ",
    )
)

_OPTION_PAIR = re.compile(r"^option(?:[_-]?|)([a-z0-9]+)?[_-]?(name|value)$")
_LABEL_NOISE = re.compile(
    r"\b(option|selected|selection|value|display|name|field|attribute|choice|custom)\b"
)
_ZERO_AMOUNT = re.compile(r"^\$?0+(\.0+)?$")


@dataclass(frozen=True)
class MetadataEntry:
    key: str
    value: str


@dataclass(frozen=True)
class DerivedOptions:
    option_summary: Optional[str] = None
    option_details: Tuple[str, ...] = ()
    upgrades: Tuple[str, ...] = ()
    consumed_keys: Tuple[str, ...] = ()


def humanize(text: str) -> str:
    if not text:
        return ""
    spaced = re.sub(r"[_\-.]+", " ", text)
    spaced = re.sub(r"([a-z])([A-Z])", r"\1 \2", spaced)
    return " ".join(part[0].upper() + part[1:] for part in spaced.split(" ") if part)


def _clean(value: Any) -> str:
    return to_string_value(value).strip()


def normalize_metadata_entries(metadata: Any) -> List[MetadataEntry]:
    """Accept a list of ``{key, value}`` dicts or a plain mapping."""
    entries: List[MetadataEntry] = []
    if isinstance(metadata, (list, tuple)):
        for raw in metadata:
            if isinstance(raw, MetadataEntry):
                entries.append(raw)
                continue
            if not isinstance(raw, Mapping) or "key" not in raw or "value" not in raw:
                continue
            key = _clean(raw.get("key"))
            value = _clean(raw.get("value"))
            if key and value:
                entries.append(MetadataEntry(key, value))
    elif isinstance(metadata, Mapping):
        for raw_key, raw_value in metadata.items():
            key = _clean(raw_key)
            value = _clean(raw_value)
            if key and value:
                entries.append(MetadataEntry(key, value))
    return entries


def _canonical_label(label: str) -> str:
    stripped = _LABEL_NOISE.sub("", label.lower())
    return re.sub(r"[^a-z0-9]+", " ", stripped).strip()


def _should_skip_value(value: str) -> bool:
    trimmed = value.strip()
    if not trimmed:
        return True
    return bool(_ZERO_AMOUNT.match(trimmed)) or trimmed.lower() == "none"


def _parse_json(text: str) -> Any:
    if not (text.startswith("[") or text.startswith("{")):
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def _parse_option_value(value: str) -> List[str]:
    trimmed = value.strip()
    if not trimmed:
        return []
    parsed = _parse_json(trimmed)
    segments: List[str] = []
    if isinstance(parsed, list):
        for item in parsed:
            if not item:
                continue
            if isinstance(item, str):
                if item.strip():
                    segments.append(item.strip())
                continue
            if isinstance(item, Mapping):
                name = _clean(item.get("name"))
                label = _clean(item.get("label"))
                val = _clean(item.get("value"))
                if name and val:
                    segments.append(f"{name}: {val}")
                elif label and val:
                    segments.append(f"{label}: {val}")
                elif _clean(item):
                    segments.append(_clean(item))
    elif isinstance(parsed, Mapping):
        for key, raw in parsed.items():
            val = _clean(raw)
            if not val:
                continue
            label = humanize(str(key))
            segments.append(f"{label}: {val}" if label else val)
    return segments or [trimmed]


def _parse_list_value(value: str) -> List[str]:
    trimmed = value.strip()
    if not trimmed:
        return []
    parsed = _parse_json(trimmed)
    if isinstance(parsed, list):
        segments = []
        for item in parsed:
            if isinstance(item, str):
                if item.strip():
                    segments.append(item.strip())
            elif isinstance(item, Mapping):
                candidate = _clean(item.get("name")) or _clean(item.get("value")) or _clean(item.get("label"))
                if candidate:
                    segments.append(candidate)
        if segments:
            return segments
    return [part.strip() for part in re.split(r"[,;|]", trimmed) if part.strip()]


class _DetailRegistry:
    """Ordered option details, unique per canonical label (or value when unlabeled)."""

    def __init__(self) -> None:
        self._order: List[str] = []
        self._details: Dict[str, Tuple[str, str]] = {}

    def register(self, label: str, value: str) -> None:
        value = value.strip()
        if _should_skip_value(value):
            return
        canonical = _canonical_label(label)
        if canonical and canonical == value.lower():
            return
        unique_key = f"label:{canonical}" if canonical else f"value:{value.lower()}"
        if unique_key in self._details:
            return
        self._details[unique_key] = (label.strip() if canonical else "", value)
        self._order.append(unique_key)

    def rendered(self) -> List[str]:
        result = []
        for unique_key in self._order:
            label, value = self._details[unique_key]
            lower = label.lower()
            text = value if not lower or lower in GENERIC_LABELS else f"{label}: {value}"
            if text.strip():
                result.append(text.strip())
        return result


def extract_option_details(entries: Iterable[MetadataEntry]) -> Tuple[List[str], Set[str]]:
    entries = list(entries)
    pairs: Dict[str, Dict[str, Any]] = {}
    consumed: Set[str] = set()

    for entry in entries:
        match = _OPTION_PAIR.match(entry.key.lower())
        if not match:
            continue
        slot = match.group(1) or ""
        pair = pairs.setdefault(slot, {"name": None, "value": None, "keys": []})
        pair[match.group(2)] = entry.value
        pair["keys"].append(entry.key)

    registry = _DetailRegistry()
    for pair in pairs.values():
        value = (pair["value"] or "").strip()
        if not value:
            continue
        registry.register(pair["name"] or "", value)
        consumed.update(pair["keys"])

    for entry in entries:
        if entry.key in consumed:
            continue
        lower_key = entry.key.lower()
        if any(ignore in lower_key for ignore in IGNORE_OPTION_KEYS):
            continue
        if not any(keyword in lower_key for keyword in OPTION_KEYWORDS):
            continue
        label = humanize(entry.key)
        for segment in _parse_option_value(entry.value):
            if ":" in segment:
                maybe_label, _, rest = segment.partition(":")
                registry.register(maybe_label or label, rest)
            else:
                registry.register(label, segment)
        consumed.add(entry.key)

    return registry.rendered(), consumed


def extract_upgrades(entries: Iterable[MetadataEntry]) -> Tuple[List[str], Set[str]]:
    upgrades: List[str] = []
    consumed: Set[str] = set()
    for entry in entries:
        lower_key = entry.key.lower()
        if not any(keyword in lower_key for keyword in UPGRADE_KEYWORDS):
            continue
        segments = _parse_list_value(entry.value)
        if segments:
            upgrades.extend(segments)
            consumed.add(entry.key)
    return list(dict.fromkeys(u for u in upgrades if u)), consumed


def derive_options_from_metadata(metadata: Any) -> DerivedOptions:
    entries = normalize_metadata_entries(metadata)
    if not entries:
        return DerivedOptions()

    details, option_keys = extract_option_details(entries)
    upgrades, upgrade_keys = extract_upgrades(entries)
    consumed = [entry.key for entry in entries if entry.key in option_keys or entry.key in upgrade_keys]

    return DerivedOptions(
        option_summary=", ".join(details) if details else None,
        option_details=tuple(details),
        upgrades=tuple(upgrades),
        consumed_keys=tuple(dict.fromkeys(consumed)),
    )


def remaining_metadata_entries(metadata: Any, used_keys: Iterable[str]) -> List[MetadataEntry]:
    exclude = {key.lower() for key in used_keys}
    return [entry for entry in normalize_metadata_entries(metadata) if entry.key.lower() not in exclude]


def should_display_metadata_segment(text: str) -> bool:
    trimmed = text.strip()
    if not trimmed:
        return False
    return not any(pattern.search(trimmed) for pattern in HIDDEN_SEGMENT_PATTERNS)
