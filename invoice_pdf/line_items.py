"""Reconcile invoice line items with the originating order's cart items.

Invoices are authored separately from the order they bill, so the two item
lists drift: an invoice row may lack the option metadata captured at checkout,
and cart items may never have been copied onto the invoice at all. The
reconciler pairs rows by SKU, then by name, and merges each pair with the
invoice's explicit values taking precedence. Unclaimed cart items are
appended after the invoice rows.

Field aliases are resolved in one place each, first usable value wins:

* quantity:   invoice ``quantity``, invoice ``qty``, cart ``quantity``; else 1
* unit price: invoice ``unitPrice``, ``amount``, ``price``; cart ``price``,
  ``unitPrice``; else 0
* line total: invoice ``lineTotal``, ``total``; cart ``lineTotal``, ``total``;
  else ``quantity * unit price``
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from .formatting import (
    coalesce_number,
    coalesce_string,
    merge_unique_strings,
    normalize_string,
    to_string_array,
)
from .metadata import (
    MetadataEntry,
    derive_options_from_metadata,
    humanize,
    normalize_metadata_entries,
    remaining_metadata_entries,
    should_display_metadata_segment,
)

Record = Mapping[str, Any]

# Metadata keys already represented by first-class row fields.
CAPTURED_METADATA_KEYS = {
    "sku",
    "name",
    "productname",
    "description",
    "quantity",
    "qty",
    "price",
    "unitprice",
    "amount",
    "linetotal",
    "total",
    "optionsummary",
    "optiondetails",
    "upgrades",
}


@dataclass(frozen=True)
class MergedLineItem:
    description: str = ""
    name: str = ""
    product_name: str = ""
    item_name: str = ""
    item_code: str = ""
    sku: str = ""
    key: str = ""
    quantity: float = 1.0
    unit_price: float = 0.0
    line_total: float = 0.0
    option_summary: Optional[str] = None
    option_details: Tuple[str, ...] = ()
    upgrades: Tuple[str, ...] = ()
    extras: Tuple[str, ...] = ()

    def display_name(self, index: int) -> str:
        for candidate in (
            self.name,
            self.product_name,
            self.description,
            self.item_name,
            self.item_code,
            self.sku,
        ):
            if candidate:
                return candidate
        return f"Item {index + 1}"

    def display_description(self) -> str:
        segments: List[str] = []
        if self.option_summary:
            segments.append(self.option_summary)
        for detail in self.option_details:
            if not any(detail in segment for segment in segments):
                segments.append(detail)
        if self.upgrades:
            segments.append(f"Upgrades: {', '.join(self.upgrades)}")
        segments.extend(self.extras)

        if not segments and self.description:
            segments.append(self.description)

        code = self.sku or self.item_code
        if code and not any(code in segment for segment in segments):
            segments.append(f"SKU {code}")
        return " • ".join(segments)


def _records(values: Any) -> List[Record]:
    if not isinstance(values, (list, tuple)):
        return []
    return [value for value in values if isinstance(value, Mapping)]


def _metadata_of(record: Optional[Record]) -> List[MetadataEntry]:
    if not record:
        return []
    return normalize_metadata_entries(record.get("metadata")) + normalize_metadata_entries(
        record.get("metadataEntries")
    )


def _linked_cart(invoice: Record, field: str) -> Any:
    linked = invoice.get(field)
    return linked.get("cart") if isinstance(linked, Mapping) else None


def linked_cart_sources(invoice: Record) -> List[Any]:
    return [_linked_cart(invoice, "orderRef"), _linked_cart(invoice, "order")]


def pool_cart_items(cart_sources: Iterable[Any]) -> List[Record]:
    """Concatenate cart lists, dropping repeats of the same (_key, sku, name)."""
    seen: Set[Tuple[str, str, str]] = set()
    items: List[Record] = []
    for source in cart_sources:
        for raw in _records(source):
            if not raw:
                continue
            signature = (
                normalize_string(raw.get("_key")),
                normalize_string(raw.get("sku")),
                normalize_string(raw.get("name")),
            )
            if signature in seen:
                continue
            seen.add(signature)
            items.append(raw)
    return items


def find_matching_cart_item(
    line_item: Record,
    cart_items: Sequence[Record],
    used: Set[int],
) -> int:
    sku = normalize_string(line_item.get("sku")).lower()
    if sku:
        for index, cart_item in enumerate(cart_items):
            if index in used:
                continue
            if normalize_string(cart_item.get("sku")).lower() == sku:
                return index

    name = normalize_string(line_item.get("name")) or normalize_string(line_item.get("description"))
    if name:
        for index, cart_item in enumerate(cart_items):
            if index in used:
                continue
            cart_name = normalize_string(cart_item.get("name")) or normalize_string(
                cart_item.get("productName")
            )
            if cart_name and cart_name == name:
                return index

    return -1


def _extras(entries: List[MetadataEntry], consumed: Iterable[str]) -> List[str]:
    extras = []
    for entry in remaining_metadata_entries(entries, consumed):
        if re.sub(r"[^a-z0-9]", "", entry.key.lower()) in CAPTURED_METADATA_KEYS:
            continue
        segment = f"{humanize(entry.key)}: {entry.value}"
        if should_display_metadata_segment(segment):
            extras.append(segment)
    return merge_unique_strings(extras)


def combine_line_items(
    invoice_item: Optional[Record] = None,
    cart_item: Optional[Record] = None,
) -> Optional[MergedLineItem]:
    if invoice_item is None and cart_item is None:
        return None
    inv: Record = invoice_item or {}
    cart: Record = cart_item or {}

    quantity = coalesce_number(inv.get("quantity"), inv.get("qty"), cart.get("quantity"))
    unit_price = coalesce_number(
        inv.get("unitPrice"),
        inv.get("amount"),
        inv.get("price"),
        cart.get("price"),
        cart.get("unitPrice"),
    )
    quantity = 1.0 if quantity is None else quantity
    unit_price = 0.0 if unit_price is None else unit_price
    line_total = coalesce_number(
        inv.get("lineTotal"),
        inv.get("total"),
        cart.get("lineTotal"),
        cart.get("total"),
    )
    if line_total is None:
        line_total = quantity * unit_price

    metadata = _metadata_of(inv) + _metadata_of(cart)
    derived = derive_options_from_metadata(metadata)

    option_summary = coalesce_string(
        inv.get("optionSummary"),
        inv.get("optionsSummary"),
        cart.get("optionSummary"),
        derived.option_summary,
    )
    option_details = merge_unique_strings(
        to_string_array(inv.get("optionDetails")),
        to_string_array(inv.get("options")),
        to_string_array(cart.get("optionDetails")),
        derived.option_details,
    )
    upgrades = merge_unique_strings(
        to_string_array(inv.get("upgrades")),
        to_string_array(inv.get("upgradeOptions")),
        to_string_array(cart.get("upgrades")),
        derived.upgrades,
    )

    name = coalesce_string(inv.get("name"), cart.get("name")) or ""
    product_name = coalesce_string(inv.get("productName"), cart.get("productName")) or ""
    description = coalesce_string(
        inv.get("description"),
        cart.get("description"),
        inv.get("name"),
        cart.get("name"),
        cart.get("productName"),
    )

    return MergedLineItem(
        description=description or "",
        name=name,
        product_name=product_name,
        item_name=coalesce_string(inv.get("itemName"), cart.get("itemName")) or "",
        item_code=coalesce_string(inv.get("itemCode"), cart.get("itemCode")) or "",
        sku=coalesce_string(inv.get("sku"), cart.get("sku")) or "",
        key=coalesce_string(inv.get("_key"), cart.get("_key")) or "",
        quantity=quantity,
        unit_price=unit_price,
        line_total=line_total,
        option_summary=option_summary,
        option_details=tuple(option_details),
        upgrades=tuple(upgrades),
        extras=tuple(_extras(metadata, derived.consumed_keys)),
    )


def reconcile_line_items(
    invoice_items: Any,
    cart_sources: Iterable[Any] = (),
) -> List[MergedLineItem]:
    cart_items = pool_cart_items(cart_sources)
    used: Set[int] = set()
    merged: List[MergedLineItem] = []

    for item in _records(invoice_items):
        match = find_matching_cart_item(item, cart_items, used)
        row = combine_line_items(item, cart_items[match] if match >= 0 else None)
        if row is not None:
            merged.append(row)
        if match >= 0:
            used.add(match)

    for index, cart_item in enumerate(cart_items):
        if index in used:
            continue
        row = combine_line_items(None, cart_item)
        if row is not None:
            merged.append(row)

    return merged


def normalize_invoice_line_items(invoice: Optional[Dict[str, Any]]) -> List[MergedLineItem]:
    if not isinstance(invoice, Mapping):
        return []
    return reconcile_line_items(invoice.get("lineItems"), linked_cart_sources(invoice))
