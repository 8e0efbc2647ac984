"""Invoice totals: subtotal, discount, tax, shipping and amount due."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from .formatting import coalesce_string, finite_number, normalize_string, safe_float
from .line_items import MergedLineItem, normalize_invoice_line_items

DISCOUNT_PERCENT = "percent"

# Explicit shipping amounts win over the carrier's selected-service amount;
# invoice fields are read before the linked order's.
SHIPPING_AMOUNT_PATHS: Tuple[Tuple[str, ...], ...] = (
    ("amountShipping",),
    ("shippingAmount",),
    ("shipping",),
    ("shippingCost",),
    ("orderRef", "amountShipping"),
    ("orderRef", "shippingAmount"),
    ("order", "amountShipping"),
    ("order", "shippingAmount"),
    ("selectedService", "amount"),
    ("orderRef", "selectedService", "amount"),
    ("order", "selectedService", "amount"),
)
SHIPPING_CARRIER_PATHS: Tuple[Tuple[str, ...], ...] = (
    ("shippingCarrier",),
    ("fulfillment", "carrier"),
    ("selectedService", "carrier"),
    ("orderRef", "shippingCarrier"),
    ("orderRef", "fulfillment", "carrier"),
    ("order", "shippingCarrier"),
    ("order", "fulfillment", "carrier"),
)
TRACKING_NUMBER_PATHS: Tuple[Tuple[str, ...], ...] = (
    ("trackingNumber",),
    ("fulfillment", "trackingNumber"),
    ("orderRef", "trackingNumber"),
    ("orderRef", "fulfillment", "trackingNumber"),
    ("order", "trackingNumber"),
    ("order", "fulfillment", "trackingNumber"),
)


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float
    discount_amount: float
    taxable_base: float
    tax_rate: float
    tax_amount: float
    shipping: float
    total: float


@dataclass(frozen=True)
class ShippingDetails:
    amount: float = 0.0
    carrier: Optional[str] = None
    tracking_number: Optional[str] = None


def lookup(record: Any, path: Sequence[str]) -> Any:
    value = record
    for key in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


def resolve_shipping_amount(invoice: Any) -> float:
    for path in SHIPPING_AMOUNT_PATHS:
        value = finite_number(lookup(invoice, path))
        if value is not None:
            return value
    return 0.0


def resolve_shipping(invoice: Any) -> ShippingDetails:
    return ShippingDetails(
        amount=resolve_shipping_amount(invoice),
        carrier=coalesce_string(*(lookup(invoice, path) for path in SHIPPING_CARRIER_PATHS)),
        tracking_number=coalesce_string(*(lookup(invoice, path) for path in TRACKING_NUMBER_PATHS)),
    )


def compute_discount(subtotal: float, discount_type: Any, discount_value: Any) -> float:
    value = safe_float(discount_value, 0.0)
    if normalize_string(discount_type).lower() == DISCOUNT_PERCENT:
        return subtotal * (value / 100.0)
    return value


def compute_subtotal(items: Sequence[MergedLineItem]) -> float:
    subtotal = 0.0
    for item in items:
        line = item.line_total
        if not math.isfinite(line):
            line = item.quantity * item.unit_price
        subtotal += line if math.isfinite(line) else 0.0
    return subtotal


def compute_invoice_totals(
    invoice: Optional[Mapping[str, Any]],
    items: Optional[List[MergedLineItem]] = None,
) -> InvoiceTotals:
    """Totals for ``invoice``; ``items`` defaults to its reconciled line items.

    Nothing is rounded here; amounts are rounded when formatted for display.
    """
    doc: Mapping[str, Any] = invoice if isinstance(invoice, Mapping) else {}
    if items is None:
        items = normalize_invoice_line_items(dict(doc))

    subtotal = compute_subtotal(items)
    discount_amount = compute_discount(subtotal, doc.get("discountType"), doc.get("discountValue"))
    tax_rate = safe_float(doc.get("taxRate"), 0.0)
    taxable_base = max(0.0, subtotal - discount_amount)
    tax_amount = taxable_base * (tax_rate / 100.0)
    shipping = resolve_shipping_amount(doc)
    total = max(0.0, taxable_base + tax_amount + shipping)

    return InvoiceTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        taxable_base=taxable_base,
        tax_rate=tax_rate,
        tax_amount=tax_amount,
        shipping=shipping,
        total=total,
    )
