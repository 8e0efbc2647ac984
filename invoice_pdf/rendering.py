"""Invoice PDF rendering logic."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from fpdf import FPDF  # type: ignore
from fpdf.errors import FPDFException  # type: ignore

from .config import DEFAULT_LOGO_PATH
from .fonts import FontManager
from .formatting import (
    PLACEHOLDER,
    clip_text,
    coalesce_string,
    fmt_percent,
    fmt_qty,
    money,
    normalize_date,
    normalize_string,
    safe_float,
    split_lines,
)
from .layout import DEFAULT_COLUMNS, LEFT, RIGHT, TableColumn, allocate_column_widths, column_edges
from .line_items import MergedLineItem, normalize_invoice_line_items
from .logo import LogoImage, load_logo
from .pdf_constants import (
    ADDRESS_LABEL_GAP,
    ADDRESS_LINE_H,
    CAP_HEIGHT_RATIO,
    CELL_PADDING,
    COMPANY_LINE_H,
    COMPANY_NAME_LINE_H,
    COMPANY_NAME_SIZE,
    DETAILS_GAP,
    FOOTER_BOTTOM_PAD,
    FOOTER_GAP,
    FOOTER_LINE_H,
    FOOTER_MIN_FROM_BOTTOM,
    FOOTER_TEXT_GAP,
    HEADER_ROW_H,
    HEADER_RULE_GAP,
    LABEL_SIZE,
    LOGO_DISPLAY_H,
    LOGO_GAP,
    MAX_VISIBLE_ROWS,
    META_LABEL_GAP,
    META_LABEL_MIN_OFFSET,
    META_LABEL_SIZE,
    META_LINE_H,
    META_VALUE_SIZE,
    ROW_H,
    RULE_THICKNESS,
    SHIP_TO_OFFSET,
    TITLE_SIZE,
)
from .settings import PrintSettings
from .theme import Color, to_rgb255
from .totals import InvoiceTotals, ShippingDetails, compute_invoice_totals, resolve_shipping

logger = logging.getLogger(__name__)

DEFAULT_NOTES = ("Payment is due upon receipt.", "Thank you for your business!")
EMPTY_TABLE_TEXT = "No line items recorded."


class InvoiceRenderError(RuntimeError):
    """The PDF library failed to build or serialise the document."""


@dataclass(frozen=True)
class RenderOptions:
    invoice_number: Optional[str] = None
    invoice_date: Optional[str] = None
    due_date: Optional[str] = None
    print_settings: Union[PrintSettings, Mapping[str, Any], None] = None
    logo_url: Optional[str] = None
    logo_path: Optional[str] = None


@dataclass(frozen=True)
class InvoicePdfResult:
    pdf_bytes: bytes

    @property
    def base64(self) -> str:
        return base64.b64encode(self.pdf_bytes).decode("ascii")


@dataclass(frozen=True)
class TotalsRow:
    label: str
    value: str
    bold: bool = False


def build_address_lines(address: Any) -> List[str]:
    """Printable lines for an address record, without duplicates."""
    if not isinstance(address, Mapping):
        return []

    def field(*keys: str) -> str:
        return coalesce_string(*(address.get(key) for key in keys)) or ""

    name = field("name")
    company = field("company", "companyName")
    street = ", ".join(
        part for part in (field("address_line1", "line1"), field("address_line2", "line2")) if part
    )
    city = field("city_locality", "city")
    state = field("state_province", "state")
    postal = field("postal_code", "postalCode")
    city_state = ", ".join(part for part in (city, state) if part)
    locality = " ".join(part for part in (city_state, postal) if part)

    candidates = [
        name,
        company if company != name else "",
        street,
        locality,
        field("country", "country_code"),
    ]
    phone = field("phone")
    email = field("email")
    if phone:
        candidates.append(f"Phone: {phone}")
    if email:
        candidates.append(f"Email: {email}")

    lines: List[str] = []
    for line in candidates:
        if line and line not in lines:
            lines.append(line)
    return lines


def overflow_summary(hidden: int) -> str:
    noun = "item" if hidden == 1 else "items"
    return f"+ {hidden} additional {noun} not shown"


def _resolve_settings(value: Union[PrintSettings, Mapping[str, Any], None]) -> PrintSettings:
    if isinstance(value, PrintSettings):
        return value
    return PrintSettings.from_dict(value)


class InvoiceRenderer:
    """Lays out a single-page invoice top to bottom with one moving cursor."""

    def __init__(self, invoice: Optional[Mapping[str, Any]], options: Optional[RenderOptions] = None) -> None:
        self.invoice: Dict[str, Any] = dict(invoice) if isinstance(invoice, Mapping) else {}
        self.options = options or RenderOptions()
        self.settings = _resolve_settings(self.options.print_settings)
        self.theme = self.settings.theme()

        self.pdf = FPDF(unit="pt", format=self.settings.page_size)
        self.pdf.set_auto_page_break(False)
        self.pdf.add_page()

        self.fonts = FontManager(self.pdf, self.theme.font_family)
        self.body_size = self.settings.font_size
        self.items: List[MergedLineItem] = normalize_invoice_line_items(self.invoice)
        self.totals: InvoiceTotals = compute_invoice_totals(self.invoice, self.items)
        self.shipping: ShippingDetails = resolve_shipping(self.invoice)
        self.logo: Optional[LogoImage] = self._load_logo() if self.settings.show_logo else None

        page_w, page_h = self.settings.page_dimensions
        margins = self.settings.margins
        self.page_h = page_h
        self.left = margins.left
        self.right = page_w - margins.right
        self.top = margins.top
        self.bottom = page_h - margins.bottom
        self.content_width = self.right - self.left

        self.minimum_footer_y = self.bottom
        self.visible_rows = 0
        self.hidden_rows = 0
        self.rows_bottom = 0.0

    def _load_logo(self) -> Optional[LogoImage]:
        sources = (
            self.options.logo_path,
            self.options.logo_url,
            self.settings.logo_url,
            DEFAULT_LOGO_PATH,
        )
        for source in sources:
            logo = load_logo(source)
            if logo is not None:
                return logo
        return None

    # Drawing primitives

    def _rule(self, x1: float, y1: float, x2: float, y2: float, color: Color) -> None:
        self.pdf.set_draw_color(*to_rgb255(color))
        self.pdf.set_line_width(RULE_THICKNESS)
        self.pdf.line(x1, y1, x2, y2)

    def _fill(self, x: float, y: float, w: float, h: float, color: Color) -> None:
        self.pdf.set_fill_color(*to_rgb255(color))
        self.pdf.rect(x, y, w, h, style="F")

    def _text(
        self,
        x: float,
        y: float,
        text: str,
        size: float,
        color: Color,
        style: str = "",
        max_width: Optional[float] = None,
        align_right: bool = False,
    ) -> float:
        if max_width is not None:
            text = clip_text(self.fonts, text, size, max(0.0, max_width), style, self.fonts.ellipsis)
        width = self.fonts.text_width(text, size, style)
        start = x - width if align_right else x
        self.fonts.draw_text(start, y, text, size, color, style)
        return width

    @staticmethod
    def _baseline(row_top: float, row_h: float, size: float) -> float:
        return row_top + (row_h + size * CAP_HEIGHT_RATIO) / 2.0

    def _cell(
        self,
        text: str,
        row_top: float,
        row_h: float,
        x0: float,
        x1: float,
        align: str,
        size: float,
        color: Color,
        style: str = "",
    ) -> None:
        content = text.strip() or PLACEHOLDER
        max_width = (x1 - x0) - 2 * CELL_PADDING
        clipped = clip_text(self.fonts, content, size, max_width, style, self.fonts.ellipsis)
        baseline = self._baseline(row_top, row_h, size)
        if align == RIGHT:
            x = x1 - CELL_PADDING - self.fonts.text_width(clipped, size, style)
        else:
            x = x0 + CELL_PADDING
        self.fonts.draw_text(x, baseline, clipped, size, color, style)

    # Sections

    def _draw_header(self) -> float:
        header_top = self.top
        info_x = self.left
        logo_bottom = header_top

        if self.logo is not None:
            width, height = self.logo.scaled(LOGO_DISPLAY_H)
            try:
                self.pdf.image(self.logo.stream(), x=self.left, y=header_top, w=width, h=height)
            except (FPDFException, OSError, ValueError) as exc:
                logger.debug("Skipping logo the PDF library could not embed: %s", exc)
            else:
                info_x += width + LOGO_GAP
                logo_bottom = header_top + height

        title = self.settings.header_text
        title_width = self._text(
            self.right,
            header_top + TITLE_SIZE * CAP_HEIGHT_RATIO,
            title,
            TITLE_SIZE,
            self.theme.muted,
            style="B",
            max_width=self.content_width / 2.0,
            align_right=True,
        )
        info_width = self.right - title_width - 12 - info_x

        y = header_top + COMPANY_NAME_SIZE * CAP_HEIGHT_RATIO
        company = self.settings.company
        if company.name:
            self._text(info_x, y, company.name, COMPANY_NAME_SIZE, self.theme.heading, "B", info_width)
            y += COMPANY_NAME_LINE_H
        for line in company.lines():
            self._text(info_x, y, line, self.body_size, self.theme.text, max_width=info_width)
            y += COMPANY_LINE_H

        y = max(y, logo_bottom, header_top + TITLE_SIZE) + HEADER_RULE_GAP
        self._rule(self.left, y, self.right, y, self.theme.header_line)
        return y + HEADER_RULE_GAP

    def _draw_address_block(self, label: str, lines: List[str], x: float, y: float, width: float) -> float:
        self._text(x, y, label, LABEL_SIZE, self.theme.heading, "I", width)
        y += ADDRESS_LABEL_GAP
        for line in lines or [PLACEHOLDER]:
            self._text(x, y, line, self.body_size, self.theme.text, max_width=width)
            y += ADDRESS_LINE_H
        return y

    def _meta_entries(self) -> List[Tuple[str, str]]:
        number = coalesce_string(self.options.invoice_number, self.invoice.get("invoiceNumber"))
        entries = [
            ("Invoice #", number or PLACEHOLDER),
            ("Date", normalize_date(self.options.invoice_date or self.invoice.get("invoiceDate"))),
            ("Due Date", normalize_date(self.options.due_date or self.invoice.get("dueDate"))),
        ]
        if self.shipping.carrier:
            entries.append(("Carrier", self.shipping.carrier))
        if self.shipping.tracking_number:
            entries.append(("Tracking #", self.shipping.tracking_number))
        return entries

    def _draw_meta_block(self, y: float) -> float:
        label_limit = self.right - META_LABEL_MIN_OFFSET
        for label, value in self._meta_entries():
            value_width = self._text(
                self.right,
                y,
                value or PLACEHOLDER,
                META_VALUE_SIZE,
                self.theme.heading,
                style="B",
                max_width=META_LABEL_MIN_OFFSET - META_LABEL_GAP - 50,
                align_right=True,
            )
            label_text = f"{label}:"
            label_width = self.fonts.text_width(label_text, META_LABEL_SIZE)
            label_x = min(self.right - value_width - META_LABEL_GAP - label_width, label_limit)
            self.fonts.draw_text(label_x, y, label_text, META_LABEL_SIZE, self.theme.text)
            y += META_LINE_H
        return y

    def _draw_details(self, y: float) -> float:
        bill_lines = build_address_lines(self.invoice.get("billTo"))
        ship_lines = build_address_lines(self.invoice.get("shipTo")) or bill_lines

        ship_x = self.left + SHIP_TO_OFFSET
        block_width = SHIP_TO_OFFSET - 10
        ship_width = max(60.0, min(block_width, self.right - META_LABEL_MIN_OFFSET - ship_x - 10))

        bill_bottom = self._draw_address_block("Bill To:", bill_lines, self.left, y, block_width)
        ship_bottom = self._draw_address_block("Ship To:", ship_lines, ship_x, y, ship_width)
        meta_bottom = self._draw_meta_block(y)
        return max(bill_bottom, ship_bottom, meta_bottom) + DETAILS_GAP

    def _totals_rows(self) -> List[TotalsRow]:
        totals = self.totals
        rows = [TotalsRow("Subtotal", money(totals.subtotal))]

        if totals.discount_amount != 0:
            label = "Discount"
            if normalize_string(self.invoice.get("discountType")).lower() == "percent":
                label = f"Discount ({fmt_percent(safe_float(self.invoice.get('discountValue')))}%)"
            rows.append(TotalsRow(label, money(-totals.discount_amount)))

        if totals.tax_amount != 0 or totals.tax_rate != 0:
            label = f"Tax ({fmt_percent(totals.tax_rate)}%)" if totals.tax_rate else "Tax"
            rows.append(TotalsRow(label, money(totals.tax_amount)))

        if totals.shipping != 0:
            label = f"Shipping ({self.shipping.carrier})" if self.shipping.carrier else "Shipping"
            rows.append(TotalsRow(label, money(totals.shipping)))

        rows.append(TotalsRow("Total Due", money(totals.total), bold=True))
        return rows

    def _cell_text(self, column: TableColumn, item: MergedLineItem, index: int) -> str:
        if column.key == "item":
            return item.display_name(index)
        if column.key == "description":
            return item.display_description()
        if column.key == "quantity":
            return fmt_qty(item.quantity)
        if column.key == "price":
            return money(item.unit_price)
        if column.key == "total":
            return money(item.line_total)
        return ""

    def _draw_table(self, y: float) -> float:
        columns = allocate_column_widths(self.content_width, DEFAULT_COLUMNS)
        edges = column_edges(self.left, columns)
        size = self.body_size
        totals_rows = self._totals_rows()
        minimum_footer_y = self.bottom - len(totals_rows) * ROW_H - FOOTER_GAP - FOOTER_TEXT_GAP
        self.minimum_footer_y = minimum_footer_y
        table_top = y

        self._rule(self.left, y, self.right, y, self.theme.border)
        self._fill(self.left, y, self.content_width, HEADER_ROW_H, self.theme.table_header_bg)
        for column, x0, x1 in zip(columns, edges, edges[1:]):
            self._cell(column.label, y, HEADER_ROW_H, x0, x1, column.align, size, self.theme.heading, "B")
        y += HEADER_ROW_H
        self._rule(self.left, y, self.right, y, self.theme.border)

        span_start, span_end = edges[1], edges[-2]
        if not self.items:
            self._cell(EMPTY_TABLE_TEXT, y, ROW_H, span_start, span_end, LEFT, size, self.theme.muted, "I")
            y += ROW_H
            self._rule(self.left, y, self.right, y, self.theme.border)

        drawn = 0
        for index, item in enumerate(self.items[:MAX_VISIBLE_ROWS]):
            hidden_after = len(self.items) - (index + 1)
            limit = minimum_footer_y - (ROW_H if hidden_after > 0 else 0)
            if y + ROW_H > limit:
                break
            if index % 2 == 1:
                self._fill(self.left, y, self.content_width, ROW_H, self.theme.table_alt_bg)
            for column, x0, x1 in zip(columns, edges, edges[1:]):
                self._cell(self._cell_text(column, item, index), y, ROW_H, x0, x1, column.align, size, self.theme.text)
            y += ROW_H
            self._rule(self.left, y, self.right, y, self.theme.border)
            drawn += 1
        self.visible_rows = drawn
        self.rows_bottom = y

        remaining = len(self.items) - drawn
        self.hidden_rows = remaining
        if remaining > 0:
            self._cell(overflow_summary(remaining), y, ROW_H, span_start, span_end, LEFT, size, self.theme.muted, "I")
            y += ROW_H
            self._rule(self.left, y, self.right, y, self.theme.border)
            logger.debug("Invoice table truncated: %d of %d items shown", drawn, len(self.items))

        total_x0, total_x1 = edges[-2], edges[-1]
        for row in totals_rows:
            style = "B" if row.bold else ""
            if row.bold:
                self._fill(total_x0, y, total_x1 - total_x0, ROW_H, self.theme.totals_highlight)
            self._cell(row.label, y, ROW_H, self.left, total_x0, RIGHT, size, self.theme.heading, style)
            self._cell(row.value, y, ROW_H, total_x0, total_x1, RIGHT, size, self.theme.heading, style)
            y += ROW_H
            self._rule(self.left, y, self.right, y, self.theme.border)

        for x in edges:
            self._rule(x, table_top, x, y, self.theme.border)
        return y

    def _footer_lines(self) -> List[str]:
        notes = split_lines(normalize_string(self.invoice.get("customerNotes")))
        if not notes and self.settings.show_payment_terms:
            notes = split_lines(normalize_string(self.invoice.get("terms")))
        if not notes:
            notes = list(DEFAULT_NOTES)
        return notes + split_lines(self.settings.footer_text)

    def _draw_footer(self, table_bottom: float) -> List[float]:
        """Draw the footer rule and notes; returns the baselines of the printed lines."""
        line_y = min(table_bottom + FOOTER_GAP, self.bottom - FOOTER_MIN_FROM_BOTTOM)
        line_y = max(line_y, table_bottom + RULE_THICKNESS)
        self._rule(self.left, line_y, self.right, line_y, self.theme.border)

        y = line_y + FOOTER_TEXT_GAP
        baselines: List[float] = []
        for line in self._footer_lines():
            if y > self.bottom - FOOTER_BOTTOM_PAD:
                break
            self._text(self.left, y, line, self.body_size, self.theme.muted, max_width=self.content_width)
            baselines.append(y)
            y += FOOTER_LINE_H
        return baselines

    def render(self) -> bytes:
        try:
            y = self._draw_header()
            y = self._draw_details(y)
            y = self._draw_table(y)
            self._draw_footer(y)
            out = self.pdf.output()
        except (FPDFException, OSError, MemoryError) as exc:
            raise InvoiceRenderError(f"Failed to render invoice PDF: {exc}") from exc

        if isinstance(out, str):
            return out.encode("latin-1")
        if isinstance(out, bytearray):
            return bytes(out)
        return out


def render_invoice_pdf(
    invoice: Optional[Mapping[str, Any]],
    options: Optional[RenderOptions] = None,
) -> InvoicePdfResult:
    renderer = InvoiceRenderer(invoice, options)
    pdf_bytes = renderer.render()
    logger.debug("Rendered invoice PDF: %d items, %d bytes", len(renderer.items), len(pdf_bytes))
    return InvoicePdfResult(pdf_bytes=pdf_bytes)
