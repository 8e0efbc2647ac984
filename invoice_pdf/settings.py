"""Sparse print settings: company identity, copy overrides and page layout."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .formatting import finite_number, normalize_string, split_lines
from .pdf_constants import (
    DEFAULT_FONT_SIZE,
    DEFAULT_MARGIN,
    DEFAULT_PAGE_SIZE,
    MAX_FONT_SIZE,
    MAX_MARGIN,
    MIN_FONT_SIZE,
    MIN_MARGIN,
    PAGE_SIZES,
    POINTS_PER_INCH,
)
from .theme import Theme, resolve_theme


@dataclass(frozen=True)
class Margins:
    top: float = DEFAULT_MARGIN
    right: float = DEFAULT_MARGIN
    bottom: float = DEFAULT_MARGIN
    left: float = DEFAULT_MARGIN


@dataclass(frozen=True)
class BrandIdentity:
    name: str = ""
    address_lines: Tuple[str, ...] = ()
    phone: str = ""
    email: str = ""
    website: str = ""

    def lines(self) -> List[str]:
        lines = list(self.address_lines)
        if self.phone:
            lines.append(f"Phone: {self.phone}")
        if self.email:
            lines.append(f"Email: {self.email}")
        if self.website:
            lines.append(self.website)
        return lines


@dataclass(frozen=True)
class PrintSettings:
    company: BrandIdentity = field(default_factory=BrandIdentity)
    logo_url: Optional[str] = None
    show_logo: bool = True
    header_text: str = "INVOICE"
    footer_text: str = ""
    show_payment_terms: bool = True
    font_family: Optional[str] = None
    font_size: float = DEFAULT_FONT_SIZE
    page_size: str = DEFAULT_PAGE_SIZE
    margins: Margins = field(default_factory=Margins)
    primary_color: Any = None
    secondary_color: Any = None
    text_color: Any = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "PrintSettings":
        if not isinstance(data, Mapping):
            return cls()

        invoice_settings = _section(data, "invoiceSettings")
        typography = _section(data, "typography")
        layout = _section(data, "layout")

        company = BrandIdentity(
            name=normalize_string(data.get("companyName")),
            address_lines=tuple(split_lines(normalize_string(data.get("companyAddress")))),
            phone=normalize_string(data.get("companyPhone")),
            email=normalize_string(data.get("companyEmail")),
            website=normalize_string(data.get("companyWebsite")),
        )

        return cls(
            company=company,
            logo_url=normalize_string(data.get("logoUrl")) or None,
            show_logo=_flag(invoice_settings.get("showLogo"), True),
            header_text=normalize_string(invoice_settings.get("headerText")) or "INVOICE",
            footer_text=normalize_string(invoice_settings.get("footerText")),
            show_payment_terms=_flag(invoice_settings.get("showPaymentTerms"), True),
            font_family=normalize_string(typography.get("fontFamily")) or None,
            font_size=resolve_font_size(typography.get("fontSize")),
            page_size=resolve_page_size(layout.get("pageSize")),
            margins=resolve_margins(layout.get("margins")),
            primary_color=data.get("primaryColor"),
            secondary_color=data.get("secondaryColor"),
            text_color=data.get("textColor"),
        )

    @property
    def page_dimensions(self) -> Tuple[float, float]:
        return PAGE_SIZES[self.page_size]

    def theme(self) -> Theme:
        return resolve_theme(
            self.primary_color,
            self.secondary_color,
            self.text_color,
            self.font_family,
        )


def _section(data: Mapping[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    return dict(value) if isinstance(value, Mapping) else {}


def _flag(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def resolve_page_size(value: Any) -> str:
    key = normalize_string(value).lower()
    return key if key in PAGE_SIZES else DEFAULT_PAGE_SIZE


def resolve_font_size(value: Any) -> float:
    size = finite_number(value)
    if size is None:
        return DEFAULT_FONT_SIZE
    return max(MIN_FONT_SIZE, min(MAX_FONT_SIZE, size))


def resolve_margins(value: Any) -> Margins:
    if not isinstance(value, Mapping):
        return Margins()

    def side(name: str) -> float:
        inches = finite_number(value.get(name))
        if inches is None:
            return DEFAULT_MARGIN
        return max(MIN_MARGIN, min(MAX_MARGIN, inches * POINTS_PER_INCH))

    return Margins(top=side("top"), right=side("right"), bottom=side("bottom"), left=side("left"))
