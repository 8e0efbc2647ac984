"""Public package API for invoice PDF rendering."""

from __future__ import annotations

from .rendering import (
    InvoicePdfResult,
    InvoiceRenderError,
    InvoiceRenderer,
    RenderOptions,
    render_invoice_pdf,
)
from .settings import PrintSettings

__all__ = [
    "InvoicePdfResult",
    "InvoiceRenderError",
    "InvoiceRenderer",
    "PrintSettings",
    "RenderOptions",
    "render_invoice_pdf",
]
