"""Runtime configuration loaded from environment variables."""

from __future__ import annotations

import os
from typing import Optional


def env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


# Local logo used when neither the print settings nor the caller supply one.
DEFAULT_LOGO_PATH = env_str("INVOICE_LOGO_PATH")
LOGO_TIMEOUT_MS = env_int("INVOICE_LOGO_TIMEOUT_MS", 5000, minimum=100)
LOGO_MAX_BYTES = env_int("INVOICE_LOGO_MAX_BYTES", 5 * 1024 * 1024, minimum=1024)

# Per-style Unicode font overrides; they apply to every font family.
FONT_PATH_ENV = {
    "": "INVOICE_FONT_PATH",
    "B": "INVOICE_FONT_BOLD_PATH",
    "I": "INVOICE_FONT_ITALIC_PATH",
    "BI": "INVOICE_FONT_BOLD_ITALIC_PATH",
}
