"""Resolve sparse print settings into a concrete color and font palette."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

Color = Tuple[float, float, float]

WHITE: Color = (1.0, 1.0, 1.0)
BLACK: Color = (0.0, 0.0, 0.0)

DEFAULT_ACCENT: Color = (0.86, 0.23, 0.18)
DEFAULT_TEXT: Color = (100 / 255, 116 / 255, 139 / 255)

SECONDARY_FROM_TEXT = 0.4
BORDER_WEIGHT = 0.45
HEADER_LINE_WEIGHT = 0.55
TABLE_HEADER_WEIGHT = 0.65
TABLE_ALT_WEIGHT = 0.75
TOTALS_HIGHLIGHT_WEIGHT = 0.85
HEADING_DARKEN = 0.2
MUTED_LIGHTEN = 0.35

DEFAULT_FONT_FAMILY = "helvetica"
FONT_FAMILY_ALIASES = {
    "helvetica": "helvetica",
    "arial": "helvetica",
    "sans": "helvetica",
    "times": "times",
    "times new roman": "times",
    "timesroman": "times",
    "serif": "times",
    "courier": "courier",
    "courier new": "courier",
    "mono": "courier",
}


@dataclass(frozen=True)
class Theme:
    accent: Color
    heading: Color
    text: Color
    muted: Color
    border: Color
    header_line: Color
    table_header_bg: Color
    table_alt_bg: Color
    totals_highlight: Color
    font_family: str = DEFAULT_FONT_FAMILY


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def parse_hex_color(value: Any, fallback: Color) -> Color:
    """Parse ``#rrggbb``/``rrggbb`` into 0-1 floats, or return ``fallback``."""
    if isinstance(value, dict):
        value = value.get("hex")
    if not isinstance(value, str):
        return fallback
    digits = value.strip()
    if digits.startswith("#"):
        digits = digits[1:]
    if len(digits) != 6:
        return fallback
    try:
        r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return fallback
    return (r / 255.0, g / 255.0, b / 255.0)


def mix(color: Color, target: Color, weight: float) -> Color:
    weight = _clamp(weight)
    return tuple(_clamp(c + (t - c) * weight) for c, t in zip(color, target))  # type: ignore[return-value]


def lighten(color: Color, weight: float) -> Color:
    return mix(color, WHITE, weight)


def darken(color: Color, weight: float) -> Color:
    return mix(color, BLACK, weight)


def lightness(color: Color) -> float:
    return sum(color) / 3.0


def to_rgb255(color: Color) -> Tuple[int, int, int]:
    return tuple(int(round(_clamp(c) * 255)) for c in color)  # type: ignore[return-value]


def resolve_font_family(key: Any) -> str:
    if not isinstance(key, str):
        return DEFAULT_FONT_FAMILY
    return FONT_FAMILY_ALIASES.get(key.strip().lower(), DEFAULT_FONT_FAMILY)


def resolve_theme(
    primary: Any = None,
    secondary: Any = None,
    text: Any = None,
    font_family: Optional[str] = None,
) -> Theme:
    accent = parse_hex_color(primary, DEFAULT_ACCENT)
    text_color = parse_hex_color(text, DEFAULT_TEXT)
    secondary_color = parse_hex_color(secondary, lighten(text_color, SECONDARY_FROM_TEXT))

    return Theme(
        accent=accent,
        heading=darken(text_color, HEADING_DARKEN),
        text=text_color,
        muted=lighten(text_color, MUTED_LIGHTEN),
        border=lighten(secondary_color, BORDER_WEIGHT),
        header_line=lighten(secondary_color, HEADER_LINE_WEIGHT),
        table_header_bg=lighten(secondary_color, TABLE_HEADER_WEIGHT),
        table_alt_bg=lighten(secondary_color, TABLE_ALT_WEIGHT),
        totals_highlight=lighten(accent, TOTALS_HIGHLIGHT_WEIGHT),
        font_family=resolve_font_family(font_family),
    )
