"""Page geometry, font sizes and table layout constants (points, top-left origin)."""

from __future__ import annotations

POINTS_PER_INCH = 72.0

PAGE_SIZES = {
    "letter": (612.0, 792.0),
    "a4": (595.28, 841.89),
}
DEFAULT_PAGE_SIZE = "letter"

DEFAULT_MARGIN = 40.0
MIN_MARGIN = 18.0
MAX_MARGIN = 108.0

DEFAULT_FONT_SIZE = 10.0
MIN_FONT_SIZE = 8.0
MAX_FONT_SIZE = 14.0

# Header
LOGO_DISPLAY_H = 48.0
LOGO_GAP = 16.0
COMPANY_NAME_SIZE = 17.0
COMPANY_NAME_LINE_H = 18.0
COMPANY_LINE_H = 12.0
TITLE_SIZE = 32.0
HEADER_RULE_GAP = 18.0

# Addresses and meta
LABEL_SIZE = 11.0
ADDRESS_LABEL_GAP = 14.0
ADDRESS_LINE_H = 12.0
SHIP_TO_OFFSET = 215.0
META_LABEL_SIZE = 10.0
META_VALUE_SIZE = 11.0
META_LINE_H = 16.0
META_LABEL_GAP = 8.0
META_LABEL_MIN_OFFSET = 160.0
DETAILS_GAP = 12.0

# Item table
HEADER_ROW_H = 24.0
ROW_H = 24.0
CELL_PADDING = 4.0
CAP_HEIGHT_RATIO = 0.7
MAX_VISIBLE_ROWS = 14
MIN_TOTAL_COLUMN_W = 60.0
MIN_DESCRIPTION_W = 90.0
RULE_THICKNESS = 1.0

ITEM_COLUMN_W = 80.0
DESCRIPTION_COLUMN_W = 220.0
QTY_COLUMN_W = 60.0
PRICE_COLUMN_W = 80.0

# Totals and footer
FOOTER_GAP = 30.0
FOOTER_MIN_FROM_BOTTOM = 60.0
FOOTER_TEXT_GAP = 20.0
FOOTER_LINE_H = 14.0
FOOTER_BOTTOM_PAD = 24.0
