"""Item table column allocation."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Sequence, Tuple

from .pdf_constants import (
    DESCRIPTION_COLUMN_W,
    ITEM_COLUMN_W,
    MIN_DESCRIPTION_W,
    MIN_TOTAL_COLUMN_W,
    PRICE_COLUMN_W,
    QTY_COLUMN_W,
)

LEFT = "left"
RIGHT = "right"


@dataclass(frozen=True)
class TableColumn:
    key: str
    label: str
    width: float = 0.0
    align: str = LEFT
    flexible: bool = False


DEFAULT_COLUMNS: Tuple[TableColumn, ...] = (
    TableColumn("item", "Item", ITEM_COLUMN_W),
    TableColumn("description", "Description", DESCRIPTION_COLUMN_W, flexible=True),
    TableColumn("quantity", "Qty", QTY_COLUMN_W, RIGHT),
    TableColumn("price", "Price", PRICE_COLUMN_W, RIGHT),
    TableColumn("total", "Total", 0.0, RIGHT),
)


def allocate_column_widths(
    table_width: float,
    columns: Sequence[TableColumn] = DEFAULT_COLUMNS,
    min_total_width: float = MIN_TOTAL_COLUMN_W,
    min_flexible_width: float = MIN_DESCRIPTION_W,
) -> List[TableColumn]:
    """Size ``columns`` to ``table_width``; the last column takes the remainder.

    When the fixed columns leave the trailing column less than
    ``min_total_width``, the widest flexible column gives up the deficit, but
    never shrinks below ``min_flexible_width``. Widths always sum to
    ``table_width``.
    """
    if not columns:
        return []
    leading = list(columns[:-1])

    deficit = min_total_width - (table_width - sum(column.width for column in leading))
    flexible = [i for i, column in enumerate(leading) if column.flexible]
    if deficit > 0 and flexible:
        widest = max(flexible, key=lambda i: leading[i].width)
        shrunk = max(min_flexible_width, leading[widest].width - deficit)
        leading[widest] = replace(leading[widest], width=shrunk)

    remainder = table_width - sum(column.width for column in leading)
    return leading + [replace(columns[-1], width=remainder)]


def column_edges(left: float, columns: Sequence[TableColumn]) -> List[float]:
    edges = [left]
    for column in columns:
        edges.append(edges[-1] + column.width)
    return edges
