"""
Lenient numeric aggregation over text cells. ZERO I/O.

Cells stay text until this point; only the aggregate reads them as numbers.
A malformed cell is not an error: it contributes 0.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from crudo_ingestion.domain.columns import column_index
from crudo_ingestion.domain.types import AMOUNT_COLUMN, AggregateResult, NormalizedRow


def parse_amount(cell: object) -> float:
    """Cell value as a float contribution.

    Blank -> 0. The first decimal comma becomes a decimal point ("12,50" ->
    12.5). Unparseable or non-finite values -> 0.
    """
    if cell is None:
        return 0.0
    text = str(cell).strip()
    if not text:
        return 0.0
    text = text.replace(",", ".", 1)
    # float() accepts digit-group underscores; exports never mean them as digits
    if "_" in text:
        return 0.0
    try:
        value = float(text)
    except ValueError:
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return value


def sum_column(rows: Iterable[NormalizedRow], column: str = AMOUNT_COLUMN) -> float:
    """Sequential float sum of ``column`` across rows (absent cells count as 0)."""
    total = 0.0
    for row in rows:
        total += parse_amount(row.get(column))
    return total


def aggregate_column(
    rows: Sequence[NormalizedRow],
    columns: Sequence[str],
    column: str = AMOUNT_COLUMN,
) -> AggregateResult:
    """Total plus a presence flag so an absent column is not mistaken for a real 0.

    Presence is positional: ``"o"`` exists iff the table is at least 15 wide.
    A ``column`` that is not a positional name raises ``ValueError``.
    """
    position = column_index(column)
    return AggregateResult(
        column=column,
        total=sum_column(rows, column),
        column_present=position < len(columns),
    )
