"""
Bulk-load text encoder.

Every cell is wrapped in double quotes with inner quotes doubled, fields are
joined by commas and lines by a single LF. No header, no trailing newline.
The destination load statements are built from the same dialect constants.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from crudo_ingestion.domain.types import NormalizedRow


@dataclass(frozen=True)
class BulkTextDialect:
    """Field/line terminators and quoting of the bulk-load text."""

    field_terminator: str = ","
    line_terminator: str = "\n"
    enclosed_by: str = '"'
    escaped_by: str = '"'

    def quote(self, value: str) -> str:
        q = self.enclosed_by
        return q + value.replace(q, self.escaped_by + q) + q


BULK_TEXT_DIALECT = BulkTextDialect()


def encode_bulk_text(
    rows: Iterable[NormalizedRow],
    columns: Sequence[str],
    dialect: BulkTextDialect = BULK_TEXT_DIALECT,
) -> str:
    """Serialize rows in ``columns`` order (the full original column sequence)."""
    return dialect.line_terminator.join(
        dialect.field_terminator.join(dialect.quote(str(row.get(c, "") or "")) for c in columns)
        for row in rows
    )
