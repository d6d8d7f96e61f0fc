"""
crudo_ingestion.domain.types -- Pure frozen dataclasses for the pipeline.

ZERO I/O. Rows are read-only mappings (column name -> cell text); filters
produce new tuples of the same row objects and never mutate them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

NormalizedRow = Mapping[str, str]

# Designated positional columns
SOCIEDAD_COLUMN = "a"
CLIENT_KEY_COLUMN = "b"
AMOUNT_COLUMN = "o"


@dataclass(frozen=True)
class NormalizedTable:
    """Column-name sequence for the widest row plus one mapping per raw row."""

    columns: tuple[str, ...]
    rows: tuple[NormalizedRow, ...]

    @property
    def width(self) -> int:
        return len(self.columns)


@dataclass(frozen=True)
class SociedadFilterResult:
    """Rows retained by the Sociedad filter plus the partition counts."""

    total_original: int
    total: int
    removed: int
    rows: tuple[NormalizedRow, ...]

    @property
    def is_empty(self) -> bool:
        """Empty-after-filter: every row lacked a Sociedad value."""
        return self.total == 0


@dataclass(frozen=True)
class ExclusionResult:
    """Rows left after operator exclusions."""

    rows: tuple[NormalizedRow, ...]
    excluded: int

    @property
    def is_empty(self) -> bool:
        """No-rows-to-load: exclusions removed everything."""
        return not self.rows


@dataclass(frozen=True)
class AggregateResult:
    """Column total plus whether the column exists at all in the table."""

    column: str
    total: float
    column_present: bool
