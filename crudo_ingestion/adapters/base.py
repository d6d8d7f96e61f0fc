"""
Source adapter protocol and probe DTO.

Contract:
    SourceAdapter.read_rows() returns every non-blank row of the file as a list
    of text cells, in file order. No header interpretation.
    SourceAdapter.probe() returns a quick snapshot: row count, width, sample rows.

Architecture: crudo_ingestion/adapters. File content only, no DB or service imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

RawRow = list[str]


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for decoding uploaded file bytes into raw rows."""

    source_format: str

    def read_rows(self, data: bytes, filename: str = "") -> list[RawRow]:
        """Decode the whole file. Blank lines/rows are dropped."""
        ...

    def probe(self, data: bytes, filename: str = "") -> "SourceProbe":
        """Quick probe: row count, widest row, first N rows."""
        ...


@dataclass(frozen=True)
class SourceProbe:
    """Result of probing a source file (row count, width, first N rows)."""

    source_format: str
    row_count: int
    width: int
    sample_rows: tuple[tuple[str, ...], ...]  # First 5 rows; do not mutate


def build_probe(source_format: str, rows: list[RawRow], sample_size: int = 5) -> SourceProbe:
    """Probe from already-decoded rows (shared by both adapters)."""
    return SourceProbe(
        source_format=source_format,
        row_count=len(rows),
        width=max((len(r) for r in rows), default=0),
        sample_rows=tuple(tuple(r) for r in rows[:sample_size]),
    )
