"""
Positional column naming and row normalization. ZERO I/O.

Columns are named with bijective base-26 lowercase letters, like spreadsheet
columns: 0 -> "a", 25 -> "z", 26 -> "aa", 701 -> "zz", 702 -> "aaa". There is
no zero digit, so every non-negative index has exactly one name and vice versa.
"""

from __future__ import annotations

from string import ascii_lowercase
from types import MappingProxyType
from typing import Sequence

from crudo_ingestion.domain.types import NormalizedTable

_ALPHABET = ascii_lowercase
_BASE = len(_ALPHABET)


def column_name(index: int) -> str:
    """Name for a 0-based column index."""
    if index < 0:
        raise ValueError(f"Column index must be non-negative, got {index}")
    letters: list[str] = []
    x = index
    while x >= 0:
        letters.append(_ALPHABET[x % _BASE])
        x = x // _BASE - 1
    return "".join(reversed(letters))


def column_index(name: str) -> int:
    """Inverse of ``column_name``."""
    if not name or any(ch not in _ALPHABET for ch in name):
        raise ValueError(f"Not a column name: {name!r}")
    index = 0
    for ch in name:
        index = index * _BASE + (_ALPHABET.index(ch) + 1)
    return index - 1


def column_names(width: int) -> tuple[str, ...]:
    """Names for columns 0..width-1. Same width, same names."""
    return tuple(column_name(i) for i in range(width))


def normalize_rows(raw_rows: Sequence[Sequence[str]]) -> NormalizedTable:
    """Map each raw row onto the column names of the widest row.

    Missing trailing cells become "". Cells are not trimmed here.
    """
    width = max((len(r) for r in raw_rows), default=0)
    columns = column_names(width)
    rows = tuple(
        MappingProxyType(
            {name: (raw[i] if i < len(raw) and raw[i] is not None else "") for i, name in enumerate(columns)}
        )
        for raw in raw_rows
    )
    return NormalizedTable(columns=columns, rows=rows)
