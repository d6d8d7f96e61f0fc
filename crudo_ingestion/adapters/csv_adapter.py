"""
CSV source adapter for headerless exports.

Dialect: comma separator, double-quote quoting. Each physical line is scanned
on its own:

  - ``""`` is a literal quote, inside or outside a quoted section, except
    when it is a whole cell (``"",`` or ``""`` at end of line), which is an
    empty cell;
  - any other ``"`` toggles quoted mode and is dropped, wherever it appears
    in the cell (``AB"C,D"E`` is the single cell ``ABC,DE``);
  - ``,`` splits cells only outside quoted mode.

A quoted section never spans lines: an unbalanced quote ends at the end of its
line. No cell-size limit, and a lone ``\\r`` stays in the cell. Not a full
RFC 4180 reader.

Text is UTF-8 (a leading BOM is stripped). Bytes that are not valid UTF-8 are
replaced with U+FFFD and a warning is logged instead of rejecting the file.
"""

from __future__ import annotations

import re

from crudo_kernel.logging_config import get_logger

from crudo_ingestion.adapters.base import RawRow, SourceProbe, build_probe

logger = get_logger("ingestion.adapters.csv")

DELIMITER = ","
QUOTECHAR = '"'

_LINE_BREAK = re.compile(r"\r?\n")


def _decode_text(data: bytes, filename: str) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        logger.warning(
            "csv_invalid_utf8_replaced",
            extra={"source_filename": filename, "byte_offset": exc.start},
        )
        return data.decode("utf-8-sig", errors="replace")


def split_lines(text: str) -> list[str]:
    """Split on LF / CRLF and drop zero-length lines (whitespace-only lines stay)."""
    return [line for line in _LINE_BREAK.split(text) if len(line) > 0]


def parse_line(line: str) -> RawRow:
    """Scan one physical line into cells."""
    cells: RawRow = []
    current: list[str] = []
    in_quotes = False
    cell_start = True
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == QUOTECHAR and i + 1 < n and line[i + 1] == QUOTECHAR:
            whole_cell = cell_start and not in_quotes and (i + 2 == n or line[i + 2] == DELIMITER)
            if not whole_cell:
                current.append(QUOTECHAR)
            cell_start = False
            i += 2
            continue
        if ch == QUOTECHAR:
            in_quotes = not in_quotes
        elif ch == DELIMITER and not in_quotes:
            cells.append("".join(current))
            current = []
            cell_start = True
            i += 1
            continue
        else:
            current.append(ch)
        cell_start = False
        i += 1
    cells.append("".join(current))
    return cells


class CsvSourceAdapter:
    """Read headerless CSV bytes as a list of raw rows."""

    source_format = "csv"

    def read_rows(self, data: bytes, filename: str = "") -> list[RawRow]:
        text = _decode_text(data, filename)
        rows = [parse_line(line) for line in split_lines(text)]
        logger.debug("csv_decoded", extra={"source_filename": filename, "row_count": len(rows)})
        return rows

    def probe(self, data: bytes, filename: str = "") -> SourceProbe:
        return build_probe(self.source_format, self.read_rows(data, filename))
