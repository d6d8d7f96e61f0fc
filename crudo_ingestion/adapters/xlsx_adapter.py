"""
XLSX source adapter for headerless exports.

Reads the first worksheet (by position) in row-major order. Every cell is
coerced to text; trailing empty cells are trimmed and rows left with zero cells
are dropped. Column 0 is always sheet column A.

Text coercion (cell values stay opaque text downstream):
  - None -> ""
  - integral float -> integer text (10.0 -> "10")
  - date / datetime -> ISO "YYYY-MM-DD" (time part appended when not midnight)
  - bool -> "TRUE" / "FALSE"
  - anything else -> str(value)
"""

from __future__ import annotations

import zipfile
from datetime import date, datetime, time
from io import BytesIO
from typing import Any

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from crudo_kernel.exceptions import SourceDecodeError
from crudo_kernel.logging_config import get_logger

from crudo_ingestion.adapters.base import RawRow, SourceProbe, build_probe

logger = get_logger("ingestion.adapters.xlsx")

# Raised on open or lazily while iterating. XML ParseError subclasses SyntaxError.
_WORKBOOK_ERRORS = (
    InvalidFileException,
    zipfile.BadZipFile,
    KeyError,
    OSError,
    SyntaxError,
    ValueError,
    IndexError,
)


def cell_to_text(value: Any) -> str:
    """Coerce an openpyxl cell value to text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ", timespec="seconds")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)


def _trim_trailing_empty(cells: list[str]) -> RawRow:
    end = len(cells)
    while end > 0 and cells[end - 1] == "":
        end -= 1
    return cells[:end]


class XlsxSourceAdapter:
    """Read the first sheet of .xlsx bytes as a list of raw rows."""

    source_format = "xlsx"

    def read_rows(self, data: bytes, filename: str = "") -> list[RawRow]:
        try:
            wb = openpyxl.load_workbook(BytesIO(data), read_only=True, data_only=True)
        except _WORKBOOK_ERRORS as exc:
            raise self._decode_error(filename, exc) from exc

        try:
            if not wb.worksheets:
                return []
            sheet = wb.worksheets[0]
            # Exports often carry a stale <dimension> element; read every stored cell.
            sheet.reset_dimensions()
            rows: list[RawRow] = []
            for values in sheet.iter_rows(values_only=True):
                cells = _trim_trailing_empty([cell_to_text(v) for v in values])
                if cells:
                    rows.append(cells)
        except _WORKBOOK_ERRORS as exc:
            raise self._decode_error(filename, exc) from exc
        finally:
            wb.close()

        logger.debug(
            "xlsx_decoded",
            extra={"source_filename": filename, "sheet": sheet.title, "row_count": len(rows)},
        )
        return rows

    def _decode_error(self, filename: str, exc: Exception) -> SourceDecodeError:
        logger.warning(
            "xlsx_decode_failed",
            extra={"source_filename": filename, "error_type": type(exc).__name__},
        )
        return SourceDecodeError(filename, self.source_format, str(exc) or type(exc).__name__)

    def probe(self, data: bytes, filename: str = "") -> SourceProbe:
        return build_probe(self.source_format, self.read_rows(data, filename))
