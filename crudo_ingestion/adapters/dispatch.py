"""Pick a source adapter from the upload's filename extension (no content sniffing)."""

from __future__ import annotations

from crudo_kernel.exceptions import UnsupportedFormatError

from crudo_ingestion.adapters.base import RawRow, SourceAdapter
from crudo_ingestion.adapters.csv_adapter import CsvSourceAdapter
from crudo_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter

SUPPORTED_EXTENSIONS: tuple[str, ...] = (".csv", ".xlsx")


def _default_adapters() -> dict[str, SourceAdapter]:
    return {
        ".csv": CsvSourceAdapter(),
        ".xlsx": XlsxSourceAdapter(),
    }


def adapter_for_filename(
    filename: str,
    adapters: dict[str, SourceAdapter] | None = None,
) -> SourceAdapter:
    """Return the adapter for ``filename``'s extension (case-insensitive).

    Raises:
        UnsupportedFormatError: extension is not .csv or .xlsx.
    """
    registry = adapters if adapters is not None else _default_adapters()
    lowered = (filename or "").lower()
    for extension, adapter in registry.items():
        if lowered.endswith(extension):
            return adapter
    raise UnsupportedFormatError(filename)


def decode_upload(
    filename: str,
    data: bytes,
    adapters: dict[str, SourceAdapter] | None = None,
) -> list[RawRow]:
    """Decode uploaded bytes into raw rows using the extension's dialect."""
    return adapter_for_filename(filename, adapters).read_rows(data, filename)
