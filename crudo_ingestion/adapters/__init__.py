"""Source adapters for export ingestion (file bytes only, no DB)."""

from crudo_ingestion.adapters.base import SourceAdapter, SourceProbe
from crudo_ingestion.adapters.csv_adapter import CsvSourceAdapter
from crudo_ingestion.adapters.dispatch import (
    SUPPORTED_EXTENSIONS,
    adapter_for_filename,
    decode_upload,
)
from crudo_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter

__all__ = [
    "SourceAdapter",
    "SourceProbe",
    "CsvSourceAdapter",
    "XlsxSourceAdapter",
    "SUPPORTED_EXTENSIONS",
    "adapter_for_filename",
    "decode_upload",
]
