"""Bulk-load text encoding (normalized rows -> headerless delimited text)."""

from crudo_ingestion.encoding.bulk_text import BULK_TEXT_DIALECT, BulkTextDialect, encode_bulk_text

__all__ = [
    "BULK_TEXT_DIALECT",
    "BulkTextDialect",
    "encode_bulk_text",
]
