"""Shared front half of both request paths: decode -> normalize -> Sociedad filter."""

from __future__ import annotations

from dataclasses import dataclass

from crudo_kernel.logging_config import get_logger

from crudo_ingestion.adapters.base import SourceAdapter
from crudo_ingestion.adapters.dispatch import adapter_for_filename
from crudo_ingestion.domain.columns import normalize_rows
from crudo_ingestion.domain.filters import filter_sociedad
from crudo_ingestion.domain.types import NormalizedTable, SociedadFilterResult
from crudo_ingestion.services.uploads import UploadedFile

logger = get_logger("ingestion.services.pipeline")


@dataclass(frozen=True)
class PreparedExport:
    """Normalized table and its Sociedad-filtered rows."""

    table: NormalizedTable
    sociedad: SociedadFilterResult


def prepare_export(
    upload: UploadedFile,
    adapters: dict[str, SourceAdapter] | None = None,
) -> PreparedExport:
    """Decode the upload and apply the Sociedad filter.

    The extension is checked before the file is read.
    """
    adapter = adapter_for_filename(upload.filename, adapters)
    raw_rows = adapter.read_rows(upload.read_bytes(), upload.filename)
    table = normalize_rows(raw_rows)
    sociedad = filter_sociedad(table.rows)
    logger.info(
        "export_prepared",
        extra={
            "source_format": adapter.source_format,
            "width": table.width,
            "total_original": sociedad.total_original,
            "retained": sociedad.total,
            "removed_sociedad": sociedad.removed,
        },
    )
    return PreparedExport(table=table, sociedad=sociedad)
