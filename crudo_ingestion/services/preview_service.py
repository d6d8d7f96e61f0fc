"""
Preview service: decode -> Sociedad filter -> client keys + column-o total.

No destination access. Uses structured logging (LogContext, get_logger("ingestion.*")).
"""

from __future__ import annotations

from uuid import uuid4

from crudo_kernel.exceptions import IngestError
from crudo_kernel.logging_config import LogContext, get_logger

from crudo_ingestion.adapters.base import SourceAdapter
from crudo_ingestion.domain.aggregates import aggregate_column
from crudo_ingestion.domain.filters import unique_client_keys
from crudo_ingestion.services.pipeline import prepare_export
from crudo_ingestion.services.responses import PreviewResponse
from crudo_ingestion.services.uploads import UploadedFile, upload_scope

logger = get_logger("ingestion.services.preview")

DEFAULT_PREVIEW_LIMIT = 100


class PreviewService:
    """Builds the operator preview for one uploaded export."""

    def __init__(
        self,
        preview_limit: int = DEFAULT_PREVIEW_LIMIT,
        adapters: dict[str, SourceAdapter] | None = None,
    ):
        if preview_limit < 0:
            raise ValueError(f"preview_limit must be non-negative, got {preview_limit}")
        self._preview_limit = preview_limit
        self._adapters = adapters

    def preview(self, upload: UploadedFile | None) -> PreviewResponse:
        """Preview the upload. The temp file is removed before returning."""
        with LogContext.bind(
            request_id=str(uuid4()),
            operation="preview",
            source_filename=upload.filename if upload else None,
        ):
            try:
                with upload_scope(upload) as up:
                    return self._build(up)
            except IngestError as exc:
                logger.warning("preview_rejected", extra={"error_code": exc.code}, exc_info=True)
                return PreviewResponse.failure(exc)
            except Exception as exc:
                logger.exception("preview_failed", extra={"error_type": type(exc).__name__})
                return PreviewResponse.unexpected(exc)

    def _build(self, upload: UploadedFile) -> PreviewResponse:
        prepared = prepare_export(upload, self._adapters)
        sociedad = prepared.sociedad

        if sociedad.is_empty:
            logger.info("preview_empty_after_filter", extra={"removed_sociedad": sociedad.removed})
            return PreviewResponse.empty(sociedad.removed)

        aggregate = aggregate_column(sociedad.rows, prepared.table.columns)
        if not aggregate.column_present:
            logger.warning(
                "aggregate_column_absent",
                extra={"column": aggregate.column, "width": prepared.table.width},
            )

        response = PreviewResponse(
            empty_after_filter=False,
            removed_sociedad=sociedad.removed,
            total_filas=sociedad.total,
            preview=sociedad.rows[: self._preview_limit],
            clientes_unicos=unique_client_keys(sociedad.rows),
            suma_o=aggregate.total,
            suma_o_column_present=aggregate.column_present,
        )
        logger.info(
            "preview_completed",
            extra={
                "total_filas": response.total_filas,
                "removed_sociedad": response.removed_sociedad,
                "unique_clients": len(response.clientes_unicos),
            },
        )
        return response
