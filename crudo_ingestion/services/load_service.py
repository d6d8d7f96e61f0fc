"""
Load service: decode -> Sociedad filter -> exclusions -> encode -> orchestrate.

Recoverable filter conditions (empty after Sociedad filter, nothing left after
exclusions) are refused with a client error before the destination is touched.
Store failures come back as a single opaque server error.
"""

from __future__ import annotations

from typing import Any, Sequence
from uuid import uuid4

from crudo_kernel.exceptions import CrudoError
from crudo_kernel.logging_config import LogContext, get_logger

from crudo_ingestion.adapters.base import SourceAdapter
from crudo_ingestion.domain.filters import apply_exclusions, parse_exclusion_keys
from crudo_ingestion.encoding.bulk_text import encode_bulk_text
from crudo_ingestion.services.pipeline import prepare_export
from crudo_ingestion.services.responses import (
    EMPTY_AFTER_FILTER_MESSAGE,
    NO_ROWS_TO_LOAD_MESSAGE,
    LoadResponse,
)
from crudo_ingestion.services.uploads import UploadedFile, upload_scope
from crudo_ingestion.store.orchestrator import LoadOrchestrator

logger = get_logger("ingestion.services.load")


class LoadService:
    """Loads one uploaded export into the destination table."""

    def __init__(
        self,
        orchestrator: LoadOrchestrator,
        adapters: dict[str, SourceAdapter] | None = None,
    ):
        self._orchestrator = orchestrator
        self._adapters = adapters

    def load(
        self,
        upload: UploadedFile | None,
        exclusions: str | Sequence[Any] | None = None,
    ) -> LoadResponse:
        """Run the commit path. ``exclusions`` is the ``clientesExcluir`` field
        (JSON-serialized list or an already-decoded sequence).

        The uploaded temp file is removed before returning, whatever the outcome.
        """
        with LogContext.bind(
            request_id=str(uuid4()),
            operation="load",
            source_filename=upload.filename if upload else None,
        ):
            try:
                with upload_scope(upload) as up:
                    exclusion_set = parse_exclusion_keys(exclusions)
                    return self._load(up, exclusion_set)
            except CrudoError as exc:
                logger.warning("load_failed", extra={"error_code": exc.code}, exc_info=True)
                return LoadResponse.failure(exc)
            except Exception as exc:
                logger.exception("load_failed_unexpected", extra={"error_type": type(exc).__name__})
                return LoadResponse.unexpected(exc)

    def _load(self, upload: UploadedFile, exclusion_set: frozenset[str]) -> LoadResponse:
        prepared = prepare_export(upload, self._adapters)
        sociedad = prepared.sociedad

        if sociedad.is_empty:
            logger.info("load_refused_empty_after_filter", extra={"removed_sociedad": sociedad.removed})
            return LoadResponse.refused(EMPTY_AFTER_FILTER_MESSAGE, "EMPTY_AFTER_FILTER")

        excluded = apply_exclusions(sociedad.rows, exclusion_set)
        if excluded.is_empty:
            logger.info(
                "load_refused_no_rows",
                extra={"excluded": excluded.excluded, "exclusion_keys": exclusion_set},
            )
            return LoadResponse.refused(NO_ROWS_TO_LOAD_MESSAGE, "NO_ROWS_TO_LOAD")

        bulk_text = encode_bulk_text(excluded.rows, prepared.table.columns)
        logger.info(
            "load_started",
            extra={
                "rows_to_load": len(excluded.rows),
                "excluded": excluded.excluded,
                "width": prepared.table.width,
            },
        )
        outcome = self._orchestrator.run(bulk_text, rows_sent=len(excluded.rows))
        return LoadResponse(
            ok=True,
            removed_sociedad=sociedad.removed,
            total_final=outcome.final_total,
            filas_inconsistentes=outcome.inconsistent_rows,
        )
