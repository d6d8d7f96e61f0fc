"""Request-scoped services: preview and load."""

from crudo_ingestion.services.factory import (
    build_load_service,
    build_preview_service,
    destination_for,
)
from crudo_ingestion.services.load_service import LoadService
from crudo_ingestion.services.pipeline import PreparedExport, prepare_export
from crudo_ingestion.services.preview_service import DEFAULT_PREVIEW_LIMIT, PreviewService
from crudo_ingestion.services.responses import (
    EMPTY_AFTER_FILTER_MESSAGE,
    NO_ROWS_TO_LOAD_MESSAGE,
    LoadResponse,
    PreviewResponse,
)
from crudo_ingestion.services.uploads import UploadedFile, stage_upload, upload_scope

__all__ = [
    "DEFAULT_PREVIEW_LIMIT",
    "EMPTY_AFTER_FILTER_MESSAGE",
    "NO_ROWS_TO_LOAD_MESSAGE",
    "LoadResponse",
    "LoadService",
    "PreparedExport",
    "PreviewResponse",
    "PreviewService",
    "UploadedFile",
    "build_load_service",
    "build_preview_service",
    "destination_for",
    "prepare_export",
    "stage_upload",
    "upload_scope",
]
