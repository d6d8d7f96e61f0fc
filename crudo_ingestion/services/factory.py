"""Wire services from resolved settings (no environment lookups here)."""

from __future__ import annotations

from sqlalchemy.engine import Engine

from crudo_config import LoaderSettings

from crudo_ingestion.services.load_service import LoadService
from crudo_ingestion.services.preview_service import PreviewService
from crudo_ingestion.store.destination import DestinationTable
from crudo_ingestion.store.orchestrator import LoadOrchestrator

# Dialects where a database name is not addressable as a schema qualifier
_SCHEMALESS_DIALECTS = frozenset({"sqlite"})


def destination_for(settings: LoaderSettings, engine: Engine) -> DestinationTable:
    """Destination table for ``settings`` as seen through ``engine``'s dialect."""
    schema = None if engine.dialect.name in _SCHEMALESS_DIALECTS else settings.db_name
    return DestinationTable(
        name=settings.db_table,
        schema=schema,
        date_column=settings.date_column,
        invalid_date_sentinel=settings.invalid_date_sentinel,
    )


def build_preview_service(settings: LoaderSettings) -> PreviewService:
    return PreviewService(preview_limit=settings.preview_limit)


def build_load_service(settings: LoaderSettings, engine: Engine) -> LoadService:
    return LoadService(LoadOrchestrator(engine, destination_for(settings, engine)))
