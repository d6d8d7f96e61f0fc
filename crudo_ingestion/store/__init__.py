"""Destination store: bulk loaders and the load orchestrator."""

from crudo_ingestion.store.destination import DestinationTable, LoadOutcome, LoadStep
from crudo_ingestion.store.loaders import (
    BulkLoader,
    InsertBulkLoader,
    MySqlLoadDataLoader,
    loader_for_dialect,
    qualified_name,
)
from crudo_ingestion.store.orchestrator import LoadOrchestrator

__all__ = [
    "BulkLoader",
    "DestinationTable",
    "InsertBulkLoader",
    "LoadOrchestrator",
    "LoadOutcome",
    "LoadStep",
    "MySqlLoadDataLoader",
    "loader_for_dialect",
    "qualified_name",
]
