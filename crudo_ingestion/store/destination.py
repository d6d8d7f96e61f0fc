"""Destination table description, load steps and load outcome DTOs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy import column, table
from sqlalchemy.sql.expression import TableClause


class LoadStep(str, Enum):
    """Linear steps of one load request. Never retried, never rolled back."""

    TRUNCATE = "truncate"
    BULK_LOAD = "bulk_load"
    RECONCILE = "reconcile"
    PURGE = "purge"
    FINALIZE = "finalize"


@dataclass(frozen=True)
class DestinationTable:
    """The (database, table) the export is loaded into, plus the date check."""

    name: str
    schema: str | None = None
    date_column: str = "FechaDoc"
    invalid_date_sentinel: str = "0000-00-00"

    @property
    def display_name(self) -> str:
        return f"{self.schema}.{self.name}" if self.schema else self.name

    def clause(self) -> TableClause:
        """Lightweight Core table construct (no reflection) for count/delete."""
        return table(self.name, column(self.date_column), schema=self.schema)


@dataclass(frozen=True)
class LoadOutcome:
    """Destination row counts for one completed load request."""

    rows_sent: int
    inconsistent_rows: int
    final_total: int
    steps_completed: tuple[LoadStep, ...] = ()
