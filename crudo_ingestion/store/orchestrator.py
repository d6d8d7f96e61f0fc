"""
Load orchestrator: truncate -> bulk load -> reconcile -> purge -> finalize.

Contract:
    ``LoadOrchestrator.run(bulk_text, rows_sent)`` drives the destination table
    through five sequential statements on one autocommit connection and
    returns the ``LoadOutcome``.

Guarantees:
    - The connection is closed on every exit path.
    - Steps run strictly in order and are never retried.
    - Any store failure surfaces as ``StoreError`` naming the failed step.

Non-goals:
    - Atomicity. A failure after TRUNCATE leaves the table truncated or
      loaded-but-not-reconciled; ``StoreError.step`` says which.
    - Serializing concurrent loads against the same table.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from crudo_kernel.db.engine import connection_scope
from crudo_kernel.exceptions import StoreError
from crudo_kernel.logging_config import get_logger

from crudo_ingestion.store.destination import DestinationTable, LoadOutcome, LoadStep
from crudo_ingestion.store.loaders import BulkLoader, loader_for_dialect

logger = get_logger("ingestion.store.orchestrator")

T = TypeVar("T")


class LoadOrchestrator:
    """Runs the five-step load sequence against one destination table."""

    def __init__(
        self,
        engine: Engine,
        destination: DestinationTable,
        bulk_loader: BulkLoader | None = None,
    ):
        self._engine = engine
        self._destination = destination
        self._bulk_loader = bulk_loader

    @property
    def destination(self) -> DestinationTable:
        return self._destination

    def _step(self, step: LoadStep, completed: list[LoadStep], action: Callable[[], T]) -> T:
        logger.info("load_step_started", extra={"step": step.value, "table": self._destination.display_name})
        try:
            result = action()
        except (SQLAlchemyError, OSError) as exc:
            logger.error(
                "load_step_failed",
                extra={
                    "step": step.value,
                    "table": self._destination.display_name,
                    "steps_completed": [s.value for s in completed],
                },
                exc_info=True,
            )
            reason = str(getattr(exc, "orig", None) or exc)
            raise StoreError(step.value, self._destination.display_name, reason) from exc
        completed.append(step)
        return result

    def count_inconsistent(self, conn: Connection) -> int:
        dest = self._destination.clause()
        stmt = (
            select(func.count())
            .select_from(dest)
            .where(dest.c[self._destination.date_column] == self._destination.invalid_date_sentinel)
        )
        return int(conn.execute(stmt).scalar() or 0)

    def purge_inconsistent(self, conn: Connection) -> None:
        dest = self._destination.clause()
        conn.execute(
            delete(dest).where(dest.c[self._destination.date_column] == self._destination.invalid_date_sentinel)
        )

    def count_all(self, conn: Connection) -> int:
        return int(conn.execute(select(func.count()).select_from(self._destination.clause())).scalar() or 0)

    def run(self, bulk_text: str, rows_sent: int = 0) -> LoadOutcome:
        """Execute the load sequence. Raises StoreError on the first failure."""
        completed: list[LoadStep] = []
        dest = self._destination
        try:
            with connection_scope(self._engine) as conn:
                loader = self._bulk_loader or loader_for_dialect(conn.dialect.name)
                self._step(LoadStep.TRUNCATE, completed, lambda: loader.truncate(conn, dest))
                self._step(LoadStep.BULK_LOAD, completed, lambda: loader.bulk_load(conn, dest, bulk_text))
                inconsistent = self._step(LoadStep.RECONCILE, completed, lambda: self.count_inconsistent(conn))
                self._step(LoadStep.PURGE, completed, lambda: self.purge_inconsistent(conn))
                final_total = self._step(LoadStep.FINALIZE, completed, lambda: self.count_all(conn))
        except SQLAlchemyError as exc:
            # Steps wrap their own errors; only acquiring/releasing the connection lands here
            logger.error("store_connection_failed", extra={"table": dest.display_name}, exc_info=True)
            raise StoreError("connection", dest.display_name, str(getattr(exc, "orig", None) or exc)) from exc

        outcome = LoadOutcome(
            rows_sent=rows_sent,
            inconsistent_rows=inconsistent,
            final_total=final_total,
            steps_completed=tuple(completed),
        )
        logger.info(
            "load_completed",
            extra={
                "table": self._destination.display_name,
                "rows_sent": rows_sent,
                "inconsistent_rows": inconsistent,
                "final_total": final_total,
            },
        )
        return outcome
