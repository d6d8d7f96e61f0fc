"""
Dialect-specific truncate and bulk-load strategies.

    mysql / mariadb -> MySqlLoadDataLoader  TRUNCATE TABLE + LOAD DATA LOCAL INFILE
    anything else   -> InsertBulkLoader     DELETE FROM + positional executemany INSERT

Both expect the bulk text's column order to match the destination's column
order. Narrower rows leave trailing destination columns to their defaults;
wider rows have their extra fields dropped. This is not validated.
"""

from __future__ import annotations

import csv
import io
import os
import tempfile
from itertools import groupby
from typing import Protocol

from sqlalchemy import MetaData, Table, delete, insert
from sqlalchemy.engine import Connection

from crudo_kernel.logging_config import get_logger

from crudo_ingestion.encoding.bulk_text import BULK_TEXT_DIALECT, BulkTextDialect
from crudo_ingestion.store.destination import DestinationTable

logger = get_logger("ingestion.store.loaders")


class BulkLoader(Protocol):
    """Truncate and bulk-load facility of one destination dialect."""

    def truncate(self, conn: Connection, destination: DestinationTable) -> None:
        ...

    def bulk_load(self, conn: Connection, destination: DestinationTable, bulk_text: str) -> None:
        ...


def qualified_name(conn: Connection, destination: DestinationTable) -> str:
    """Dialect-quoted ``schema.table`` for raw statements."""
    preparer = conn.dialect.identifier_preparer
    name = preparer.quote(destination.name)
    if destination.schema:
        return f"{preparer.quote_schema(destination.schema)}.{name}"
    return name


def _mysql_string_literal(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f"'{escaped}'"


class MySqlLoadDataLoader:
    """MySQL/MariaDB native bulk load through a temporary local file.

    Requires ``local_infile`` on both the client connection and the server.
    The temporary file is removed whether or not the load succeeds.
    """

    def __init__(self, dialect: BulkTextDialect = BULK_TEXT_DIALECT, tmp_dir: str | None = None):
        self._dialect = dialect
        self._tmp_dir = tmp_dir

    def truncate(self, conn: Connection, destination: DestinationTable) -> None:
        conn.exec_driver_sql(
            f"TRUNCATE TABLE {qualified_name(conn, destination)}",
            execution_options={"no_parameters": True},
        )

    def build_statement(self, conn: Connection, destination: DestinationTable, path: str) -> str:
        d = self._dialect
        return (
            f"LOAD DATA LOCAL INFILE {_mysql_string_literal(path)}\n"
            f"INTO TABLE {qualified_name(conn, destination)}\n"
            f"CHARACTER SET utf8mb4\n"
            f"FIELDS TERMINATED BY {_mysql_string_literal(d.field_terminator)}"
            f" ENCLOSED BY {_mysql_string_literal(d.enclosed_by)}"
            f" ESCAPED BY {_mysql_string_literal(d.escaped_by)}\n"
            f"LINES TERMINATED BY {_mysql_string_literal(d.line_terminator)}"
        )

    def bulk_load(self, conn: Connection, destination: DestinationTable, bulk_text: str) -> None:
        fd, path = tempfile.mkstemp(prefix="fbl1n_", suffix=".csv", dir=self._tmp_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(bulk_text)
            conn.exec_driver_sql(
                self.build_statement(conn, destination, path),
                execution_options={"no_parameters": True},
            )
        finally:
            try:
                os.unlink(path)
            except FileNotFoundError:
                pass
            logger.debug("bulk_text_file_removed", extra={"path": path})


class InsertBulkLoader:
    """Portable fallback: parse the bulk text back and INSERT positionally.

    Used for destinations without a native local-file loader (e.g. SQLite).
    Destination columns are reflected so field i lands in column i.
    """

    def __init__(self, dialect: BulkTextDialect = BULK_TEXT_DIALECT):
        self._dialect = dialect

    def truncate(self, conn: Connection, destination: DestinationTable) -> None:
        conn.execute(delete(destination.clause()))

    def _parse(self, bulk_text: str) -> list[list[str]]:
        if not bulk_text:
            return []
        d = self._dialect
        reader = csv.reader(
            io.StringIO(bulk_text, newline=""),
            delimiter=d.field_terminator,
            quotechar=d.enclosed_by,
            doublequote=d.escaped_by == d.enclosed_by,
            escapechar=None if d.escaped_by == d.enclosed_by else d.escaped_by,
            strict=False,
        )
        return [row for row in reader if row]

    def bulk_load(self, conn: Connection, destination: DestinationTable, bulk_text: str) -> None:
        target = Table(destination.name, MetaData(), schema=destination.schema, autoload_with=conn)
        target_columns = [c.name for c in target.columns]
        records = [dict(zip(target_columns, fields)) for fields in self._parse(bulk_text)]
        # executemany needs one parameter shape per batch; consecutive runs keep file order
        for _, batch in groupby(records, key=len):
            conn.execute(insert(target), list(batch))


def loader_for_dialect(dialect_name: str) -> BulkLoader:
    """Default bulk loader for a SQLAlchemy dialect name."""
    if dialect_name in ("mysql", "mariadb"):
        return MySqlLoadDataLoader()
    return InsertBulkLoader()
