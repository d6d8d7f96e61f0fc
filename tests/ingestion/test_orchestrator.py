"""Tests for the load orchestrator and the dialect bulk loaders.

SQLite runs the full five-step sequence through InsertBulkLoader. The MySQL
LOAD DATA path is checked at the statement level with the real MySQL dialect
and a recording connection, since no MySQL server is available to the suite.
"""

from types import SimpleNamespace

import pytest
from sqlalchemy.dialects import mysql, sqlite

from crudo_kernel.exceptions import StoreError
from crudo_ingestion.domain import normalize_rows
from crudo_ingestion.encoding import encode_bulk_text
from crudo_ingestion.store import (
    DestinationTable,
    InsertBulkLoader,
    LoadOrchestrator,
    LoadStep,
    MySqlLoadDataLoader,
    loader_for_dialect,
    qualified_name,
)
from tests.conftest import export_row


def _bulk_text(rows):
    table = normalize_rows(rows)
    return encode_bulk_text(table.rows, table.columns)


class _RecordingConnection:
    """Stands in for a MySQL Connection: records raw statements, optionally fails."""

    def __init__(self, fail_with: Exception | None = None):
        self.dialect = mysql.dialect()
        self.statements: list[str] = []
        self.file_contents: list[str] = []
        self._fail_with = fail_with

    def exec_driver_sql(self, statement, parameters=None, execution_options=None):
        self.statements.append(statement)
        if statement.startswith("LOAD DATA"):
            path = statement.split("'")[1]
            with open(path, encoding="utf-8", newline="") as f:
                self.file_contents.append(f.read())
        if self._fail_with is not None:
            raise self._fail_with
        return SimpleNamespace(rowcount=0)


# =============================================================================
# Orchestrator on SQLite
# =============================================================================


class TestLoadOrchestratorSqlite:
    def test_truncates_then_loads(self, sqlite_engine, destination, seed_rows, fetch_rows):
        seed_rows(3)
        text = _bulk_text([export_row("1", "X", "10,00", "2024-01-15"), export_row("2", "Z", "5.5", "2024-01-17")])

        outcome = LoadOrchestrator(sqlite_engine, destination).run(text, rows_sent=2)

        assert outcome.rows_sent == 2
        assert outcome.final_total == 2
        assert outcome.inconsistent_rows == 0
        assert outcome.steps_completed == (
            LoadStep.TRUNCATE,
            LoadStep.BULK_LOAD,
            LoadStep.RECONCILE,
            LoadStep.PURGE,
            LoadStep.FINALIZE,
        )
        rows = fetch_rows()
        assert [r["Cliente"] for r in rows] == ["X", "Z"]
        assert rows[0]["Importe"] == "10,00"
        assert rows[0]["FechaDoc"] == "2024-01-15"
        assert all(r["Sociedad"] != "OLD" for r in rows)

    def test_invalid_dates_counted_and_purged(self, sqlite_engine, destination, fetch_rows):
        text = _bulk_text(
            [
                export_row("1", "X", "1", "0000-00-00"),
                export_row("1", "Y", "2", "2024-01-15"),
                export_row("1", "W", "3", "0000-00-00"),
            ]
        )

        outcome = LoadOrchestrator(sqlite_engine, destination).run(text, rows_sent=3)

        assert outcome.inconsistent_rows == 2
        assert outcome.final_total == 1
        assert [r["Cliente"] for r in fetch_rows()] == ["Y"]

    def test_narrow_rows_leave_trailing_columns_null(self, sqlite_engine, destination, fetch_rows):
        outcome = LoadOrchestrator(sqlite_engine, destination).run(_bulk_text([["1", "X"]]), rows_sent=1)

        assert outcome.final_total == 1
        row = fetch_rows()[0]
        assert row["Cliente"] == "X"
        assert row["FechaDoc"] is None

    def test_mixed_widths_keep_file_order(self, sqlite_engine, destination, fetch_rows):
        text = encode_bulk_text(
            [{"a": "1", "b": "X"}, {"a": "2", "b": "Y", "c": "c"}, {"a": "3", "b": "Z"}],
            ("a", "b", "c"),
        )
        LoadOrchestrator(sqlite_engine, destination).run(text, rows_sent=3)
        assert [r["Cliente"] for r in fetch_rows()] == ["X", "Y", "Z"]

    def test_quotes_and_commas_survive(self, sqlite_engine, destination, fetch_rows):
        text = _bulk_text([["1", 'ACME "Norte", S.A.']])
        LoadOrchestrator(sqlite_engine, destination).run(text, rows_sent=1)
        assert fetch_rows()[0]["Cliente"] == 'ACME "Norte", S.A.'

    def test_empty_load_truncates(self, sqlite_engine, destination, seed_rows):
        seed_rows(2)
        outcome = LoadOrchestrator(sqlite_engine, destination).run("", rows_sent=0)
        assert outcome.final_total == 0

    def test_missing_table_fails_on_truncate(self, sqlite_engine, captured_logs):
        missing = DestinationTable(name="does_not_exist")

        with pytest.raises(StoreError) as exc_info:
            LoadOrchestrator(sqlite_engine, missing).run('"1"', rows_sent=1)

        assert exc_info.value.step == "truncate"
        assert exc_info.value.table == "does_not_exist"
        assert "no such table" in str(exc_info.value)
        assert exc_info.value.status_code == 500
        failed = [r for r in captured_logs() if r["message"] == "load_step_failed"]
        assert failed and failed[0]["step"] == "truncate"
        assert failed[0]["steps_completed"] == []

    def test_failure_after_truncate_names_bulk_load(self, sqlite_engine, destination, seed_rows, fetch_rows):
        seed_rows(2)

        class _BrokenLoader(InsertBulkLoader):
            def bulk_load(self, conn, destination, bulk_text):
                raise OSError("disk full")

        with pytest.raises(StoreError) as exc_info:
            LoadOrchestrator(sqlite_engine, destination, bulk_loader=_BrokenLoader()).run('"1"', rows_sent=1)

        assert exc_info.value.step == "bulk_load"
        # no rollback: the truncate already happened
        assert fetch_rows() == []

    def test_unreachable_store_raises_store_error(self, tmp_path, destination):
        from crudo_kernel.db.engine import create_store_engine

        engine = create_store_engine(f"sqlite:///{tmp_path / 'missing_dir' / 'x.db'}")
        with pytest.raises(StoreError) as exc_info:
            LoadOrchestrator(engine, destination).run('"1"', rows_sent=1)
        assert exc_info.value.step == "connection"

    def test_logs_completion(self, sqlite_engine, destination, captured_logs):
        LoadOrchestrator(sqlite_engine, destination).run(_bulk_text([export_row("1", "X")]), rows_sent=1)
        done = [r for r in captured_logs() if r["message"] == "load_completed"]
        assert done[0]["final_total"] == 1
        assert done[0]["rows_sent"] == 1


# =============================================================================
# MySQL LOAD DATA loader
# =============================================================================


class TestMySqlLoadDataLoader:
    def test_truncate_statement(self):
        conn = _RecordingConnection()
        MySqlLoadDataLoader().truncate(conn, DestinationTable(name="crudo_ap", schema="corven"))
        assert conn.statements == ["TRUNCATE TABLE corven.crudo_ap"]

    def test_load_statement_matches_bulk_text_dialect(self):
        conn = _RecordingConnection()
        stmt = MySqlLoadDataLoader().build_statement(
            conn, DestinationTable(name="crudo_ap", schema="corven"), "/tmp/fbl1n_x.csv"
        )
        assert stmt.startswith("LOAD DATA LOCAL INFILE '/tmp/fbl1n_x.csv'")
        assert "INTO TABLE corven.crudo_ap" in stmt
        assert "CHARACTER SET utf8mb4" in stmt
        assert "FIELDS TERMINATED BY ','" in stmt
        assert "ENCLOSED BY '\"'" in stmt
        assert "ESCAPED BY '\"'" in stmt
        assert stmt.endswith("LINES TERMINATED BY '\\n'")

    def test_reserved_and_odd_names_quoted(self):
        conn = _RecordingConnection()
        name = qualified_name(conn, DestinationTable(name="order", schema="my db"))
        assert name == "`my db`.`order`"

    def test_path_with_quote_escaped(self):
        conn = _RecordingConnection()
        stmt = MySqlLoadDataLoader().build_statement(conn, DestinationTable(name="t"), "/tmp/o'brien.csv")
        assert "INFILE '/tmp/o\\'brien.csv'" in stmt

    def test_bulk_load_writes_then_removes_file(self, tmp_path):
        conn = _RecordingConnection()
        MySqlLoadDataLoader(tmp_dir=str(tmp_path)).bulk_load(conn, DestinationTable(name="crudo_ap"), '"1","X"\n"2","Z"')

        assert conn.file_contents == ['"1","X"\n"2","Z"']
        assert list(tmp_path.glob("fbl1n_*.csv")) == []

    def test_file_removed_when_load_fails(self, tmp_path):
        conn = _RecordingConnection(fail_with=RuntimeError("local_infile disabled"))
        with pytest.raises(RuntimeError):
            MySqlLoadDataLoader(tmp_dir=str(tmp_path)).bulk_load(conn, DestinationTable(name="crudo_ap"), '"1"')
        assert list(tmp_path.iterdir()) == []


class TestLoaderForDialect:
    @pytest.mark.parametrize("name", ["mysql", "mariadb"])
    def test_mysql_family(self, name):
        assert isinstance(loader_for_dialect(name), MySqlLoadDataLoader)

    def test_fallback(self):
        assert isinstance(loader_for_dialect(sqlite.dialect().name), InsertBulkLoader)
