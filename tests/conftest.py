"""
Pytest fixtures for the crudo loader test suite.

Provides:
- Structured logging configured for tests, with a captured_logs helper
- Upload staging helpers for .csv / .xlsx content
- A file-backed SQLite destination table (SQLite exercises the portable
  InsertBulkLoader; MySQL's LOAD DATA path is covered with statement checks)
"""

import json
import logging
import zipfile
from io import BytesIO, StringIO
from typing import Callable

import openpyxl
import pytest
from sqlalchemy import Column, MetaData, String, Table, select

from crudo_kernel.db.engine import create_store_engine
from crudo_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from crudo_ingestion.services.uploads import UploadedFile, stage_upload
from crudo_ingestion.store.destination import DestinationTable

DEST_TABLE = "crudo_ap"

# Destination layout: export column a..p map positionally onto these
DEST_COLUMNS = (
    ["Sociedad", "Cliente"]
    + [f"col_{chr(c)}" for c in range(ord("c"), ord("o"))]
    + ["Importe", "FechaDoc"]
)


def export_row(a: str, b: str, o: str = "", p: str | None = None) -> list[str]:
    """Positional export row: a, b, twelve filler cells, o[, p]."""
    row = [a, b] + [f"f{i}" for i in range(12)] + [o]
    if p is not None:
        row.append(p)
    return row


def csv_text(rows: list[list[str]]) -> str:
    """Render rows in the export dialect (every cell quoted)."""
    return "\n".join(",".join('"' + c.replace('"', '""') + '"' for c in r) for r in rows) + "\n"


def zip_bytes(entries: dict[str, bytes]) -> bytes:
    """Zip archive with the given members (for malformed-workbook cases)."""
    buf = BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return buf.getvalue()


def replace_zip_member(data: bytes, name: str, content: bytes) -> bytes:
    """Copy of a zip archive with one member's bytes replaced."""
    with zipfile.ZipFile(BytesIO(data)) as src:
        entries = {item: src.read(item) for item in src.namelist()}
    entries[name] = content
    return zip_bytes(entries)


def xlsx_bytes(rows: list[list[object]], extra_sheet_rows: list[list[object]] | None = None) -> bytes:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Export"
    for r in rows:
        ws.append(r)
    if extra_sheet_rows is not None:
        other = wb.create_sheet("Other")
        for r in extra_sheet_rows:
            other.append(r)
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture crudo logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            logs = captured_logs()
            assert any(r["message"] == "preview_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("crudo")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Upload fixtures
# =============================================================================


@pytest.fixture
def make_upload(tmp_path) -> Callable[[str, bytes | str], UploadedFile]:
    """Stage content as an uploaded temp file under tmp_path."""
    upload_dir = tmp_path / "uploads"
    upload_dir.mkdir()

    def _make(filename: str, content: bytes | str) -> UploadedFile:
        data = content.encode("utf-8") if isinstance(content, str) else content
        return stage_upload(filename, data, directory=upload_dir)

    return _make


@pytest.fixture
def scenario_rows() -> list[list[str]]:
    """Three rows: Sociedad blank on the second one."""
    return [
        export_row("1", "X", "10,00", "2024-01-15"),
        export_row("", "Y", "99", "2024-01-16"),
        export_row("2", "Z", "5.5", "2024-01-17"),
    ]


# =============================================================================
# Destination fixtures
# =============================================================================


@pytest.fixture
def sqlite_engine(tmp_path):
    engine = create_store_engine(f"sqlite:///{tmp_path / 'dest.db'}")
    metadata = MetaData()
    Table(DEST_TABLE, metadata, *[Column(name, String) for name in DEST_COLUMNS])
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def destination() -> DestinationTable:
    return DestinationTable(name=DEST_TABLE, schema=None, date_column="FechaDoc", invalid_date_sentinel="0000-00-00")


@pytest.fixture
def fetch_rows(sqlite_engine):
    """Read the destination table back as a list of dicts."""

    def _fetch() -> list[dict]:
        table = Table(DEST_TABLE, MetaData(), autoload_with=sqlite_engine)
        with sqlite_engine.connect() as conn:
            return [dict(r._mapping) for r in conn.execute(select(table))]

    return _fetch


@pytest.fixture
def seed_rows(sqlite_engine):
    """Insert pre-existing rows so truncation is observable."""

    def _seed(count: int) -> None:
        table = Table(DEST_TABLE, MetaData(), autoload_with=sqlite_engine)
        with sqlite_engine.begin() as conn:
            conn.execute(
                table.insert(),
                [{"Sociedad": "OLD", "Cliente": f"old{i}", "FechaDoc": "2020-01-01"} for i in range(count)],
            )

    return _seed
