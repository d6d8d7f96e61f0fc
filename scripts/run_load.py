#!/usr/bin/env python3
"""
Preview or load a headerless export into the destination table.

Destination settings come from the environment (DB_HOST, DB_USER, DB_PASSWORD,
DB_NAME, DB_TABLE, DATABASE_URL, ...) or a YAML file via --config /
CRUDO_CONFIG_FILE.

Usage:
    python3 scripts/run_load.py preview --file <path>
    python3 scripts/run_load.py load --file <path> [--exclude KEY ...]
    python3 scripts/run_load.py probe --file <path>
    python3 scripts/run_load.py health

Examples:
    # Show removed rows, unique clients and the column-o total
    python3 scripts/run_load.py preview --file fbl1n.xlsx

    # Truncate + load, skipping two clients
    python3 scripts/run_load.py load --file fbl1n.csv --exclude 100234 --exclude 100977

    # Row count, width and first rows, without filtering
    python3 scripts/run_load.py probe --file fbl1n.csv
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Preview or bulk-load a headerless .csv/.xlsx export.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML settings file (default: CRUDO_CONFIG_FILE env, if set).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Emit DEBUG structured logs on stderr.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    preview = sub.add_parser("preview", help="Filter and summarize the export. No DB access.")
    preview.add_argument("--file", required=True, type=Path, help="Path to the .csv or .xlsx export.")

    load = sub.add_parser("load", help="Truncate, bulk-load and reconcile the destination table.")
    load.add_argument("--file", required=True, type=Path, help="Path to the .csv or .xlsx export.")
    load.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="KEY",
        help="Client key (column b) to exclude. Repeatable.",
    )

    probe = sub.add_parser("probe", help="Decode only: row count, width, column names, sample rows.")
    probe.add_argument("--file", required=True, type=Path, help="Path to the .csv or .xlsx export.")

    sub.add_parser("health", help="Check that the destination store answers SELECT 1.")
    return parser.parse_args(argv)


def _emit(payload: dict, status_code: int) -> int:
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0 if status_code < 400 else 1


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    # Lazy imports so we fail fast on args first
    from crudo_config import get_settings
    from crudo_kernel.db.engine import create_store_engine, ping_store
    from crudo_kernel.logging_config import configure_logging
    from crudo_ingestion.services import (
        build_load_service,
        build_preview_service,
        stage_upload,
    )

    configure_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        settings = get_settings(config_file=args.config)
    except Exception as e:
        print(f"ERROR: Failed to load settings: {e}", file=sys.stderr)
        return 1

    if args.command == "health":
        from sqlalchemy.exc import SQLAlchemyError

        engine = create_store_engine(settings.database_url())
        try:
            ok = ping_store(engine)
        except SQLAlchemyError as e:
            print(f"ERROR: Store unreachable: {e}", file=sys.stderr)
            return 1
        finally:
            engine.dispose()
        return _emit({"ok": ok}, 200 if ok else 500)

    source_path = args.file.resolve()
    if not source_path.is_file():
        print(f"ERROR: File not found: {source_path}", file=sys.stderr)
        return 1

    if args.command == "probe":
        from crudo_kernel.exceptions import IngestError
        from crudo_ingestion.adapters import adapter_for_filename
        from crudo_ingestion.domain import column_names

        try:
            adapter = adapter_for_filename(source_path.name)
            probe = adapter.probe(source_path.read_bytes(), source_path.name)
        except IngestError as e:
            return _emit({"error": str(e)}, e.status_code)
        print(f"Format: {probe.source_format}")
        print(f"Rows: {probe.row_count}")
        print(f"Columns: {list(column_names(probe.width))}")
        print("Sample rows:")
        for i, row in enumerate(probe.sample_rows, 1):
            print(f"  {i}: {list(row)}")
        return 0

    # Same intake as an HTTP upload: a temp copy the service deletes when done
    upload = stage_upload(source_path.name, source_path.read_bytes())

    if args.command == "preview":
        response = build_preview_service(settings).preview(upload)
        return _emit(response.to_dict(), response.status_code)

    engine = create_store_engine(settings.database_url())
    try:
        response = build_load_service(settings, engine).load(upload, args.exclude)
    finally:
        engine.dispose()
    return _emit(response.to_dict(), response.status_code)


if __name__ == "__main__":
    sys.exit(main())
