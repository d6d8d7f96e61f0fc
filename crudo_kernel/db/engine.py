"""
Module: crudo_kernel.db.engine
Responsibility: SQLAlchemy engine construction for the destination store and
    the per-request connection scope.
Architecture position: Kernel > DB.  MUST NOT import from crudo_ingestion.

Invariants enforced:
    - One connection per request, released on every exit path
      (``connection_scope``).  NullPool is used so that "released" means the
      DBAPI connection is really closed, not parked in a pool.
    - Statements run in AUTOCOMMIT: the load sequence is a series of
      independent statements, never one transaction.
    - MySQL connections are opened with ``local_infile`` so the destination's
      native ``LOAD DATA LOCAL INFILE`` facility is available.

Failure modes:
    - ``sqlalchemy.exc.ArgumentError`` for a malformed URL.
    - ``sqlalchemy.exc.OperationalError`` when the store is unreachable
      (raised lazily, on first connect).
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Connection, Engine, make_url
from sqlalchemy.pool import NullPool

from crudo_kernel.logging_config import get_logger

logger = get_logger("db.engine")


def create_store_engine(database_url: URL | str, echo: bool = False) -> Engine:
    """
    Create the SQLAlchemy engine for the destination store.

    Args:
        database_url: SQLAlchemy URL (e.g. from ``LoaderSettings.database_url()``).
        echo: If True, log all SQL statements.

    Returns:
        SQLAlchemy Engine instance.  No connection is opened yet.
    """
    engine = create_engine(database_url, echo=echo, poolclass=NullPool, **_dialect_kwargs(database_url))
    logger.info(
        "engine_initialized",
        extra={
            "dialect": engine.dialect.name,
            "driver": engine.dialect.driver,
            "echo": echo,
        },
    )
    return engine


def _dialect_kwargs(database_url: URL | str) -> dict:
    backend = make_url(database_url).get_backend_name()
    if backend in ("mysql", "mariadb"):
        return {"connect_args": {"local_infile": True, "charset": "utf8mb4"}}
    return {}


@contextmanager
def connection_scope(engine: Engine) -> Generator[Connection, None, None]:
    """
    Provide one autocommit connection for the duration of a request.

    Postconditions: the connection is closed on normal exit and on exception.
        Nothing is rolled back: every statement already committed on its own.

    Usage:
        with connection_scope(engine) as conn:
            conn.execute(...)
    """
    conn = engine.connect().execution_options(isolation_level="AUTOCOMMIT")
    logger.debug("connection_opened")
    try:
        yield conn
    finally:
        conn.close()
        logger.debug("connection_closed")


def ping_store(engine: Engine) -> bool:
    """Health probe: True if ``SELECT 1`` succeeds against the store."""
    with connection_scope(engine) as conn:
        return conn.execute(text("SELECT 1")).scalar() == 1
