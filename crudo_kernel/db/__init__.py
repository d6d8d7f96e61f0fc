"""Database layer - destination engine and connection scope."""

from crudo_kernel.db.engine import connection_scope, create_store_engine, ping_store

__all__ = [
    "create_store_engine",
    "connection_scope",
    "ping_store",
]
