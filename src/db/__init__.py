"""Database bootstrap — PostgreSQL when DB_* is set, SQLite otherwise."""

from src.db.connection import (
    close_db,
    get_db,
    init_db,
    initialize_database,
    open_postgres,
    open_sqlite,
    resolve_config,
)
from src.db.errors import (
    ConnectionOpenError,
    DatabaseInitError,
    DirectoryCreateError,
    PingError,
)

__all__ = [
    "close_db",
    "get_db",
    "init_db",
    "initialize_database",
    "open_postgres",
    "open_sqlite",
    "resolve_config",
    "ConnectionOpenError",
    "DatabaseInitError",
    "DirectoryCreateError",
    "PingError",
]
