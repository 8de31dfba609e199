"""Database connection bootstrap — PostgreSQL when configured, SQLite otherwise."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar, Mapping, Union

import psycopg
from psycopg.conninfo import make_conninfo
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import QueuePool

from src.config import (
    POSTGRES_POOL,
    SQLITE_POOL,
    AppSettings,
    DatabaseSettings,
    PoolSettings,
    PostgresEnv,
)
from src.db.errors import (
    ConnectionOpenError,
    DirectoryCreateError,
    PingError,
)

logger = logging.getLogger(__name__)

SQLITE_DIR_NAME = "dbdata"
SQLITE_FILE_NAME = "users.db"
SQLITE_DIR_MODE = 0o751

POSTGRES_CONNECT_TIMEOUT = 10  # seconds

# Run on every new DBAPI connection
SQLITE_PRAGMAS = (
    "foreign_keys = ON",
    "busy_timeout = 3000",
    "journal_mode = WAL",
)


@dataclass(frozen=True)
class PostgresConfig:
    kind: ClassVar[str] = "postgres"

    host: str
    port: str
    user: str
    password: str
    database_name: str

    def dsn(self) -> str:
        """libpq keyword/value connection string."""
        return make_conninfo(
            user=self.user,
            password=self.password,
            dbname=self.database_name,
            host=self.host,
            port=self.port,
            sslmode="disable",
            connect_timeout=POSTGRES_CONNECT_TIMEOUT,
        )

    @property
    def target(self) -> str:
        return f"{self.host}:{self.port}/{self.database_name}"


@dataclass(frozen=True)
class SQLiteConfig:
    kind: ClassVar[str] = "sqlite"

    path: Path

    @property
    def db_file(self) -> Path:
        return self.path / SQLITE_FILE_NAME


ConnectionConfig = Union[PostgresConfig, SQLiteConfig]


def resolve_config(base_path: str | Path, env: Mapping[str, str] | None = None) -> ConnectionConfig:
    """Pick the backend from the DB_* variables.

    PostgreSQL is chosen only when DB_USER, DB_PASSWORD, DB_NAME, DB_HOST and
    DB_PORT are all non-empty; anything less falls back to SQLite under
    ``<base_path>/dbdata``.

    Args:
        base_path: Data root used for the SQLite fallback.
        env: Variables to read instead of the process environment.
    """
    pg = PostgresEnv() if env is None else PostgresEnv.from_mapping(env)
    if pg.is_complete:
        return PostgresConfig(
            host=pg.host,
            port=pg.port,
            user=pg.user,
            password=pg.password,
            database_name=pg.name,
        )

    logger.debug("PostgreSQL environment incomplete, using SQLite")
    return SQLiteConfig(path=Path(base_path) / SQLITE_DIR_NAME)


def _pool_kwargs(pool: PoolSettings) -> dict[str, Any]:
    return {
        "poolclass": QueuePool,
        "pool_size": pool.max_idle,
        "max_overflow": pool.max_overflow,
        "pool_recycle": pool.max_lifetime,
        "pool_timeout": pool.checkout_timeout,
    }


def _ping(engine: Engine) -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def open_postgres(config: PostgresConfig, pool: PoolSettings = POSTGRES_POOL) -> Engine:
    """Open a pooled PostgreSQL engine and verify it answers.

    Raises:
        ConnectionOpenError: the engine could not be built.
        PingError: the server could not be reached.
    """
    try:
        dsn = config.dsn()
        # Carries the target for reporting; connections come from the creator
        url = URL.create(
            "postgresql+psycopg",
            username=config.user,
            host=config.host,
            port=int(config.port),
            database=config.database_name,
        )
        engine = create_engine(
            url,
            creator=lambda: psycopg.connect(dsn),
            **_pool_kwargs(pool),
        )
    except (psycopg.Error, SQLAlchemyError, ValueError) as exc:
        raise ConnectionOpenError(
            "failed to open postgres connection", exc, backend=config.kind
        ) from exc

    try:
        _ping(engine)
    except Exception as exc:
        engine.dispose()
        raise PingError("failed to ping postgres database", exc, backend=config.kind) from exc

    logger.info(
        "Connected to PostgreSQL at %s (max open %d, max idle %d)",
        config.target,
        pool.max_open,
        pool.max_idle,
    )
    return engine


def _apply_sqlite_pragmas(dbapi_conn: Any, _record: Any) -> None:
    cursor = dbapi_conn.cursor()
    try:
        for pragma in SQLITE_PRAGMAS:
            cursor.execute(f"PRAGMA {pragma}")
    finally:
        cursor.close()


def open_sqlite(config: SQLiteConfig, pool: PoolSettings = SQLITE_POOL) -> Engine:
    """Open the file-backed SQLite engine at ``<config.path>/users.db``.

    Creates the directory if missing. Safe to call repeatedly on the same path.

    Raises:
        DirectoryCreateError: the data directory could not be created.
        ConnectionOpenError: the engine could not be built.
        PingError: the database file could not be opened or queried.
    """
    try:
        config.path.mkdir(mode=SQLITE_DIR_MODE, parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreateError(
            "could not create dbdata directory", exc, backend=config.kind
        ) from exc

    try:
        engine = create_engine(
            URL.create("sqlite", database=str(config.db_file)),
            connect_args={"check_same_thread": False},
            **_pool_kwargs(pool),
        )
    except SQLAlchemyError as exc:
        raise ConnectionOpenError("failed to open sqlite database", exc, backend=config.kind) from exc

    event.listen(engine, "connect", _apply_sqlite_pragmas)

    try:
        _ping(engine)
    except Exception as exc:
        engine.dispose()
        raise PingError("failed to ping sqlite database", exc, backend=config.kind) from exc

    logger.info("Opened SQLite database %s", config.db_file)
    return engine


def initialize_database(
    base_path: str | Path,
    env: Mapping[str, str] | None = None,
    settings: DatabaseSettings | None = None,
) -> Engine:
    """Resolve the backend and return a live, pinged engine."""
    if settings is None:
        settings = DatabaseSettings()

    config = resolve_config(base_path, env)
    if isinstance(config, PostgresConfig):
        return open_postgres(config, settings.postgres_pool)
    if isinstance(config, SQLiteConfig):
        return open_sqlite(config, settings.sqlite_pool)
    raise TypeError(f"Unsupported connection config: {config!r}")


# Module-level singleton
_engine: Engine | None = None


def get_db() -> Engine:
    """Get the global database engine."""
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _engine


def init_db(settings: AppSettings | None = None, env: Mapping[str, str] | None = None) -> Engine:
    """Initialize the global database engine from application settings."""
    global _engine
    if settings is None:
        settings = AppSettings()
    close_db()
    _engine = initialize_database(settings.data_dir, env, settings.database)
    return _engine


def close_db() -> None:
    """Dispose the global engine, if any."""
    global _engine
    if _engine is not None:
        _engine.dispose()
        _engine = None
        logger.info("Database engine disposed")
