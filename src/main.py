"""dbbootstrap — CLI entry point: open the configured database and verify it."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import sentry_sdk
from sqlalchemy.engine import Engine

from src.config import AppSettings, DatabaseSettings
from src.db.connection import close_db, init_db
from src.db.errors import DatabaseInitError

logger = logging.getLogger(__name__)


def _init_sentry(dsn: str, environment: str) -> None:
    """Initialize Sentry SDK if a DSN is configured and not in development."""
    if not dsn or environment == "development":
        return
    sentry_sdk.init(
        dsn,
        environment=environment,
        traces_sample_rate=0,
        send_client_reports=False,
        auto_session_tracking=False,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dbbootstrap",
        description=(
            "Open PostgreSQL when DB_USER, DB_PASSWORD, DB_NAME, DB_HOST and DB_PORT "
            "are all set, otherwise SQLite under <base-path>/dbdata, and ping it."
        ),
    )
    parser.add_argument("--base-path", type=Path, help="Data root (default: DBBOOT_DATA_DIR or cwd)")
    parser.add_argument("--config", type=Path, help="YAML settings file")
    parser.add_argument("--log-level", help="Logging level (default: DBBOOT_LOG_LEVEL or info)")
    return parser


def describe(engine: Engine, settings: DatabaseSettings) -> str:
    """One-line summary of a ready engine: backend, target and pool limits."""
    url = engine.url
    if url.get_backend_name() == "sqlite":
        target = url.database
        pool = settings.sqlite_pool
    else:
        target = f"{url.host}:{url.port}/{url.database}"
        pool = settings.postgres_pool
    return (
        f"Database ready: backend={engine.dialect.name} target={target} "
        f"max_open={pool.max_open} max_idle={pool.max_idle} "
        f"max_lifetime={pool.max_lifetime}s ({engine.pool.status()})"
    )


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    settings = AppSettings.from_yaml(args.config)
    if args.base_path is not None:
        settings.data_dir = args.base_path
    if args.log_level:
        settings.log_level = args.log_level

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _init_sentry(settings.sentry_dsn, settings.environment)

    try:
        engine = init_db(settings)
    except DatabaseInitError as exc:
        logger.error("Database initialization failed at %s stage: %s", exc.stage, exc)
        sentry_sdk.capture_exception(exc)
        return 1

    try:
        print(describe(engine, settings.database))
    finally:
        close_db()
    return 0


def cli_entry() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli_entry()
