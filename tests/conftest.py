"""Shared fixtures: isolated environment and live PostgreSQL settings."""

from __future__ import annotations

import os

import pytest

from src.db.connection import close_db

DB_ENV_VARS = ("DB_USER", "DB_PASSWORD", "DB_NAME", "DB_HOST", "DB_PORT")


def _live_pg_env() -> dict[str, str]:
    """DB_* values for a live server, from DBBOOT_TEST_PG_* (empty if unset)."""
    env = {name: os.getenv(f"DBBOOT_TEST_PG_{name[3:]}", "") for name in DB_ENV_VARS}
    return env if all(env.values()) else {}


# ── skip marker ──────────────────────────────────────────────────────────────

requires_postgres = pytest.mark.skipif(
    not _live_pg_env(),
    reason="No live PostgreSQL configured (set DBBOOT_TEST_PG_USER/PASSWORD/NAME/HOST/PORT)",
)


# ── fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove DB_* and DBBOOT_* variables so tests see a blank environment."""
    for name in list(os.environ):
        if name in DB_ENV_VARS or (
            name.startswith("DBBOOT_") and not name.startswith("DBBOOT_TEST_")
        ):
            monkeypatch.delenv(name, raising=False)
    yield
    close_db()


@pytest.fixture
def pg_env() -> dict[str, str]:
    return {
        "DB_USER": "a",
        "DB_PASSWORD": "b",
        "DB_NAME": "c",
        "DB_HOST": "localhost",
        "DB_PORT": "5432",
    }


@pytest.fixture
def live_pg_env() -> dict[str, str]:
    return _live_pg_env()
