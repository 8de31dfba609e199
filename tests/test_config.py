"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from src.config import (
    POSTGRES_POOL,
    SQLITE_POOL,
    AppSettings,
    DatabaseSettings,
    PoolSettings,
    PostgresEnv,
)


class TestPoolSettings:
    def test_postgres_defaults(self):
        assert POSTGRES_POOL.max_open == 10
        assert POSTGRES_POOL.max_idle == 5
        assert POSTGRES_POOL.max_lifetime == 1800
        assert POSTGRES_POOL.max_overflow == 5

    def test_sqlite_defaults(self):
        assert SQLITE_POOL.max_open == 1
        assert SQLITE_POOL.max_idle == 1
        assert SQLITE_POOL.max_lifetime == 1800
        assert SQLITE_POOL.max_overflow == 0

    def test_idle_above_open_rejected(self):
        with pytest.raises(ValidationError, match="must not exceed"):
            PoolSettings(max_open=2, max_idle=3)

    def test_zero_open_rejected(self):
        with pytest.raises(ValidationError):
            PoolSettings(max_open=0, max_idle=0)


class TestDatabaseSettings:
    def test_defaults(self):
        settings = DatabaseSettings()
        assert settings.postgres_pool == POSTGRES_POOL
        assert settings.sqlite_pool == SQLITE_POOL

    def test_nested_env_override(self, monkeypatch):
        monkeypatch.setenv("DBBOOT_DB_POSTGRES_POOL__MAX_OPEN", "20")
        monkeypatch.setenv("DBBOOT_DB_SQLITE_POOL__MAX_LIFETIME", "60")

        settings = DatabaseSettings()

        assert settings.postgres_pool.max_open == 20
        assert settings.postgres_pool.max_idle == 5
        # Partial override keeps the single-connection limits
        assert settings.sqlite_pool.max_open == 1
        assert settings.sqlite_pool.max_lifetime == 60


class TestPostgresEnv:
    def test_reads_process_env(self, monkeypatch, pg_env):
        for name, value in pg_env.items():
            monkeypatch.setenv(name, value)

        env = PostgresEnv()

        assert env.user == "a"
        assert env.port == "5432"
        assert env.is_complete

    def test_from_mapping_ignores_process_env(self, monkeypatch, pg_env):
        monkeypatch.setenv("DB_USER", "from-process")
        env = PostgresEnv.from_mapping(pg_env)
        assert env.user == "a"

    def test_incomplete(self):
        assert not PostgresEnv.from_mapping({"DB_USER": "a"}).is_complete

    def test_lowercase_process_env_ignored(self, monkeypatch, pg_env):
        for name, value in pg_env.items():
            monkeypatch.setenv(name.lower(), value)

        env = PostgresEnv()

        assert env.user == ""
        assert not env.is_complete


class TestAppSettings:
    def test_from_yaml(self, tmp_path):
        path = tmp_path / "app.yml"
        path.write_text(
            "data_dir: /srv/app\n"
            "log_level: debug\n"
            "database:\n"
            "  postgres_pool:\n"
            "    max_open: 4\n"
            "    max_idle: 2\n"
        )

        settings = AppSettings.from_yaml(path)

        assert str(settings.data_dir) == "/srv/app"
        assert settings.log_level == "debug"
        assert settings.database.postgres_pool.max_open == 4
        assert settings.database.sqlite_pool == SQLITE_POOL

    def test_missing_yaml_uses_defaults(self, tmp_path):
        settings = AppSettings.from_yaml(tmp_path / "missing.yml")
        assert settings.log_level == "info"
        assert settings.environment == "development"

    def test_env_prefix(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DBBOOT_DATA_DIR", str(tmp_path))
        assert AppSettings().data_dir == tmp_path
