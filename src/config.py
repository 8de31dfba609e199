"""Application configuration — env vars, YAML files, defaults."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings


class PoolSettings(BaseModel):
    """Connection-pool limits applied to an opened engine."""

    max_open: int = Field(default=10, ge=1)
    max_idle: int = Field(default=5, ge=1)
    max_lifetime: int = Field(default=30 * 60, ge=1)  # seconds
    checkout_timeout: float = Field(default=30.0, gt=0)

    @model_validator(mode="after")
    def _idle_within_open(self) -> PoolSettings:
        if self.max_idle > self.max_open:
            raise ValueError(
                f"max_idle ({self.max_idle}) must not exceed max_open ({self.max_open})"
            )
        return self

    @property
    def max_overflow(self) -> int:
        """Connections allowed beyond the idle set."""
        return self.max_open - self.max_idle


class SQLitePoolSettings(PoolSettings):
    """Single-connection limits; SQLite does not support concurrent writers."""

    max_open: int = Field(default=1, ge=1)
    max_idle: int = Field(default=1, ge=1)


POSTGRES_POOL = PoolSettings()
SQLITE_POOL = SQLitePoolSettings()


class PostgresEnv(BaseSettings):
    """The five DB_* variables that switch the bootstrapper to PostgreSQL."""

    user: str = Field(default="", validation_alias="DB_USER")
    password: str = Field(default="", validation_alias="DB_PASSWORD")
    name: str = Field(default="", validation_alias="DB_NAME")
    host: str = Field(default="", validation_alias="DB_HOST")
    port: str = Field(default="", validation_alias="DB_PORT")

    # Only the exact upper-case names count
    model_config = {"case_sensitive": True}

    @classmethod
    def from_mapping(cls, env: Mapping[str, str]) -> PostgresEnv:
        """Build from an explicit mapping instead of the process environment."""
        names = [info.validation_alias for info in cls.model_fields.values()]
        return cls(**{name: env.get(name, "") for name in names})

    @property
    def is_complete(self) -> bool:
        return all([self.user, self.password, self.name, self.host, self.port])


class DatabaseSettings(BaseSettings):
    postgres_pool: PoolSettings = Field(default_factory=PoolSettings)
    sqlite_pool: SQLitePoolSettings = Field(default_factory=SQLitePoolSettings)

    model_config = {"env_prefix": "DBBOOT_DB_", "env_nested_delimiter": "__"}


class AppSettings(BaseSettings):
    """Top-level application configuration."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)

    # Data root; SQLite lives under <data_dir>/dbdata
    data_dir: Path = Field(default_factory=Path.cwd)

    log_level: str = "info"

    # Environment & Sentry
    environment: str = "development"
    sentry_dsn: str = ""

    model_config = {"env_prefix": "DBBOOT_"}

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> AppSettings:
        """Load config from a YAML file; keys missing there come from env vars or defaults."""
        values: dict[str, Any] = {}
        if path is not None and path.exists():
            with open(path) as f:
                values = yaml.safe_load(f) or {}

        return cls(**values)
