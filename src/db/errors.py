"""Errors raised while bootstrapping a database connection."""

from __future__ import annotations


class DatabaseInitError(Exception):
    """A bootstrap stage failed.

    ``str(err)`` is ``"<context>: <cause>"``; the underlying driver or OS
    exception is chained as ``__cause__``.
    """

    stage = "init"

    def __init__(self, context: str, cause: BaseException, *, backend: str) -> None:
        super().__init__(f"{context}: {cause}")
        self.context = context
        self.backend = backend


class DirectoryCreateError(DatabaseInitError):
    stage = "mkdir"


class ConnectionOpenError(DatabaseInitError):
    stage = "open"


class PingError(DatabaseInitError):
    stage = "ping"
