from __future__ import annotations


class PersistenceNotConfiguredError(RuntimeError):
    """The database backend was selected but no DATABASE_URL is set."""


class PersistenceError(RuntimeError):
    """A call into the backing store failed."""
