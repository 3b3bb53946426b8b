"""
Error definitions for the store module.

Every failure raised by the SQLite driver is wrapped into one of these kinds,
so callers never need to catch ``sqlite3.Error`` directly.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for all store failures."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.key = key


class StoreConnectionError(StoreError):
    """The database file could not be opened or closed, or the store is not open."""


class SchemaError(StoreError):
    """The ``kv`` table could not be created or accessed."""


class WriteError(StoreError):
    """An insert, update or delete statement failed."""


class ReadError(StoreError):
    """A select statement failed to prepare or execute."""


class KeyNotFoundError(StoreError):
    """The requested key has no row."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Key not found: {key}", key=key)
