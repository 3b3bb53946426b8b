"""
SQLite-backed key-value repository.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import cast

from .database import TIMESTAMP_SQL, connect, initialize_schema
from .errors import (
    KeyNotFoundError,
    ReadError,
    SchemaError,
    StoreConnectionError,
    WriteError,
)


logger = logging.getLogger(__name__)

_UPSERT_SQL = f"""
INSERT INTO kv (key, value) VALUES (?, ?)
ON CONFLICT (key) DO UPDATE SET value = excluded.value, update_ts = {TIMESTAMP_SQL}
"""


@dataclass
class Timestamps:
    insert_ts: str
    update_ts: str


@dataclass
class Record:
    key: str
    value: str | None
    insert_ts: str
    update_ts: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Record":
        row_dict = cast(dict[str, object], dict(row))
        return cls(
            key=str(row_dict["key"]),
            value=_optional_str(row_dict.get("value")),
            insert_ts=str(row_dict["insert_ts"]),
            update_ts=str(row_dict["update_ts"]),
        )

    @property
    def timestamps(self) -> Timestamps:
        return Timestamps(insert_ts=self.insert_ts, update_ts=self.update_ts)


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


class KVStore:
    """Key-value store over a single ``kv`` table.

    The store holds one connection for its whole lifetime. Use it as a context
    manager to open the database, ensure the schema and close it on every exit
    path::

        with KVStore("kvdb.db") as store:
            store.set("a", "1")
    """

    def __init__(self, db_path: str | Path, strict_delete: bool = True) -> None:
        self.db_path: str = str(db_path)
        self.strict_delete: bool = strict_delete
        self._connection: sqlite3.Connection | None = None

    def __enter__(self) -> "KVStore":
        self.open()
        try:
            self.ensure_schema()
        except SchemaError:
            self.close()
            raise
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    def open(self) -> None:
        if self._connection is not None:
            return
        try:
            self._connection = connect(self.db_path)
        except (sqlite3.Error, OSError) as exc:
            logger.error(f"Could not open database {self.db_path}: {exc}")
            raise StoreConnectionError(f"Could not open database '{self.db_path}'") from exc
        logger.debug(f"Opened database {self.db_path}")

    def close(self) -> None:
        if self._connection is None:
            return
        connection = self._connection
        self._connection = None
        try:
            connection.close()
        except sqlite3.Error as exc:
            raise StoreConnectionError(f"Could not close database '{self.db_path}'") from exc
        logger.debug(f"Closed database {self.db_path}")

    def ensure_schema(self) -> None:
        connection = self._require_connection()
        try:
            initialize_schema(connection)
        except sqlite3.Error as exc:
            logger.error(f"Could not create kv table in {self.db_path}: {exc}")
            raise SchemaError(
                f"Could not create/access table in database '{self.db_path}'"
            ) from exc

    def set(self, key: str, value: str) -> None:
        """Insert ``key`` or update its value and ``update_ts``; ``insert_ts`` is kept."""
        connection = self._require_connection()
        try:
            _ = connection.execute(_UPSERT_SQL, (key, value))
            connection.commit()
        except sqlite3.Error as exc:
            connection.rollback()
            logger.warning(f"Set key {key!r} failed: {exc}")
            raise WriteError(f"Could not set key '{key}'", key=key) from exc
        logger.debug(f"Set key {key!r}")

    def get(self, key: str) -> str | None:
        """Return the value for ``key``, or None when no row matches."""
        connection = self._require_connection()
        try:
            row = cast(
                sqlite3.Row | None,
                connection.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone(),
            )
        except sqlite3.Error as exc:
            logger.warning(f"Get key {key!r} failed: {exc}")
            raise ReadError(f"Could not read key '{key}'", key=key) from exc
        if row is None:
            logger.debug(f"Get key {key!r}: no value")
            return None
        return _optional_str(row["value"])

    def get_record(self, key: str) -> Record | None:
        connection = self._require_connection()
        try:
            row = cast(
                sqlite3.Row | None,
                connection.execute(
                    "SELECT key, value, insert_ts, update_ts FROM kv WHERE key = ?",
                    (key,),
                ).fetchone(),
            )
        except sqlite3.Error as exc:
            logger.warning(f"Get record {key!r} failed: {exc}")
            raise ReadError(f"Could not read key '{key}'", key=key) from exc
        return Record.from_row(row) if row is not None else None

    def delete(self, key: str) -> None:
        """Remove ``key``.

        With ``strict_delete`` (the default) a delete that removes no row raises
        KeyNotFoundError; otherwise it is a no-op.
        """
        connection = self._require_connection()
        try:
            cursor = connection.execute("DELETE FROM kv WHERE key = ?", (key,))
            connection.commit()
        except sqlite3.Error as exc:
            connection.rollback()
            logger.warning(f"Del key {key!r} failed: {exc}")
            raise WriteError(f"Could not delete key '{key}'", key=key) from exc
        if cursor.rowcount == 0:
            logger.debug(f"Del key {key!r}: no row")
            if self.strict_delete:
                raise KeyNotFoundError(key)
            return
        logger.debug(f"Deleted key {key!r}")

    def get_timestamps(self, key: str) -> Timestamps:
        record = self.get_record(key)
        if record is None:
            raise KeyNotFoundError(key)
        return record.timestamps

    def _require_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise StoreConnectionError(f"Database '{self.db_path}' is not open")
        return self._connection
