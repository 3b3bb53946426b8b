"""
SQLite database utilities for the store module.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path


TIMESTAMP_SQL = "strftime('%Y-%m-%d %H:%M:%fZ', 'now')"

SCHEMA_SQL = f"""
CREATE TABLE kv (
  key TEXT PRIMARY KEY,
  value TEXT,
  insert_ts TEXT DEFAULT ({TIMESTAMP_SQL}),
  update_ts TEXT DEFAULT ({TIMESTAMP_SQL})
) WITHOUT ROWID;
"""

_IDEMPOTENT_SCHEMA_SQL = SCHEMA_SQL.replace("CREATE TABLE", "CREATE TABLE IF NOT EXISTS")


def connect(db_path: str | Path) -> sqlite3.Connection:
    """Open a SQLite connection, creating the file and its parent directory if needed."""
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(str(path))
    connection.row_factory = sqlite3.Row
    return connection


def initialize_schema(connection: sqlite3.Connection) -> None:
    """Create the kv table if it does not exist yet."""
    _ = connection.executescript(_IDEMPOTENT_SCHEMA_SQL)
    connection.commit()
