import sqlite3
from pathlib import Path

from store.database import connect, initialize_schema


def test_initialize_schema_is_idempotent(tmp_path: Path) -> None:
    connection = connect(tmp_path / "kvdb.db")
    try:
        initialize_schema(connection)
        initialize_schema(connection)
        columns = [row["name"] for row in connection.execute("PRAGMA table_info(kv)")]
    finally:
        connection.close()

    assert columns == ["key", "value", "insert_ts", "update_ts"]


def test_kv_table_is_without_rowid(tmp_path: Path) -> None:
    connection = connect(tmp_path / "kvdb.db")
    try:
        initialize_schema(connection)
        row = connection.execute(
            "SELECT sql FROM sqlite_master WHERE type = 'table' AND name = 'kv'"
        ).fetchone()
    finally:
        connection.close()

    assert "WITHOUT ROWID" in row["sql"]


def test_key_is_primary_key(tmp_path: Path) -> None:
    connection = connect(tmp_path / "kvdb.db")
    try:
        initialize_schema(connection)
        connection.execute("INSERT INTO kv (key, value) VALUES ('a', '1')")
        try:
            connection.execute("INSERT INTO kv (key, value) VALUES ('a', '2')")
            duplicate_accepted = True
        except sqlite3.IntegrityError:
            duplicate_accepted = False
    finally:
        connection.close()

    assert duplicate_accepted is False


def test_timestamps_default_on_insert(tmp_path: Path) -> None:
    connection = connect(tmp_path / "kvdb.db")
    try:
        initialize_schema(connection)
        connection.execute("INSERT INTO kv (key, value) VALUES ('a', '1')")
        row = connection.execute("SELECT insert_ts, update_ts FROM kv WHERE key = 'a'").fetchone()
    finally:
        connection.close()

    assert row["insert_ts"] == row["update_ts"]
    assert row["insert_ts"].endswith("Z")
    assert len(row["insert_ts"]) == len("2026-01-01 00:00:00.000Z")
