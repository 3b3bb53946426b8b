"""CLI interface for the key-value store."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import NoReturn, Optional

import typer

from kvdb.config import StoreConfig, resolve_config
from store.errors import (
    KeyNotFoundError,
    SchemaError,
    StoreConnectionError,
    StoreError,
)
from store.repository import KVStore

logger = logging.getLogger(__name__)

PROG_NAME = "kvdb"

USAGE = f"""Usage: {PROG_NAME} <action> [<key>] [<value>]
Actions:
\t set <key> <value>: Associate <key> with <value>, record timestamp of creation and/or last update
\t get <key>: Fetch the value associated with <key>
\t del <key>: Remove <key> from the database
\t ts <key>: Fetch the timestamps when <key> was first and last set"""

# Values such as "-1" are data, not options
_COMMAND_SETTINGS = {"ignore_unknown_options": True}

app = typer.Typer(help="Key-value store backed by SQLite", add_completion=False)


def print_usage() -> None:
    typer.echo(USAGE, err=True)


def _succeed(message: str) -> None:
    typer.echo(f"{PROG_NAME}: {message}")


def _fail(message: str) -> NoReturn:
    typer.echo(f"{PROG_NAME}: {message}", err=True)
    raise typer.Exit(1)


def _is_usage_error(exc: Exception) -> bool:
    # Depending on the typer release, click is either a dependency or vendored
    # inside typer, so the UsageError class is matched by shape.
    return getattr(exc, "exit_code", None) == 2 and hasattr(exc, "ctx")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@contextmanager
def _open_store(ctx: typer.Context) -> Iterator[KVStore]:
    config: StoreConfig = ctx.obj
    store = KVStore(config.db_path, strict_delete=config.strict_delete)
    try:
        store.open()
    except StoreConnectionError:
        _fail(f"Could not open database '{config.db_path}'")
    try:
        try:
            store.ensure_schema()
        except SchemaError:
            _fail(f"Could not create/access table in database '{config.db_path}'")
        yield store
    finally:
        store.close()


@app.callback(invoke_without_command=True)
def callback(
    ctx: typer.Context,
    db: Optional[str] = typer.Option(None, "--db", help="Database file (overrides config and KVDB_DB_PATH)"),
    config_path: Optional[str] = typer.Option(None, "--config", help="YAML config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log store operations"),
) -> None:
    """Set, get, delete and inspect keys."""
    if ctx.invoked_subcommand is None:
        print_usage()
        raise typer.Exit(1)

    try:
        config = resolve_config(config_path, db)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))

    _configure_logging("DEBUG" if verbose else config.log_level)
    logger.debug(f"Using database {config.db_path}")
    ctx.obj = config


@app.command("set", context_settings=_COMMAND_SETTINGS)
def set_key(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Key to set"),
    value: str = typer.Argument(..., help="Value to store"),
) -> None:
    """Associate KEY with VALUE, recording creation and last update time."""
    with _open_store(ctx) as store:
        try:
            store.set(key, value)
        except StoreError:
            _fail(f"Set key '{key}' value to '{value}'. FAIL")
    _succeed(f"Set key '{key}' value to '{value}'. SUCCESS")


@app.command("get", context_settings=_COMMAND_SETTINGS)
def get_key(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Key to fetch"),
) -> None:
    """Fetch the value associated with KEY."""
    with _open_store(ctx) as store:
        try:
            value = store.get(key)
        except StoreError:
            _fail(f"Get key '{key}'. FAIL")
    if value is None:
        _succeed(f"Get key '{key}' returned no value. SUCCESS")
    else:
        _succeed(f"Get key '{key}' returned value '{value}'. SUCCESS")


@app.command("del", context_settings=_COMMAND_SETTINGS)
def delete_key(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Key to remove"),
) -> None:
    """Remove KEY from the database."""
    with _open_store(ctx) as store:
        try:
            store.delete(key)
        except StoreError:
            _fail(f"Del key '{key}'. FAIL")
    _succeed(f"Del key '{key}'. SUCCESS")


@app.command("ts", context_settings=_COMMAND_SETTINGS)
def key_timestamps(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Key to inspect"),
) -> None:
    """Fetch the timestamps when KEY was first and last set."""
    with _open_store(ctx) as store:
        try:
            timestamps = store.get_timestamps(key)
        except KeyNotFoundError:
            _fail(f"Get key '{key}' not found, no timestamps. FAIL")
        except StoreError:
            _fail(f"Get key '{key}' timestamps. FAIL")
    _succeed(
        f"Get key '{key}' timestamps: It was first set at {timestamps.insert_ts} "
        f"and last at {timestamps.update_ts}. SUCCESS"
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Run one kvdb action and return the process exit code (0 or 1)."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        result = app(args=args, prog_name=PROG_NAME, standalone_mode=False)
    except StoreError as e:
        typer.echo(f"{PROG_NAME}: {e.message}", err=True)
        return 1
    except Exception as e:
        if not _is_usage_error(e):
            raise
        print_usage()
        return 1
    return result if isinstance(result, int) else 0


if __name__ == "__main__":
    sys.exit(main())
