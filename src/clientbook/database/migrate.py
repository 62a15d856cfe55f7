"""Minimal SQLite migration helpers for the clients table."""

import sqlite3

from sqlalchemy import Engine

from .schema import SCHEMA_VERSION


def _table_exists(conn: sqlite3.Connection, table: str) -> bool:
    """Check if a table exists."""
    cur = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?;",
        (table,)
    )
    return cur.fetchone() is not None


def get_schema_version(sqlite_path: str) -> int:
    """Read the schema version recorded in PRAGMA user_version (0 if never set)."""
    conn = sqlite3.connect(sqlite_path)
    try:
        return int(conn.execute("PRAGMA user_version;").fetchone()[0])
    finally:
        conn.close()


def ensure_clients_table(sqlite_path: str) -> None:
    """
    Create the clients table if it doesn't exist and stamp schema version 1.

    Args:
        sqlite_path: Path to SQLite database file
    """
    conn = sqlite3.connect(sqlite_path)
    try:
        if not _table_exists(conn, "clients"):
            conn.execute("""
                CREATE TABLE clients (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name VARCHAR NOT NULL,
                    email VARCHAR NOT NULL,
                    external_ref VARCHAR NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS ix_clients_name ON clients (name);")
        version = int(conn.execute("PRAGMA user_version;").fetchone()[0])
        if version < SCHEMA_VERSION:
            conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION};")
        conn.commit()
    finally:
        conn.close()


def stamp_schema_version(engine: Engine) -> None:
    """
    Stamp schema version 1 through an engine.

    Used for in-memory stores, which have no file for ensure_clients_table to open.
    """
    with engine.begin() as conn:
        version = int(conn.exec_driver_sql("PRAGMA user_version;").scalar())
        if version < SCHEMA_VERSION:
            conn.exec_driver_sql(f"PRAGMA user_version = {SCHEMA_VERSION};")
