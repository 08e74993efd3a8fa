"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), the per-request FastAPI dependency (``get_db``)
and applying migrations on application start (``init_db``).

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .config import settings


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: users, groups and memberships
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            user_id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT NOT NULL UNIQUE,
            name TEXT,
            email TEXT UNIQUE,
            password TEXT
        );

        CREATE TABLE IF NOT EXISTS groups (
            group_id INTEGER PRIMARY KEY AUTOINCREMENT,
            owner_id INTEGER NOT NULL,
            name TEXT NOT NULL,
            description TEXT,
            FOREIGN KEY(owner_id) REFERENCES users(user_id)
        );

        CREATE TABLE IF NOT EXISTS groups_users (
            group_id INTEGER NOT NULL,
            user_id INTEGER NOT NULL,
            PRIMARY KEY (group_id, user_id),
            FOREIGN KEY(group_id) REFERENCES groups(group_id),
            FOREIGN KEY(user_id) REFERENCES users(user_id)
        );

        CREATE INDEX IF NOT EXISTS idx_groups_owner_id ON groups(owner_id);
        CREATE INDEX IF NOT EXISTS idx_groups_users_user_id ON groups_users(user_id);
        """,
    ),
    # Migration 2: tags
    (
        2,
        """
        CREATE TABLE IF NOT EXISTS tags (
            tag_id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE
        );
        """,
    ),
]


def get_database_path(db_path: Optional[str] = None) -> str:
    """Compute the path to the SQLite database file.

    An absolute path is used directly; a relative one is resolved
    against the project root.  Defaults to ``settings.database_url``.
    """
    db_url = db_path or settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / db_url).resolve())


def get_connection(db_path: Optional[str] = None) -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be read by
    name.  Foreign keys and case-sensitive ``LIKE`` are enabled for the
    lifetime of the connection.  ``check_same_thread`` is disabled
    because FastAPI may open the connection in its threadpool and use
    it from the event loop thread of the same request.
    """
    conn = sqlite3.connect(get_database_path(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA case_sensitive_like = ON")
    return conn


@contextmanager
def get_cursor(db_path: Optional[str] = None) -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection(db_path)
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


def get_db() -> Iterator[sqlite3.Connection]:
    """FastAPI dependency yielding one connection per request."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: Optional[str] = None) -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any newer entries of
    ``MIGRATIONS``.  Append new migrations with an incremented version.
    """
    with get_cursor(db_path) as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
