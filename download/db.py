# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors

"""Database connection and schema management.

This module provides database connection utilities, schema initialization,
and database health/repair operations for the ROM cache and query log.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from .config import PATHS
from .sql import QUERY_LOG_SCHEMA, ROM_SCHEMA

logger = logging.getLogger(__name__)


def get_db_path() -> Path:
    """Get the path to the SQLite database file.

    Returns:
        Path: Absolute path to the database file.
    """
    return PATHS.db_path


def connect() -> sqlite3.Connection:
    """Open a SQLite connection with optimized PRAGMAs.

    Creates the data directory if it doesn't exist and establishes a database
    connection with WAL mode, reasonable timeouts, and other performance settings.

    Returns:
        sqlite3.Connection: Configured database connection with Row factory enabled.

    Note:
        The connection uses autocommit mode (isolation_level=None), so transactions
        must be managed explicitly with BEGIN/COMMIT/ROLLBACK.
    """
    PATHS.data_dir.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(
        PATHS.db_path,
        timeout=10.0,
        isolation_level=None,
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    _apply_pragmas(conn)
    return conn


def _apply_pragmas(conn: sqlite3.Connection) -> None:
    cur = conn.cursor()
    cur.execute("PRAGMA journal_mode=WAL;")
    cur.execute("PRAGMA synchronous=NORMAL;")
    cur.execute("PRAGMA foreign_keys=ON;")
    cur.execute("PRAGMA busy_timeout=5000;")
    cur.close()


SCHEMA_SQL = ROM_SCHEMA + "\n\n" + QUERY_LOG_SCHEMA


def init_db() -> None:
    """Initialize the database schema.

    Creates the data directory and database tables if they don't exist.
    executescript() implicitly commits.
    """
    PATHS.data_dir.mkdir(parents=True, exist_ok=True)
    with connect() as conn:
        conn.executescript(SCHEMA_SQL)


def is_healthy() -> bool:
    """Check database integrity.

    Returns:
        bool: True if the database passes the integrity check, False otherwise.
    """
    try:
        with sqlite3.connect(PATHS.db_path) as conn:
            row = conn.execute("PRAGMA integrity_check(1);").fetchone()
            return row is not None and row[0] == "ok"
    except sqlite3.DatabaseError:
        return False


def _dump_db(path: Path) -> None:
    with connect() as conn, open(path, "w", encoding="utf-8") as f:
        for line in conn.iterdump():
            f.write(f"{line}\n")


def _restore_db(path: Path) -> None:
    # The dump carries its own BEGIN TRANSACTION/COMMIT
    with connect() as conn, open(path, "r", encoding="utf-8") as f:
        conn.executescript(f.read())


def _remove_db_files() -> Path:
    backup = PATHS.db_path.with_name(PATHS.db_path.name + ".corrupt")
    PATHS.db_path.replace(backup)
    for suffix in ("-wal", "-shm"):
        Path(f"{PATHS.db_path}{suffix}").unlink(missing_ok=True)
    return backup


def repair_db() -> bool:
    """Rebuild the database when it fails the integrity check.

    Whatever can still be read is dumped to SQL and restored into a fresh
    file. An unreadable database is set aside as ``<db>.corrupt`` and
    replaced by an empty one.

    Returns:
        bool: True if the database was rebuilt.
    """
    if not PATHS.db_path.exists() or is_healthy():
        return False

    logger.warning("Database %s failed integrity check, rebuilding", PATHS.db_path)
    dump_path = PATHS.data_dir / "miota-dump.sql"
    try:
        _dump_db(dump_path)
        have_dump = True
    except sqlite3.DatabaseError as ex:
        logger.warning("Database unreadable, starting empty: %s", ex)
        dump_path.unlink(missing_ok=True)
        have_dump = False

    backup = _remove_db_files()
    logger.info("Corrupt database kept as %s", backup)
    if have_dump:
        _restore_db(dump_path)
        dump_path.unlink()
    init_db()
    return True
