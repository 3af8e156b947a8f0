# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors

"""Repository layer for ROM query logging.

Every update query is logged with its outcome. The most recent successful
query doubles as the remembered device input for the next run.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from .db import connect

ISO_UTC = "%Y-%m-%dT%H:%M:%SZ"

STATUSES = ("ok", "no_info", "error")


def _iso_now() -> str:
    return datetime.now(timezone.utc).strftime(ISO_UTC)


@dataclass
class QueryEvent:
    """Logged ROM query.

    Attributes:
        id: Database record ID, or None for new records.
        session_id: Application session identifier (changes per run).
        codename: Queried device codename.
        system_version: Queried system version.
        android_version: Queried Android version.
        port: "1" anonymous, "2" logged-in endpoint.
        status: ok, no_info or error.
        current_version: Version of the returned current ROM, or None.
        latest_version: Version of the returned latest ROM, or None.
        created_at: ISO 8601 UTC timestamp, or None.
    """

    id: int | None
    session_id: str
    codename: str
    system_version: str
    android_version: str
    port: str = "1"
    status: str = "ok"
    current_version: str | None = None
    latest_version: str | None = None
    created_at: str | None = None


def _row_to_event(row: sqlite3.Row) -> QueryEvent:
    return QueryEvent(
        id=row["id"],
        session_id=row["session_id"],
        codename=row["codename"],
        system_version=row["system_version"],
        android_version=row["android_version"],
        port=row["port"],
        status=row["status"],
        current_version=row["current_version"],
        latest_version=row["latest_version"],
        created_at=row["created_at"],
    )


def add_query_event(
    *,
    session_id: str,
    codename: str,
    system_version: str,
    android_version: str,
    port: str = "1",
    status: str = "ok",
    current_version: str | None = None,
    latest_version: str | None = None,
) -> int:
    """Insert a query log entry.

    Args:
        session_id: Application session identifier.
        codename: Queried device codename.
        system_version: Queried system version.
        android_version: Queried Android version.
        port: Service port used ("1" or "2").
        status: Outcome, one of STATUSES.
        current_version: Version of the returned current ROM.
        latest_version: Version of the returned latest ROM.

    Returns:
        int: Database ID of the inserted record.

    Raises:
        ValueError: If status is not one of STATUSES.
    """
    if status not in STATUSES:
        raise ValueError(f"Unknown query status: {status}")
    sql = """
    INSERT INTO query_log
        (session_id, codename, system_version, android_version, port,
         status, current_version, latest_version, created_at)
    VALUES
        (:session_id, :codename, :system_version, :android_version, :port,
         :status, :current_version, :latest_version, :created_at)
    """
    params = {
        "session_id": session_id,
        "codename": codename,
        "system_version": system_version,
        "android_version": android_version,
        "port": port,
        "status": status,
        "current_version": current_version,
        "latest_version": latest_version,
        "created_at": _iso_now(),
    }
    with connect() as conn:
        cur = conn.execute(sql, params)
        return int(cur.lastrowid)  # type: ignore


def list_queries(
    *, codename: str | None = None, limit: int = 50, offset: int = 0
) -> Iterable[QueryEvent]:
    """List query events, newest first.

    Args:
        codename: Optional codename filter.
        limit: Maximum number of records to return. Defaults to 50.
        offset: Number of records to skip for pagination. Defaults to 0.

    Yields:
        QueryEvent: Matching events ordered by created_at descending.
    """
    sql = """
    SELECT * FROM query_log
     WHERE (:codename IS NULL OR codename = :codename)
     ORDER BY created_at DESC, id DESC
     LIMIT :limit OFFSET :offset;
    """
    with connect() as conn:
        for row in conn.execute(sql, {"codename": codename, "limit": limit, "offset": offset}):
            yield _row_to_event(row)


def last_query(status: str = "ok") -> Optional[QueryEvent]:
    """Get the most recent query with the given status.

    Args:
        status: Status to match. Defaults to "ok", which yields the last
            device input that returned ROM information.

    Returns:
        QueryEvent if any, None otherwise.
    """
    sql = """
    SELECT * FROM query_log
     WHERE status = ?
     ORDER BY created_at DESC, id DESC
     LIMIT 1;
    """
    with connect() as conn:
        row = conn.execute(sql, (status,)).fetchone()
        if not row:
            return None
        return _row_to_event(row)
