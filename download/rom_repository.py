# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors

"""Repository layer for ROM metadata.

This module provides the data access layer for caching ROM packages seen in
update responses, and the local file they were downloaded to.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Iterable, Optional

from ota.responses import Rom
from ota.rom import format_changelog

from .db import connect


@dataclass
class RomRecord:
    """ROM repository record.

    Attributes:
        md5: Package MD5 checksum (unique key).
        device: Device codename.
        version: Full system version.
        bigversion: Raw big version code.
        branch: Release branch.
        codebase: Android version.
        filename: Package filename on the download servers.
        filesize: Human-readable package size.
        changelog: Flattened changelog text.
        file_path: Absolute path to the downloaded package, or None if not downloaded.
    """

    md5: str
    device: str
    version: str
    bigversion: str | None
    branch: str | None
    codebase: str | None
    filename: str
    filesize: str | None
    changelog: str | None
    file_path: str | None = None

    @classmethod
    def from_rom(cls, rom: Rom, file_path: str | None = None) -> "RomRecord":
        """Build a record from a parsed Rom carrying md5, filename and version."""
        if not rom.md5 or not rom.filename or not rom.version:
            raise ValueError("ROM lacks md5, filename or version")
        return cls(
            md5=rom.md5,
            device=rom.device or "",
            version=rom.version,
            bigversion=rom.bigversion,
            branch=rom.branch,
            codebase=rom.codebase,
            filename=rom.filename,
            filesize=rom.filesize,
            changelog=format_changelog(rom.changelog) or None,
            file_path=file_path,
        )


_COLUMNS = """md5, device, version, bigversion, branch, codebase,
           filename, filesize, changelog, file_path"""


def _row_to_record(row: sqlite3.Row) -> RomRecord:
    return RomRecord(
        md5=row["md5"],
        device=row["device"],
        version=row["version"],
        bigversion=row["bigversion"],
        branch=row["branch"],
        codebase=row["codebase"],
        filename=row["filename"],
        filesize=row["filesize"],
        changelog=row["changelog"],
        file_path=row["file_path"],
    )


def upsert_rom(rec: RomRecord, *, keep_file_path: bool = True) -> None:
    """Insert or update a ROM record.

    Args:
        rec: ROM record to insert or update.
        keep_file_path: When True and ``rec.file_path`` is None, an existing
            file path is preserved instead of being cleared.

    Raises:
        Exception: If the database operation fails, the exception is re-raised
            after rolling back the transaction.
    """
    file_path_sql = "COALESCE(excluded.file_path, rom.file_path)" if keep_file_path else "excluded.file_path"
    sql = f"""
    INSERT INTO rom (md5, device, version, bigversion, branch, codebase,
                     filename, filesize, changelog, file_path)
    VALUES (:md5, :device, :version, :bigversion, :branch, :codebase,
            :filename, :filesize, :changelog, :file_path)
    ON CONFLICT(md5) DO UPDATE SET
        device=excluded.device,
        version=excluded.version,
        bigversion=excluded.bigversion,
        branch=excluded.branch,
        codebase=excluded.codebase,
        filename=excluded.filename,
        filesize=excluded.filesize,
        changelog=excluded.changelog,
        file_path={file_path_sql};
    """
    with connect() as conn:
        conn.execute("BEGIN;")
        try:
            conn.execute(sql, rec.__dict__)
            conn.execute("COMMIT;")
        except Exception:
            conn.execute("ROLLBACK;")
            raise


def find_rom(md5: str) -> Optional[RomRecord]:
    """Find a ROM record by package md5.

    Returns:
        RomRecord if found, None otherwise.
    """
    sql = f"SELECT {_COLUMNS} FROM rom WHERE md5=?;"
    with connect() as conn:
        row = conn.execute(sql, (md5,)).fetchone()
        if not row:
            return None
        return _row_to_record(row)


def list_roms(device: Optional[str] = None, limit: Optional[int] = None) -> Iterable[RomRecord]:
    """List ROM records, newest first.

    Args:
        device: Optional codename filter.
        limit: Maximum number of records to return, or None for all.

    Yields:
        RomRecord: Each cached ROM.
    """
    sql = f"SELECT {_COLUMNS} FROM rom"
    params: list[str] = []
    if device:
        sql += " WHERE device=?"
        params.append(device)
    sql += " ORDER BY created_at DESC, id DESC"
    if limit:
        sql += f" LIMIT {int(limit)}"
    sql += ";"

    with connect() as conn:
        for row in conn.execute(sql, params):
            yield _row_to_record(row)


def update_file_path(md5: str, file_path: str | None) -> None:
    """Set or clear the downloaded file path of a ROM record."""
    sql = "UPDATE rom SET file_path=? WHERE md5=?;"
    with connect() as conn:
        conn.execute("BEGIN;")
        try:
            conn.execute(sql, (file_path, md5))
            conn.execute("COMMIT;")
        except Exception:
            conn.execute("ROLLBACK;")
            raise


def delete_rom(md5: str) -> None:
    """Delete a ROM record.

    This does not delete any file on disk; callers remove the package first.
    """
    sql = "DELETE FROM rom WHERE md5=?;"
    with connect() as conn:
        conn.execute("BEGIN;")
        try:
            conn.execute(sql, (md5,))
            conn.execute("COMMIT;")
        except Exception:
            conn.execute("ROLLBACK;")
            raise
