# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors

"""ROM query and download service.

This module provides high-level functionality on top of the OTA client:
querying with the stored login, logging and caching the results, and
downloading packages into the local repository with md5 verification.
"""

from __future__ import annotations

import hashlib
import logging
import uuid
from pathlib import Path
from typing import Callable, Dict, Optional

import requests

from ota.client import OTAClient
from ota.errors import DownloadError, OTAError
from ota.responses import RomInfo
from ota.rom import build_download_links

from .config import PATHS
from .credentials import load_login
from .query_repository import add_query_event
from .rom_repository import RomRecord, find_rom, list_roms, update_file_path, upsert_rom

logger = logging.getLogger(__name__)

# Generate unique session ID for this application instance
_SESSION_ID = str(uuid.uuid4())

CHUNK_SIZE = 1024 * 1024


def get_session_id() -> str:
    """Get the current application session ID.

    Returns:
        str: UUID string identifying this application session.
    """
    return _SESSION_ID


def _cache_roms(info: RomInfo) -> None:
    for rom in (info.current_rom, info.latest_rom):
        if rom is not None and rom.md5 and rom.filename and rom.version:
            upsert_rom(RomRecord.from_rom(rom))


def check_rom(
    codename: str,
    system_version: str,
    android_version: str,
    *,
    client: Optional[OTAClient] = None,
) -> RomInfo:
    """Query ROM information with the stored login and log the outcome.

    A stored, valid login switches the query to the extended endpoint. The
    query is logged with status "ok", "no_info" (no current ROM branch) or
    "error", and downloadable ROMs are cached in the repository.

    Args:
        codename: Device codename.
        system_version: Installed system version.
        android_version: Android major version.
        client: Optional OTAClient; one is built from the stored login if None.

    Returns:
        RomInfo: Parsed response (possibly without a current ROM).

    Raises:
        OTAError: If the query fails or the response is malformed.
        requests.RequestException: On network failure.

    Example:
        info = check_rom("houji", "OS1.0.5.0.UNCCNXM", "14")
        print(summarize(info).links.official)
    """
    client = client or OTAClient(credentials=load_login())
    event = {
        "session_id": _SESSION_ID,
        "codename": codename,
        "system_version": system_version,
        "android_version": android_version,
        "port": client.port,
    }
    try:
        info = client.query(codename, system_version, android_version)
    except (OTAError, requests.RequestException):
        add_query_event(**event, status="error")
        raise

    cur = info.current_rom
    latest = info.latest_rom
    status = "ok" if cur is not None and cur.branch is not None else "no_info"
    add_query_event(
        **event,
        status=status,
        current_version=cur.version if cur else None,
        latest_version=latest.version if latest else None,
    )
    if status == "ok":
        _cache_roms(info)
    else:
        logger.info("No ROM information for %s %s", codename, system_version)
    return info


def verify_md5(
    path: Path,
    expected: str,
    *,
    progress_cb: Optional[Callable[[int, int], None]] = None,
) -> None:
    """Verify the MD5 checksum of a file.

    Args:
        path: File to hash.
        expected: Expected hexadecimal MD5 (case-insensitive).
        progress_cb: Optional callback function(bytes_hashed, total_bytes).

    Raises:
        DownloadError.ChecksumMismatch: If the digest differs.
    """
    total = path.stat().st_size
    md5 = hashlib.md5()
    done = 0
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            md5.update(chunk)
            done += len(chunk)
            if progress_cb:
                progress_cb(done, total)
    actual = md5.hexdigest()
    if actual.lower() != expected.lower():
        raise DownloadError.ChecksumMismatch(expected, actual)


def _write_part(
    resp: requests.Response,
    part_path: Path,
    start: int,
    filename: str,
    progress_cb: Optional[Callable[[str, int, Optional[int]], None]],
) -> None:
    if start > 0 and resp.status_code != 206:
        # Server ignored the range; restart from scratch
        logger.info("Range not honoured for %s, restarting download", filename)
        start = 0

    length = int(resp.headers.get("Content-Length", 0) or 0)
    total = start + length if length else None
    mode = "ab" if start > 0 else "wb"
    written = start
    with open(part_path, mode) as f:
        for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
            if not chunk:
                continue
            f.write(chunk)
            written += len(chunk)
            if progress_cb:
                progress_cb("download", written, total)

    if total is not None and written != total:
        raise DownloadError(f"Size mismatch: got {written}, expected {total}")


def get_or_download_rom(
    info: RomInfo,
    mirror: str = "official",
    *,
    resume: bool = True,
    verify: bool = True,
    session: Optional[requests.Session] = None,
    timeout: int = 60,
    progress_cb: Optional[Callable[[str, int, Optional[int]], None]] = None,
) -> RomRecord:
    """Get the current ROM package from the repository or download it.

    Downloads stream into ``<downloads>/<filename>.part`` and are renamed
    once complete and verified. A partial file is resumed with an HTTP Range
    request when ``resume`` is set; a 416 answer means the partial file is
    already complete and it goes straight to verification.

    ``progress_cb`` is invoked as progress_cb(stage, done_bytes, total_bytes)
    with stage "download" or "verify"; total_bytes is None when the server
    sends no Content-Length.

    Args:
        info: Parsed response whose current ROM should be downloaded.
        mirror: "official", "cdn1" or "cdn2".
        resume: Resume from a partial download if present.
        verify: Check the package md5 after download.
        session: Optional requests.Session.
        timeout: HTTP timeout in seconds.
        progress_cb: Optional unified progress callback.

    Returns:
        RomRecord: Repository record with the package path.

    Raises:
        DownloadError.NotDownloadable: If the current ROM has no package.
        DownloadError.ChecksumMismatch: If verification fails (the file is removed).
        requests.HTTPError: On non-success download response.
    """
    cur = info.current_rom
    if cur is None or not cur.md5 or not cur.filename or not cur.version:
        raise DownloadError.NotDownloadable(cur.version if cur and cur.version else "")

    existing = find_rom(cur.md5)
    if existing and existing.file_path and Path(existing.file_path).is_file():
        logger.info("Package %s already in repository: %s", existing.filename, existing.file_path)
        return existing

    url = build_download_links(info).get(mirror)
    filename = url.rsplit("/", 1)[-1]
    PATHS.downloads_dir.mkdir(parents=True, exist_ok=True)
    dest = PATHS.downloads_dir / filename
    part_path = dest.with_name(dest.name + ".part")

    start = part_path.stat().st_size if (resume and part_path.exists()) else 0
    headers = {"Range": f"bytes={start}-"} if start > 0 else {}
    sess = session or requests.Session()
    logger.info("Downloading %s from %s (offset %d)", filename, url, start)
    resp = sess.get(url, headers=headers, stream=True, timeout=timeout)
    if start > 0 and resp.status_code == 416:
        # Range starts at end of file: the partial download is already complete
        logger.info("Partial file for %s already complete, skipping fetch", filename)
    else:
        resp.raise_for_status()
        _write_part(resp, part_path, start, filename, progress_cb)

    if verify:

        def _verify_cb(done: int, size: int) -> None:
            if progress_cb:
                progress_cb("verify", done, size)

        try:
            verify_md5(part_path, cur.md5, progress_cb=_verify_cb if progress_cb else None)
        except DownloadError.ChecksumMismatch:
            part_path.unlink(missing_ok=True)
            raise

    # Atomic finalize
    part_path.replace(dest)

    rec = RomRecord.from_rom(cur, file_path=str(dest.resolve()))
    upsert_rom(rec, keep_file_path=False)
    return rec


def cleanup_repository(
    progress_cb: Optional[Callable[[int, int, int], None]] = None,
) -> Dict[str, int]:
    """Clean repository inconsistencies.

    Clears the file path of every ROM record whose package vanished from disk.

    Args:
        progress_cb: Optional callback invoked as progress_cb(processed, total, missing_files).

    Returns:
        Summary statistics dict with keys: total_records, missing_files
    """
    stats = {"total_records": 0, "missing_files": 0}

    records = list(list_roms())
    total = len(records)
    for idx, rec in enumerate(records, start=1):
        stats["total_records"] += 1
        if rec.file_path and not Path(rec.file_path).is_file():
            stats["missing_files"] += 1
            update_file_path(rec.md5, None)
        if progress_cb:
            progress_cb(idx, total, stats["missing_files"])

    return stats
