# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors

"""Persistence of the logged-in account session.

The session is stored as ``cookies.json`` in the data directory. Logging out
deletes the file.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Optional

from ota.auth import LoginInfo

from .config import PATHS

logger = logging.getLogger(__name__)


def save_login(info: LoginInfo) -> None:
    """Write the session to ``cookies.json`` (owner read/write only)."""
    PATHS.data_dir.mkdir(parents=True, exist_ok=True)
    tmp = PATHS.cookies_path.with_suffix(".json.tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(info.to_dict(), f, ensure_ascii=False)
    try:
        os.chmod(tmp, 0o600)
    except OSError:
        logger.debug("Could not restrict permissions on %s", tmp)
    tmp.replace(PATHS.cookies_path)


def load_login() -> Optional[LoginInfo]:
    """Read the stored session.

    Returns:
        LoginInfo, or None when no session is stored or the file is unreadable.
    """
    path = PATHS.cookies_path
    if not path.is_file():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as ex:
        logger.warning("Ignoring unreadable session file %s: %s", path, ex)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring malformed session file %s", path)
        return None
    return LoginInfo.from_dict(data)


def delete_login() -> bool:
    """Delete the stored session.

    Returns:
        bool: True if a session file was removed.
    """
    try:
        PATHS.cookies_path.unlink()
    except FileNotFoundError:
        return False
    return True


def is_logged_in() -> bool:
    """True when a stored session exists and came from a successful login."""
    info = load_login()
    return info is not None and info.is_valid
