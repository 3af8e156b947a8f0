# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors

"""Download module configuration.

This module provides configuration for data paths and directories used
throughout the download module.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Paths:
    """Configuration paths for download operations.

    This dataclass holds all filesystem paths used by the download module,
    including the data directory, database path, downloads directory and the
    stored account session.

    Attributes:
        data_dir: Root directory for application data storage.
        db_path: Path to the SQLite database file.
        downloads_dir: Directory where ROM packages are downloaded.
        cookies_path: JSON file holding the logged-in account session.
    """

    data_dir: Path
    db_path: Path
    downloads_dir: Path
    cookies_path: Path


def resolve_paths(data_dir: str | os.PathLike[str] | None = None) -> Paths:
    """Resolve configuration paths.

    Determines the root data directory from the argument, the MIOTA_DATA_DIR
    environment variable or './data' as default, then constructs all
    required paths. Directories are created lazily by their users.

    Args:
        data_dir: Optional explicit data directory.

    Returns:
        Paths: Configuration object containing all resolved filesystem paths.
    """
    root = data_dir if data_dir is not None else os.environ.get("MIOTA_DATA_DIR", "./data")
    data_root = Path(root).resolve()
    return Paths(
        data_dir=data_root,
        db_path=data_root / "miota.db",
        downloads_dir=data_root / "downloads",
        cookies_path=data_root / "cookies.json",
    )


PATHS = resolve_paths()
"""Global paths configuration instance.

This constant provides access to all configured paths used by the download module.
"""
