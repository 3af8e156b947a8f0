# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors

"""ROM query and download service with local repository.

This package provides high-level ROM management on top of the ``ota``
client: queries using the stored account session, a query log that remembers
the last device input, a ROM metadata cache and package downloads.

Architecture:
    - Credentials: Stored account session (``cookies.json``)
    - ROM Repository: Cached ROM metadata and downloaded package paths
    - Query Log: Every query with its outcome and the service port used
    - Service Layer: High-level API for ROM operations
    - Configuration: Data directory via MIOTA_DATA_DIR

Example:
    Query with the stored login::

        from download import check_rom, init_db
        from ota import summarize

        init_db()
        info = check_rom("houji", "OS1.0.5.0.UNCCNXM", "14")
        print(summarize(info).links.official)

    Download the current package::

        from download import get_or_download_rom

        rec = get_or_download_rom(info, "cdn1", resume=True)
        print(rec.file_path)

Configuration:
    Set environment variables to customize paths::

        export MIOTA_DATA_DIR="/path/to/data"
"""

from .credentials import delete_login, is_logged_in, load_login, save_login
from .db import get_db_path, init_db, is_healthy, repair_db
from .query_repository import QueryEvent, last_query, list_queries
from .rom_repository import RomRecord, delete_rom, find_rom, list_roms
from .service import check_rom, cleanup_repository, get_or_download_rom, verify_md5
