# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors

"""OTA update service client library.

This package implements the update service protocol used to look up ROM
packages for a device: encrypted ROM queries, response parsing, download link
construction and the account login that unlocks the extended endpoint.

Main Components:
    - OTAClient: Core client posting encrypted ROM queries
    - AccountClient: Password login producing a persisted LoginInfo
    - Response parsing: RomInfo/Rom/Changelog dataclasses
    - ROM helpers: big version names, changelog text, download links, reports

Example:
    Anonymous ROM query::

        from ota import OTAClient, summarize, format_report

        info = OTAClient().query("houji", "OS1.0.5.0.UNCCNXM", "14")
        print(format_report(summarize(info)))

    Logged-in query on the extended endpoint::

        from ota import AccountClient, OTAClient

        login = AccountClient().login("user@example.com", "secret")
        info = OTAClient(credentials=login).query("houji", "OS1.0.5.0.UNCCNXM", "14")
"""

from .auth import AccountClient, LoginInfo
from .client import OTAClient
from .errors import AuthError, DownloadError, OTAError, RequestError, ResponseError
from .responses import Changelog, Rom, RomInfo, parse_rom_info
from .rom import (
    DownloadLinks,
    RomReport,
    build_download_links,
    format_big_version,
    format_changelog,
    format_report,
    summarize,
)
