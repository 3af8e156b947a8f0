# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors

"""
ROM normalization and presentation helpers.

Turns a parsed RomInfo into what a user reads: a display name for the big
version, a flattened changelog, download links on the official and mirror
hosts, and a report that only carries the sections the response can fill.

Functions:
- format_big_version: Human-readable system generation ("HyperOS 1.0", "MIUI 14").
- format_changelog: Flatten changelog sections into bullet text.
- build_download_links: Official/CDN download URLs for the current ROM.
- summarize: Build a RomReport, raising when the response has no ROM.
- format_report: Produce a human-readable multi-line summary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from .errors import ResponseError
from .responses import Changelog, RomInfo

OFFICIAL_LATEST_HOST = "https://ultimateota.d.miui.com"
OFFICIAL_HOST = "https://bigota.d.miui.com"
CDN1_HOST = "https://cdnorg.d.miui.com"
CDN2_HOST = "https://bkt-sgp-miui-ota-update-alisgp.oss-ap-southeast-1.aliyuncs.com"

MIRRORS = ("official", "cdn1", "cdn2")


@dataclass(frozen=True)
class DownloadLinks:
    """Download URLs for one ROM package."""

    official: str
    cdn1: str
    cdn2: str

    def get(self, mirror: str) -> str:
        """Return the link for ``mirror`` (one of MIRRORS)."""
        if mirror not in MIRRORS:
            raise ValueError(f"Unknown mirror: {mirror}")
        return getattr(self, mirror)


@dataclass(frozen=True)
class RomReport:
    """Normalized view of an update response.

    The basic fields are always set. The package fields are None when the
    response carries no downloadable current ROM (``has_package`` is False).
    """

    codename: str
    system: str
    codebase: str
    branch: str
    big_version: Optional[str] = None
    filename: Optional[str] = None
    filesize: Optional[str] = None
    md5: Optional[str] = None
    links: Optional[DownloadLinks] = None
    changelog: Optional[str] = None

    @property
    def has_package(self) -> bool:
        return self.links is not None


def format_big_version(bigversion: Optional[str]) -> str:
    """
    Map a big version code to its display name.

    Args:
        bigversion: Raw ``bigversion`` field, e.g. "816" or "14".

    Returns:
        "816" replaced by "HyperOS 1.0" when present, otherwise "MIUI <bigversion>".
    """
    if bigversion and "816" in bigversion:
        return bigversion.replace("816", "HyperOS 1.0")
    return f"MIUI {bigversion}"


def format_changelog(changelog: Optional[Dict[str, Changelog]]) -> str:
    """
    Flatten changelog sections into bullet text.

    Each section renders as its title followed by "- " bullets, sections are
    separated by a blank line and trailing whitespace is stripped.
    """
    if not changelog:
        return ""
    out = []
    for section, body in changelog.items():
        out.append(section + "\n- " + "\n- ".join(body.txt) + "\n\n")
    return "".join(out).rstrip()


def build_download_links(info: RomInfo) -> DownloadLinks:
    """
    Build official and mirror links for the current ROM.

    When the current ROM is also the latest one (same md5) the official link
    points to the latest-package host and uses the latest filename; otherwise
    the archive host and the current filename are used. Mirrors follow the
    same filename rule. All links live under the current version directory.

    Args:
        info: Parsed response with a current ROM.

    Returns:
        DownloadLinks for the package.

    Raises:
        ResponseError.NoRomInfo: If the current ROM has no version or filename.
    """
    cur = info.current_rom
    if cur is None or not cur.version or not cur.filename:
        raise ResponseError.NoRomInfo()
    latest = info.latest_rom
    is_latest = latest is not None and cur.md5 is not None and cur.md5 == latest.md5 and bool(latest.filename)
    filename = latest.filename if is_latest and latest is not None else cur.filename
    official_host = OFFICIAL_LATEST_HOST if is_latest else OFFICIAL_HOST
    return DownloadLinks(
        official=f"{official_host}/{cur.version}/{filename}",
        cdn1=f"{CDN1_HOST}/{cur.version}/{filename}",
        cdn2=f"{CDN2_HOST}/{cur.version}/{filename}",
    )


def summarize(info: RomInfo, codename: str = "", system_version: str = "") -> RomReport:
    """
    Build a RomReport from a parsed response.

    Args:
        info: Parsed response.
        codename: Queried codename, used in the error message only.
        system_version: Queried version, used in the error message only.

    Returns:
        RomReport with package fields filled only when the current ROM has a
        filename, md5 and version (links live under the version directory).

    Raises:
        ResponseError.NoRomInfo: If the response has no current ROM branch.
    """
    cur = info.current_rom
    if cur is None or cur.branch is None:
        raise ResponseError.NoRomInfo(codename, system_version)

    basic = {
        "codename": cur.device or "",
        "system": cur.version or "",
        "codebase": cur.codebase or "",
        "branch": cur.branch,
    }
    if not cur.filename or not cur.md5 or not cur.version:
        return RomReport(**basic)

    return RomReport(
        **basic,
        big_version=format_big_version(cur.bigversion),
        filename=cur.filename,
        filesize=cur.filesize,
        md5=cur.md5,
        links=build_download_links(info),
        changelog=format_changelog(cur.changelog),
    )


def format_report(report: RomReport) -> str:
    """
    Produce a human-readable summary of a RomReport.

    Args:
        report: Normalized response.

    Returns:
        Multi-line text; the package section is omitted when absent.
    """
    result = f"Codename: {report.codename}\n"
    result += f"System: {report.system}\n"
    result += f"Android: {report.codebase}\n"
    result += f"Branch: {report.branch}"
    if not report.has_package or report.links is None:
        return result

    result += f"\n\nBig version: {report.big_version}\n"
    result += f"Filename: {report.filename}\n"
    result += f"Filesize: {report.filesize}\n"
    result += f"MD5: {report.md5}\n"
    result += f"Official: {report.links.official}\n"
    result += f"CDN1: {report.links.cdn1}\n"
    result += f"CDN2: {report.links.cdn2}"
    if report.changelog:
        result += f"\n\nChangelog:\n{report.changelog}"
    return result
