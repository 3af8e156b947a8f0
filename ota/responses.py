# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors

"""
OTA response parsing helpers.

Provides dataclasses and a parser to extract ROM metadata from the decrypted
JSON returned by the update endpoint.

Functions:
- parse_rom_info: parse decrypted response text into a RomInfo dataclass.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import ResponseError


@dataclass(frozen=True)
class Changelog:
    """One changelog section: a list of bullet lines."""

    txt: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Rom:
    """ROM entry of an update response.

    Every field is optional; the service omits what it does not know.

    Attributes:
        bigversion: Major system version ("816" denotes HyperOS 1.0).
        branch: Release branch (e.g. "F" for stable).
        changelog: Section name to Changelog, in server order.
        codebase: Android version the ROM is built on.
        device: Device codename.
        filename: Package filename on the download servers.
        filesize: Human-readable package size (e.g. "5.6G").
        md5: Package MD5 checksum.
        name: Marketing device name.
        type: Package type.
        version: Full system version string.
    """

    bigversion: Optional[str] = None
    branch: Optional[str] = None
    changelog: Optional[Dict[str, Changelog]] = None
    codebase: Optional[str] = None
    device: Optional[str] = None
    filename: Optional[str] = None
    filesize: Optional[str] = None
    md5: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    version: Optional[str] = None


@dataclass(frozen=True)
class RomInfo:
    """Update service response.

    Attributes:
        auth_result: AuthResult code (1 when the extended endpoint accepted the account).
        current_rom: ROM matching the queried version.
        latest_rom: Latest ROM available for the device.
        increment_rom: Incremental package, when offered.
        cross_rom: Cross-version package, when offered.
    """

    auth_result: Optional[int] = None
    current_rom: Optional[Rom] = None
    latest_rom: Optional[Rom] = None
    increment_rom: Optional[Rom] = None
    cross_rom: Optional[Rom] = None


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _parse_changelog(raw: Any) -> Optional[Dict[str, Changelog]]:
    if not isinstance(raw, dict):
        return None
    out: Dict[str, Changelog] = {}
    for section, body in raw.items():
        lines = body.get("txt", []) if isinstance(body, dict) else []
        out[str(section)] = Changelog(txt=[str(line) for line in lines or []])
    return out


def parse_rom(raw: Any) -> Optional[Rom]:
    """
    Parse one ROM object.

    Args:
        raw: JSON value of a CurrentRom/LatestRom/... key.

    Returns:
        Rom, or None when the value is absent or not an object.
    """
    if not isinstance(raw, dict):
        return None
    return Rom(
        bigversion=_opt_str(raw.get("bigversion")),
        branch=_opt_str(raw.get("branch")),
        changelog=_parse_changelog(raw.get("changelog")),
        codebase=_opt_str(raw.get("codebase")),
        device=_opt_str(raw.get("device")),
        filename=_opt_str(raw.get("filename")),
        filesize=_opt_str(raw.get("filesize")),
        md5=_opt_str(raw.get("md5")),
        name=_opt_str(raw.get("name")),
        type=_opt_str(raw.get("type")),
        version=_opt_str(raw.get("version")),
    )


def parse_rom_info(text: str) -> RomInfo:
    """
    Parse decrypted update response text into a RomInfo structure.

    Args:
        text: Decrypted JSON text.

    Returns:
        RomInfo: Dataclass with current/latest/increment/cross ROMs. Missing
            keys map to None; unknown keys are ignored.

    Raises:
        ResponseError.InvalidJSON: If the text is not a JSON object.
    """
    try:
        data = json.loads(text)
    except ValueError as ex:
        raise ResponseError.InvalidJSON(str(ex)) from ex
    if not isinstance(data, dict):
        raise ResponseError.InvalidJSON(f"expected object, got {type(data).__name__}")

    auth = data.get("AuthResult")
    try:
        auth_result = int(auth) if auth is not None else None
    except (TypeError, ValueError):
        auth_result = None

    return RomInfo(
        auth_result=auth_result,
        current_rom=parse_rom(data.get("CurrentRom")),
        latest_rom=parse_rom(data.get("LatestRom")),
        increment_rom=parse_rom(data.get("IncrementRom")),
        cross_rom=parse_rom(data.get("CrossRom")),
    )
