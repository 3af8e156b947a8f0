# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors

"""Configuration management for the command line application.

This module handles loading and validation of configuration settings from
the config.toml file.
"""

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path

from ota.rom import MIRRORS


@dataclass
class AppConfig:
    """Application configuration settings.

    Attributes:
        mirror: Default download mirror ("official", "cdn1" or "cdn2").
        resume: Resume partial downloads by default.
        verify_md5: Verify package checksums after download.
        request_timeout: HTTP timeout in seconds for update queries and downloads.
        android_version: Android version used when none is given or remembered.
        log_level: Level name for the log file.
    """

    mirror: str = "official"
    resume: bool = True
    verify_md5: bool = True
    request_timeout: int = 30
    android_version: str = "14"
    log_level: str = "INFO"


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from config.toml file.

    Args:
        config_path: Path to config.toml file. If None, uses app/config.toml.

    Returns:
        AppConfig instance with loaded or default settings.
    """
    if config_path is None:
        config_path = Path(__file__).parent / "config.toml"

    logger = logging.getLogger(__name__)

    try:
        with open(config_path, "rb") as f:
            config = tomllib.load(f)
    except (FileNotFoundError, OSError, tomllib.TOMLDecodeError) as ex:
        logger.warning("Config file not found or error reading: %s. Using defaults.", ex)
        return AppConfig()

    defaults = AppConfig()

    # Query settings
    query_config = config.get("query", {})
    request_timeout = int(query_config.get("request_timeout", defaults.request_timeout))
    android_version = str(query_config.get("android_version", defaults.android_version))

    # Download settings
    download_config = config.get("download", {})
    mirror = download_config.get("mirror", defaults.mirror)
    if mirror not in MIRRORS:
        logger.warning("Unknown mirror %r in config, using %s", mirror, defaults.mirror)
        mirror = defaults.mirror
    resume = bool(download_config.get("resume", defaults.resume))
    verify_md5 = bool(download_config.get("verify_md5", defaults.verify_md5))

    # Logging settings
    log_level = str(config.get("logging", {}).get("level", defaults.log_level)).upper()

    logger.info(
        "Config loaded: mirror=%s, resume=%s, verify_md5=%s, timeout=%s, android=%s",
        mirror,
        resume,
        verify_md5,
        request_timeout,
        android_version,
    )

    return AppConfig(
        mirror=mirror,
        resume=resume,
        verify_md5=verify_md5,
        request_timeout=request_timeout,
        android_version=android_version,
        log_level=log_level,
    )
