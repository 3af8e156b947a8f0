# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors
"""
OTA configuration helpers.

This module defines the OTAConfig dataclass which centralizes default
endpoints, request keys and HTTP settings used by the OTA and account clients.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class OTAConfig:
    """
    Configuration for the OTA update service client.

    Args:
        cn_url: Update endpoint used for mainland (CN) accounts and anonymous queries.
        intl_url: Update endpoint used for global (GL) accounts.
        login_url: Account service login page.
        login_auth2_url: Account password authentication endpoint.
        request_key: AES key used for anonymous requests.
        iv: AES-CBC initialization vector shared by every request.
        user_agent: User-Agent header used for HTTP requests.
        request_timeout: Default timeout in seconds for HTTP requests.
    """

    cn_url: str = "https://update.miui.com/updates/miotaV3.php"
    intl_url: str = "https://update.intl.miui.com/updates/miotaV3.php"
    login_url: str = "https://account.xiaomi.com/pass/serviceLogin"
    login_auth2_url: str = "https://account.xiaomi.com/pass/serviceLoginAuth2"
    # Anonymous key/IV (logged-in requests use the account ssecurity instead)
    request_key: str = "miuiotavalided11"
    iv: str = "0102030405060708"
    user_agent: str = "Dalvik/2.1.0 (Linux; U; Android 14)"
    request_timeout: int = 30  # seconds


DEFAULT_CONFIG = OTAConfig()
