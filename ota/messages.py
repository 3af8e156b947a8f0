# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors

"""
OTA request message builders.

Provides helpers to construct the JSON parameters posted (encrypted) to the
update endpoint and the form posted to the account auth endpoint.
"""

import json
from typing import Dict

# Fixed signature the account service expects from the updater client
LOGIN_SIGN = "KKkRvCpZoDC+gLdeyOsdMhwV0Xg="
SID_CN = "miuiromota"
SID_GLOBAL = "miotaintl"


def is_global(codename: str) -> bool:
    """Return True for global-variant codenames (e.g. ``houji_global``)."""
    return "_global" in codename


def build_rom_request(
    codename: str, system_version: str, android_version: str, user_id: str = ""
) -> Dict[str, str]:
    """
    Build the ROM query parameters.

    Args:
        codename: Device codename, optionally with a region suffix.
        system_version: Installed system version, e.g. "OS1.0.5.0.UNCCNXM".
        android_version: Android major version, e.g. "14".
        user_id: Account user id when logged in, empty otherwise.

    Returns:
        Ordered mapping of request keys to string values.
    """
    glob = is_global(codename)
    return {
        "b": "F",
        "c": android_version,
        "d": codename,
        "f": "1",
        "id": user_id,
        "l": "en_US" if glob else "zh_CN",
        "ov": system_version,
        "p": codename,
        "pn": codename,
        "r": "GL" if glob else "CN",
        "unlock": "0",
        "v": f"MIUI-{system_version}",
    }


def encode_request(params: Dict[str, str]) -> str:
    """Serialize request parameters to compact JSON text."""
    return json.dumps(params, ensure_ascii=False, separators=(",", ":"))


def build_login_form(account: str, password_md5: str, global_account: bool = False) -> Dict[str, str]:
    """
    Build the serviceLoginAuth2 form.

    Args:
        account: Account name, phone number or e-mail.
        password_md5: Upper-case MD5 of the password.
        global_account: Log in to the global OTA service instead of CN.

    Returns:
        Form fields ready to be posted.
    """
    return {
        "_json": "true",
        "bizDeviceType": "",
        "user": account,
        "hash": password_md5,
        "sid": SID_GLOBAL if global_account else SID_CN,
        "_sign": LOGIN_SIGN,
        "_locale": "zh_CN",
    }
