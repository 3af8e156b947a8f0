# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors

"""Known device codenames and Android versions offered as query suggestions."""

from typing import Dict, List

# codename -> marketing name
DEVICES: Dict[str, str] = {
    "aurora": "Xiaomi 14 Ultra",
    "houji": "Xiaomi 14",
    "shennong": "Xiaomi 14 Pro",
    "fuxi": "Xiaomi 13",
    "nuwa": "Xiaomi 13 Pro",
    "ishtar": "Xiaomi 13 Ultra",
    "marble": "Redmi Note 12 Turbo",
    "mondrian": "Redmi K60",
    "socrates": "Redmi K60 Pro",
    "manet": "Redmi K70 Pro",
    "vermeer": "Redmi K70",
    "duchamp": "Redmi K70E",
    "corot": "Xiaomi 13T Pro",
    "zizhan": "Xiaomi MIX Fold 3",
    "babylon": "Xiaomi 12S Ultra",
    "sheng": "Xiaomi Pad 6S Pro",
    "yuechu": "Xiaomi Civi 3",
    "liuqin": "Xiaomi Pad 6 Pro",
    "pipa": "Xiaomi Pad 6",
    "sky": "Redmi Note 12R",
}

ANDROID_VERSIONS: List[str] = ["14", "13", "12", "11"]


def device_codes() -> List[str]:
    """Return the known codenames in suggestion order."""
    return list(DEVICES)


def device_name(codename: str) -> str:
    """
    Return the marketing name of a codename.

    Region suffixes such as ``_global`` are ignored; unknown codenames map to "".
    """
    return DEVICES.get(codename.split("_", 1)[0], "")
