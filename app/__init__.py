# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors

"""OTA ROM lookup command line application.

This package provides the ``miota`` command: it queries the update service
for a device, prints current ROM information with download links and
changelog, downloads packages and manages the account login that unlocks the
extended endpoint.

Example:
    Run the application::

        miota check -c houji -s OS1.0.5.0.UNCCNXM -a 14
        python -m app download --mirror cdn1
"""

__version__ = "0.1.0"
