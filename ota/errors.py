# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors
"""
OTA package error definitions.

This module defines custom exceptions used across the OTA package and the
download service built on top of it.

Exceptions:
    OTAError: Base class for OTA-related errors.
    AuthError: Raised for account login failures.
    RequestError: Raised when the update endpoint cannot be reached or its body decoded.
    ResponseError: Raised when a decrypted response is malformed or carries no ROM.
    DownloadError: Raised when a ROM download fails or fails verification.
"""


class OTAError(Exception):
    """Base class for OTA-related errors with optional predefined messages."""


class AuthError(OTAError):
    """Raised for account login failures."""

    # Error subtypes with built-in messages
    class EmptyCredentials(OTAError):
        """Account or password left empty."""

        def __init__(self):
            super().__init__("Account or password is empty")

    class LoginFailed(OTAError):
        """Auth endpoint rejected the credentials."""

        def __init__(self, description: str = ""):
            msg = "Login failed"
            if description:
                msg += f": {description}"
            super().__init__(msg)

    class MissingSecurity(OTAError):
        """Auth response lacks ssecurity/location/nonce/userId."""

        def __init__(self, field_name: str):
            super().__init__(f"Missing {field_name} in login response")

    class MissingServiceToken(OTAError):
        """Service login redirect did not set a serviceToken cookie."""

        def __init__(self):
            super().__init__("Service login did not return a serviceToken")

    class InvalidSession(OTAError):
        """Stored ssecurity does not yield a usable AES key."""

        def __init__(self):
            super().__init__("Stored login has an unusable ssecurity; log in again")


class RequestError(OTAError):
    """Raised when the update endpoint cannot be reached or its body decoded."""

    # Error subtypes with built-in messages
    class HTTPError(OTAError):
        """Non-success HTTP status from the update endpoint."""

        def __init__(self, status_code: int, url: str = ""):
            msg = f"HTTP {status_code} from update service"
            if url:
                msg += f": {url}"
            super().__init__(msg)

    class Undecryptable(OTAError):
        """Response body could not be decrypted with the request key."""

        def __init__(self, logged_in: bool = False):
            msg = "Could not decrypt update service response"
            if logged_in:
                msg += "; the stored login may have expired, try logging in again"
            super().__init__(msg)


class ResponseError(OTAError):
    """Raised when a decrypted response is malformed or carries no ROM."""

    # Error subtypes with built-in messages
    class InvalidJSON(OTAError):
        """Decrypted response is not a JSON object."""

        def __init__(self, detail: str = ""):
            msg = "Update service returned invalid JSON"
            if detail:
                msg += f" ({detail})"
            super().__init__(msg)

    class NoRomInfo(OTAError):
        """No current ROM information for the queried device."""

        def __init__(self, codename: str = "", version: str = ""):
            msg = "No ROM information available"
            if codename or version:
                msg += f" for {codename} {version}".rstrip()
            super().__init__(msg)


class DownloadError(OTAError):
    """Raised when a ROM download fails or fails verification."""

    # Error subtypes with built-in messages
    class NotDownloadable(OTAError):
        """Current ROM carries no filename or md5."""

        def __init__(self, version: str = ""):
            msg = "ROM has no downloadable package"
            if version:
                msg += f": {version}"
            super().__init__(msg)

    class ChecksumMismatch(OTAError):
        """Downloaded file md5 differs from the advertised one."""

        def __init__(self, expected: str, actual: str):
            super().__init__(f"MD5 mismatch: got {actual}, expected {expected}")
