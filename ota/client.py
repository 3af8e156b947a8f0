# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors
"""
OTA update service client.

Builds encrypted ROM queries, posts them to the CN or international update
endpoint and decrypts the answers, anonymously or with a stored login.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from .auth import LoginInfo
from .config import DEFAULT_CONFIG, OTAConfig
from .crypto import decrypt_response, encrypt_request, security_key
from .errors import AuthError, RequestError
from .messages import build_rom_request, encode_request
from .responses import RomInfo, parse_rom_info

logger = logging.getLogger(__name__)


class OTAClient:
    """
    OTA update service client implementation.

    Encrypts ROM queries, posts them to the update endpoint and decrypts the
    answer. Without credentials queries go to port 1 with the anonymous key;
    with a valid login they go to port 2 with the account key and token.

    Args:
        cfg: OTA configuration settings. Defaults to DEFAULT_CONFIG.
        session: Optional requests.Session for connection reuse.
        credentials: Optional stored login enabling the extended endpoint.
    """

    def __init__(
        self,
        cfg: OTAConfig = DEFAULT_CONFIG,
        session: Optional[requests.Session] = None,
        credentials: Optional[LoginInfo] = None,
    ):
        self.cfg = cfg
        self.sess = session or requests.Session()
        self.credentials = credentials if credentials and credentials.is_valid else None

    @property
    def logged_in(self) -> bool:
        return self.credentials is not None

    @property
    def port(self) -> str:
        """Service port: "2" for the extended (logged-in) endpoint, else "1"."""
        return "2" if self.logged_in else "1"

    @property
    def url(self) -> str:
        if self.credentials and self.credentials.account_type == "GL":
            return self.cfg.intl_url
        return self.cfg.cn_url

    def _key(self) -> bytes:
        if self.credentials:
            return security_key(self.credentials.ssecurity)
        return self.cfg.request_key.encode()

    def _makereq(self, plaintext: str) -> str:
        """
        Encrypt, post and decrypt one update query.

        Args:
            plaintext: JSON request text.

        Returns:
            str: Decrypted response text.

        Raises:
            AuthError.InvalidSession: If the stored ssecurity is not a valid AES key.
            RequestError.HTTPError: On non-200 response.
            RequestError.Undecryptable: If the body does not decrypt with the request key.
        """
        try:
            key = self._key()
            q = encrypt_request(plaintext, key)
        except ValueError as ex:
            # binascii.Error is a ValueError too
            logger.warning("Stored login has an unusable ssecurity")
            raise AuthError.InvalidSession() from ex
        token = self.credentials.service_token if self.credentials else ""
        data = {"q": q, "t": token, "s": self.port}
        r = self.sess.post(
            self.url,
            data=data,
            headers={"User-Agent": self.cfg.user_agent},
            cookies={"serviceToken": token} if token else None,
            timeout=self.cfg.request_timeout,
        )
        if not r.ok:
            raise RequestError.HTTPError(r.status_code, self.url)
        try:
            return decrypt_response(r.text, key)
        except ValueError as ex:
            logger.debug("Undecryptable body (%d bytes) from %s", len(r.text), self.url)
            raise RequestError.Undecryptable(self.logged_in) from ex

    def get_rom_info(self, codename: str, system_version: str, android_version: str) -> str:
        """
        Query ROM information and return the decrypted JSON text.

        Args:
            codename: Device codename.
            system_version: Installed system version.
            android_version: Android major version.

        Returns:
            str: Decrypted JSON response.
        """
        user_id = self.credentials.user_id if self.credentials else ""
        params = build_rom_request(codename, system_version, android_version, user_id)
        logger.info(
            "Querying %s %s (Android %s) on port %s", codename, system_version, android_version, self.port
        )
        return self._makereq(encode_request(params))

    def query(self, codename: str, system_version: str, android_version: str) -> RomInfo:
        """
        Query and parse ROM information.

        Returns:
            RomInfo: Parsed response.

        Raises:
            RequestError: On transport or decryption failure.
            ResponseError.InvalidJSON: If the decrypted body is not a JSON object.
        """
        return parse_rom_info(self.get_rom_info(codename, system_version, android_version))
