# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors

"""
Account login for the extended OTA endpoint.

A logged-in account switches the update query to port 2, encrypts it with the
account ``ssecurity`` and authenticates it with the ``serviceToken`` cookie.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from .config import DEFAULT_CONFIG, OTAConfig
from .crypto import client_sign, password_hash
from .errors import AuthError, RequestError
from .messages import build_login_form

# Description the auth endpoint returns on success
SUCCESS_DESCRIPTION = "成功"
AUTH_PREFIX = "&&&START&&&"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginInfo:
    """Persisted account session.

    Attributes:
        account_type: "CN" or "GL"; selects the update endpoint.
        auth_result: "1" when the auth endpoint answered ``result: ok``.
        description: Auth endpoint description ("成功" on success).
        ssecurity: Base64 account key used to encrypt update queries.
        service_token: serviceToken cookie sent with update queries.
        user_id: Numeric account id.
    """

    account_type: str
    auth_result: str
    description: str
    ssecurity: str
    service_token: str
    user_id: str

    @property
    def is_valid(self) -> bool:
        """True when the stored session came from a successful login."""
        return self.description == SUCCESS_DESCRIPTION and bool(self.ssecurity)

    def to_dict(self) -> Dict[str, str]:
        """Serialize with the wire-style keys used in ``cookies.json``."""
        d = asdict(self)
        return {
            "accountType": d["account_type"],
            "authResult": d["auth_result"],
            "description": d["description"],
            "ssecurity": d["ssecurity"],
            "serviceToken": d["service_token"],
            "userId": d["user_id"],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoginInfo":
        """Build from a ``cookies.json`` mapping; missing keys become empty strings."""

        def get(key: str) -> str:
            value = data.get(key)
            return "" if value is None else str(value)

        return cls(
            account_type=get("accountType") or "CN",
            auth_result=get("authResult"),
            description=get("description"),
            ssecurity=get("ssecurity"),
            service_token=get("serviceToken"),
            user_id=get("userId"),
        )


def _parse_auth_body(text: str) -> Dict[str, Any]:
    body = text.strip()
    if body.startswith(AUTH_PREFIX):
        body = body[len(AUTH_PREFIX):]
    try:
        data = json.loads(body)
    except ValueError as ex:
        raise AuthError.LoginFailed("unreadable auth response") from ex
    if not isinstance(data, dict):
        raise AuthError.LoginFailed("unreadable auth response")
    return data


def _nonce_str(value: Any) -> str:
    # JSON numbers may decode as float; the signature needs the integer digits
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class AccountClient:
    """
    Account service client implementing the password login flow.

    Args:
        cfg: OTA configuration settings. Defaults to DEFAULT_CONFIG.
        session: Optional requests.Session for connection reuse.
    """

    def __init__(self, cfg: OTAConfig = DEFAULT_CONFIG, session: Optional[requests.Session] = None):
        self.cfg = cfg
        self.sess = session or requests.Session()

    def login(self, account: str, password: str, global_account: bool = False) -> LoginInfo:
        """
        Log in and obtain the service token for the update endpoint.

        Args:
            account: Account name, phone number or e-mail.
            password: Clear-text password (only its MD5 is sent).
            global_account: Use the global OTA service id and endpoint.

        Returns:
            LoginInfo: Session to persist and pass to OTAClient.

        Raises:
            AuthError.EmptyCredentials: If account or password is empty.
            AuthError.LoginFailed: If the service rejects the credentials.
            AuthError.MissingSecurity: If the auth response lacks a required field.
            AuthError.MissingServiceToken: If the redirect sets no serviceToken.
            RequestError.HTTPError: On non-success HTTP status.
        """
        if not account or not password:
            raise AuthError.EmptyCredentials()

        form = build_login_form(account, password_hash(password), global_account)
        r = self.sess.post(
            self.cfg.login_auth2_url,
            data=form,
            headers={"User-Agent": self.cfg.user_agent},
            timeout=self.cfg.request_timeout,
        )
        if not r.ok:
            raise RequestError.HTTPError(r.status_code, self.cfg.login_auth2_url)

        auth = _parse_auth_body(r.text)
        description = str(auth.get("description", ""))
        if description != SUCCESS_DESCRIPTION:
            logger.info("Login rejected for %s: %s", account, description or "no description")
            raise AuthError.LoginFailed(description)

        for key in ("ssecurity", "location", "nonce", "userId"):
            if auth.get(key) in (None, ""):
                raise AuthError.MissingSecurity(key)

        ssecurity = str(auth["ssecurity"])
        sign = client_sign(_nonce_str(auth["nonce"]), ssecurity)
        url = f"{auth['location']}&_userIdNeedEncrypt=true&clientSign={quote(sign, safe='')}"
        r2 = self.sess.get(
            url,
            headers={"User-Agent": self.cfg.user_agent},
            timeout=self.cfg.request_timeout,
        )
        token = r2.cookies.get("serviceToken") or self.sess.cookies.get("serviceToken")
        if not token:
            raise AuthError.MissingServiceToken()

        logger.info("Logged in as user %s (%s)", auth["userId"], "GL" if global_account else "CN")
        return LoginInfo(
            account_type="GL" if global_account else "CN",
            auth_result="1" if auth.get("result") == "ok" else "0",
            description=description,
            ssecurity=ssecurity,
            service_token=token,
            user_id=str(auth["userId"]),
        )
