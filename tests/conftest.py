import base64
import json

import pytest
import requests

import app.cli
import download.config
import download.credentials
import download.db
import download.service
from download.config import resolve_paths
from ota.crypto import aes_cbc_decrypt, aes_cbc_encrypt

ANON_KEY = b"miuiotavalided11"
ACCOUNT_KEY = b"0123456789abcdef"
ACCOUNT_SSECURITY = base64.b64encode(ACCOUNT_KEY).decode()

CURRENT_MD5 = "0f343b0931126a20f133d67c2b018a3b"
LATEST_MD5 = "9e107d9d372bb6826bd81d3542a419d6"


class FakeResponse:
    def __init__(self, text="", status_code=200, content=b"", headers=None, cookies=None):
        self.text = text
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}
        self.cookies = cookies or {}

    @property
    def ok(self):
        return self.status_code < 400

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i : i + chunk_size]


class FakeUpdateSession:
    """Stands in for the update endpoint: decrypts queries, encrypts answers."""

    def __init__(self, payload=None, key=ANON_KEY, status_code=200, body=None):
        self.payload = payload if payload is not None else make_payload()
        self.key = key
        self.status_code = status_code
        self.body = body
        self.calls = []
        self.cookies = {}

    def post(self, url, data=None, headers=None, cookies=None, timeout=None):
        q = base64.urlsafe_b64decode(data["q"])
        request = json.loads(aes_cbc_decrypt(q, self.key, b"0102030405060708").decode())
        self.calls.append({"url": url, "data": data, "cookies": cookies, "request": request})
        if self.body is not None:
            return FakeResponse(text=self.body, status_code=self.status_code)
        plain = json.dumps(self.payload, ensure_ascii=False).encode()
        raw = aes_cbc_encrypt(plain, self.key, b"0102030405060708")
        # Server answers with line-wrapped standard base64
        return FakeResponse(text=base64.encodebytes(raw).decode(), status_code=self.status_code)


class FakeDownloadSession:
    def __init__(self, content=b"", status_code=200, honour_range=True, send_length=True):
        self.content = content
        self.status_code = status_code
        self.honour_range = honour_range
        self.send_length = send_length
        self.calls = []

    def _response(self, status_code, body):
        headers = {"Content-Length": str(len(body))} if self.send_length else {}
        return FakeResponse(status_code=status_code, content=body, headers=headers)

    def get(self, url, headers=None, stream=False, timeout=None):
        headers = headers or {}
        self.calls.append({"url": url, "headers": headers})
        rng = headers.get("Range")
        if rng and self.honour_range:
            start = int(rng.split("=")[1].rstrip("-"))
            if start >= len(self.content):
                return FakeResponse(status_code=416)
            return self._response(206, self.content[start:])
        return self._response(self.status_code, self.content)


def make_rom(version="OS1.0.5.0.UNCCNXM", md5=CURRENT_MD5, filename=None, **extra):
    rom = {
        "bigversion": "816",
        "branch": "F",
        "changelog": {
            "System": {"txt": ["Improved stability", "Fixed battery drain"]},
            "Camera": {"txt": ["New portrait mode"]},
        },
        "codebase": "14",
        "device": "houji",
        "filename": filename or f"miui_HOUJI_{version}_{md5[:10]}_14.0.zip",
        "filesize": "5.6G",
        "md5": md5,
        "name": "Xiaomi 14",
        "type": "rom",
        "version": version,
    }
    rom.update(extra)
    return rom


def make_payload(current=None, latest=None, auth_result=1):
    current = current if current is not None else make_rom()
    latest = latest if latest is not None else make_rom(version="OS1.0.8.0.UNCCNXM", md5=LATEST_MD5)
    return {"AuthResult": auth_result, "CurrentRom": current, "LatestRom": latest, "Icon": {}}


@pytest.fixture(autouse=True)
def data_dir(tmp_path, monkeypatch):
    """Redirect every data path into a temporary directory with a fresh database."""
    paths = resolve_paths(tmp_path / "data")
    for module in (download.config, download.db, download.credentials, download.service, app.cli):
        monkeypatch.setattr(module, "PATHS", paths)
    download.db.init_db()
    return paths
