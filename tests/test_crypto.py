import base64
import hashlib

import pytest

from ota.crypto import (
    client_sign,
    decrypt_response,
    encrypt_request,
    password_hash,
    pkcs_pad,
    pkcs_unpad,
    security_key,
)

KEY = b"miuiotavalided11"


def test_pkcs_pad_always_adds_a_block_boundary():
    assert len(pkcs_pad(b"")) == 16
    assert pkcs_pad(b"a" * 16)[-16:] == bytes([16]) * 16
    assert pkcs_unpad(pkcs_pad(b"hello")) == b"hello"


def test_pkcs_unpad_rejects_bad_padding():
    with pytest.raises(ValueError):
        pkcs_unpad(b"a" * 15 + b"\x00")


def test_request_is_url_safe_and_decrypts():
    text = '{"d":"houji","ov":"OS1.0.5.0.UNCCNXM"}' * 5
    enc = encrypt_request(text, KEY)
    assert "+" not in enc and "/" not in enc
    assert decrypt_response(enc, KEY) == text


def test_decrypt_response_ignores_line_breaks():
    enc = encrypt_request("x" * 100, KEY)
    wrapped = "\n".join(enc[i : i + 20] for i in range(0, len(enc), 20)) + "\n"
    assert decrypt_response(wrapped, KEY) == "x" * 100


def test_decrypt_response_rejects_partial_blocks():
    with pytest.raises(ValueError):
        decrypt_response("abcd", KEY)


def test_password_hash_is_upper_md5():
    assert password_hash("password") == "5F4DCC3B5AA765D61D8327DEB882CF99"


def test_client_sign_matches_sha1_of_nonce_and_security():
    expected = base64.b64encode(hashlib.sha1(b"nonce=42&c2VjcmV0").digest()).decode()
    assert client_sign("42", "c2VjcmV0") == expected


def test_security_key_decodes_base64():
    assert security_key(base64.b64encode(b"k" * 16).decode()) == b"k" * 16
