# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors
"""
OTA crypto helpers: AES CBC utilities, padding, request encoding and account hashes.

Provides small helpers used by the OTA client and the account login flow.
"""

import base64
import hashlib

from Crypto.Cipher import AES

from .config import DEFAULT_CONFIG

IV: bytes = DEFAULT_CONFIG.iv.encode()


def pkcs_pad(data: bytes) -> bytes:
    """
    Apply PKCS#7 padding to reach a 16-byte boundary.

    Args:
        data: Raw bytes to pad.

    Returns:
        Padded bytes.
    """
    pad_len = 16 - (len(data) % 16)
    return data + bytes([pad_len]) * pad_len


def pkcs_unpad(data: bytes) -> bytes:
    """
    Remove PKCS#7 padding.

    Args:
        data: Padded bytes.

    Returns:
        Original unpadded bytes.

    Raises:
        ValueError: If the padding byte is out of range.
    """
    if not data or not 1 <= data[-1] <= 16:
        raise ValueError("invalid PKCS#7 padding")
    return data[: -data[-1]]


def aes_cbc_encrypt(inp: bytes, key: bytes, iv: bytes = IV) -> bytes:
    """
    Encrypt data using AES-CBC with the fixed service IV.

    Args:
        inp: Plaintext bytes.
        key: AES key (16/24/32 bytes).
        iv: 16-byte initialization vector.

    Returns:
        Ciphertext bytes.
    """
    cipher = AES.new(key, AES.MODE_CBC, iv)
    return cipher.encrypt(pkcs_pad(inp))


def aes_cbc_decrypt(inp: bytes, key: bytes, iv: bytes = IV) -> bytes:
    """
    Decrypt AES-CBC ciphertext and remove PKCS#7 padding.

    Args:
        inp: Ciphertext bytes.
        key: AES key used to encrypt.
        iv: 16-byte initialization vector.

    Returns:
        Plaintext bytes.
    """
    cipher = AES.new(key, AES.MODE_CBC, iv)
    return pkcs_unpad(cipher.decrypt(inp))


def encrypt_request(plaintext: str, key: bytes) -> str:
    """
    Encrypt a JSON request body for the update endpoint.

    The result is the URL-safe base64 encoding of AES-CBC(plaintext).

    Args:
        plaintext: JSON request text.
        key: Request key (anonymous key or decoded account ssecurity).

    Returns:
        URL-safe base64 string, padded.
    """
    raw = aes_cbc_encrypt(plaintext.encode("utf-8"), key)
    return base64.urlsafe_b64encode(raw).decode()


def decrypt_response(text: str, key: bytes) -> str:
    """
    Decrypt a base64 response body returned by the update endpoint.

    Line breaks and surrounding whitespace are ignored; both the standard and
    URL-safe alphabets are accepted.

    Args:
        text: Base64-encoded ciphertext from server.
        key: Key the request was encrypted with.

    Returns:
        Decrypted UTF-8 text.

    Raises:
        ValueError: If the body is not valid base64 or the padding is invalid.
    """
    compact = "".join(text.split()).replace("-", "+").replace("_", "/")
    compact += "=" * (-len(compact) % 4)
    data = base64.b64decode(compact)
    if not data or len(data) % 16:
        raise ValueError("response is not a whole number of AES blocks")
    return aes_cbc_decrypt(data, key).decode("utf-8")


def security_key(ssecurity: str) -> bytes:
    """Decode the base64 account ``ssecurity`` into an AES key."""
    return base64.b64decode(ssecurity)


def password_hash(password: str) -> str:
    """
    Hash an account password the way the login endpoint expects.

    Args:
        password: Clear-text password.

    Returns:
        Upper-case hexadecimal MD5 digest.
    """
    return hashlib.md5(password.encode("utf-8")).hexdigest().upper()


def client_sign(nonce: str, ssecurity: str) -> str:
    """
    Compute the clientSign value appended to the login redirect location.

    Args:
        nonce: Nonce returned by the auth endpoint.
        ssecurity: Account security token returned by the auth endpoint.

    Returns:
        Base64-encoded SHA1 of ``nonce=<nonce>&<ssecurity>``.
    """
    digest = hashlib.sha1(f"nonce={nonce}&{ssecurity}".encode("utf-8")).digest()
    return base64.b64encode(digest).decode()
