"""
Hash primitives used by every key, address and signature operation.

SHA-256 and SHA-512 come from `hashlib`. RIPEMD-160 comes from pycryptodome,
since OpenSSL 3 builds of `hashlib` may not expose it.
"""

from __future__ import annotations

import hashlib
import hmac

from Crypto.Hash import RIPEMD160

__all__ = [
    "sha256",
    "sha256d",
    "sha512",
    "ripemd160",
    "hmac_sha256",
    "to_bytes",
]


def to_bytes(data: bytes | str) -> bytes:
    """Return `data` as bytes, encoding text as UTF-8."""
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def sha256(data: bytes | str) -> bytes:
    """SHA-256 digest (32 bytes)."""
    return hashlib.sha256(to_bytes(data)).digest()


def sha256d(data: bytes | str) -> bytes:
    """Double SHA-256, as used by base58check checksums."""
    return sha256(sha256(data))


def sha512(data: bytes | str) -> bytes:
    """SHA-512 digest (64 bytes)."""
    return hashlib.sha512(to_bytes(data)).digest()


def ripemd160(data: bytes | str) -> bytes:
    """RIPEMD-160 digest (20 bytes)."""
    return RIPEMD160.new(to_bytes(data)).digest()


def hmac_sha256(key: bytes, data: bytes) -> bytes:
    """HMAC-SHA256 of `data` under `key`."""
    return hmac.new(key, data, hashlib.sha256).digest()
