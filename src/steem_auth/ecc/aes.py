"""
Symmetric encryption between two key holders.

Both sides derive the same key material from ECDH and a 64-bit nonce:

    S            = ECDH(private_a, public_b)         (32-byte x-coordinate)
    key_material = sha512(le64(nonce) || S)
    key, iv      = key_material[0:32], key_material[32:48]
    checksum     = le32(sha256(key_material)[0:4])

The message is encrypted with AES-256-CBC and PKCS7 padding. The checksum
travels in the clear so the receiver can reject a wrong key pair before
decrypting. It is a sanity check, not a MAC.
"""

from __future__ import annotations

import logging
import os
import struct
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Final, Protocol, runtime_checkable

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from steem_auth.types import (
    ChecksumMismatchError,
    InvalidArgumentError,
    InvalidFormatError,
)

from .hash import sha256, sha512
from .key_private import PrivateKey
from .key_public import PublicKey

__all__ = [
    "Aes",
    "EncryptedMessage",
    "NonceSource",
    "UniqueNonceSource",
    "encrypt",
    "decrypt",
]

logger = logging.getLogger(__name__)

MAX_NONCE: Final = 2**64 - 1
"""Nonces are serialized as unsigned 64-bit integers."""

ENTROPY_MODULUS: Final = 0xFFFF
"""Range of the per-process counter packed into the low 16 bits of a nonce."""

AES_BLOCK_BITS: Final = 128
"""AES block size in bits, used for PKCS7 padding."""


@runtime_checkable
class NonceSource(Protocol):
    """Supplier of per-message nonces for `Aes.encrypt`."""

    def next_nonce(self) -> int:
        """Return a nonce that has not been handed out before."""
        ...


class UniqueNonceSource:
    """
    Nonces of the form `(milliseconds << 16) | counter`.

    The counter starts at a random 16-bit offset. Every nonce is strictly
    greater than the previous one from the same source, even if the clock
    stalls or steps backwards. Safe to share between threads.
    """

    def __init__(
        self,
        entropy: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if entropy is None:
            entropy = int.from_bytes(os.urandom(2), "big") % ENTROPY_MODULUS
        self._entropy = entropy
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_nonce(self) -> int:
        with self._lock:
            self._entropy += 1
            millis = int(self._clock() * 1000)
            nonce = (millis << 16) | (self._entropy % ENTROPY_MODULUS)
            nonce = max(nonce, self._last + 1)
            self._last = nonce
            return nonce


@dataclass(frozen=True, slots=True)
class EncryptedMessage:
    """Output of `Aes.encrypt`."""

    nonce: int
    """Nonce mixed into the key derivation."""

    message: str
    """Hex-encoded ciphertext."""

    checksum: int
    """Little-endian uint32 of the first four bytes of sha256(key_material)."""


def _parse_nonce(nonce: int | str | None) -> int:
    if nonce is None or nonce == "":
        raise InvalidArgumentError("nonce is required")
    if isinstance(nonce, bool):
        raise InvalidArgumentError("nonce should be an integer")
    if isinstance(nonce, str):
        try:
            nonce = int(nonce, 10)
        except ValueError as e:
            raise InvalidArgumentError(f"nonce should be a decimal integer: {nonce!r}") from e
    if not isinstance(nonce, int):
        raise InvalidArgumentError(f"nonce should be an integer, got {type(nonce).__name__}")
    if not (0 <= nonce <= MAX_NONCE):
        raise InvalidArgumentError(f"nonce does not fit in 64 bits: {nonce}")
    return nonce


def _key_material(private_key: PrivateKey, public_key: PublicKey, nonce: int) -> bytes:
    shared_secret = private_key.get_shared_secret(public_key)
    return sha512(struct.pack("<Q", nonce) + shared_secret)


def _checksum(key_material: bytes) -> int:
    return int.from_bytes(sha256(key_material)[:4], "little")


def _cipher(key_material: bytes) -> Cipher:
    return Cipher(algorithms.AES(key_material[:32]), modes.CBC(key_material[32:48]))


def _require_keys(private_key: PrivateKey | None, public_key: PublicKey | None) -> None:
    if private_key is None:
        raise InvalidArgumentError("private_key is required")
    if public_key is None:
        raise InvalidArgumentError("public_key is required")


class Aes:
    """
    ECDH-keyed AES-256-CBC.

    Args:
        nonce_source: Supplies nonces when `encrypt` is not given one.
            Defaults to a fresh `UniqueNonceSource`.
    """

    def __init__(self, nonce_source: NonceSource | None = None) -> None:
        self.nonce_source = nonce_source if nonce_source is not None else UniqueNonceSource()

    def unique_nonce(self) -> int:
        """Draw the next nonce from this channel's source."""
        return self.nonce_source.next_nonce()

    def encrypt(
        self,
        private_key: PrivateKey,
        public_key: PublicKey,
        message: bytes | str,
        nonce: int | str | None = None,
    ) -> EncryptedMessage:
        """
        Encrypt `message` from the holder of `private_key` to the holder of `public_key`.

        Args:
            private_key: Sender's private key.
            public_key: Recipient's public key.
            message: Plaintext; text is encoded as UTF-8.
            nonce: 64-bit nonce (int or decimal string). Drawn from the
                nonce source when omitted.

        Raises:
            InvalidArgumentError: If a key is missing or the nonce is invalid.
        """
        _require_keys(private_key, public_key)
        if isinstance(message, str):
            message = message.encode("utf-8")
        elif not isinstance(message, (bytes, bytearray)):
            raise InvalidArgumentError("message should be bytes or str")

        nonce_value = self.unique_nonce() if nonce is None else _parse_nonce(nonce)

        key_material = _key_material(private_key, public_key, nonce_value)
        padder = padding.PKCS7(AES_BLOCK_BITS).padder()
        padded = padder.update(bytes(message)) + padder.finalize()
        encryptor = _cipher(key_material).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        return EncryptedMessage(
            nonce=nonce_value,
            message=ciphertext.hex(),
            checksum=_checksum(key_material),
        )

    def decrypt(
        self,
        private_key: PrivateKey,
        public_key: PublicKey,
        nonce: int | str,
        message: str,
        checksum: int,
    ) -> bytes:
        """
        Decrypt a message produced by `encrypt` on the other side.

        Args:
            private_key: Recipient's private key.
            public_key: Sender's public key.
            nonce: Nonce used for encryption.
            message: Hex-encoded ciphertext.
            checksum: Checksum returned by `encrypt`.

        Raises:
            InvalidArgumentError: If any input is missing.
            ChecksumMismatchError: If the key pair or nonce do not match the sender's.
            InvalidFormatError: If the ciphertext is not hex or not validly padded.
        """
        _require_keys(private_key, public_key)
        nonce_value = _parse_nonce(nonce)
        if not message:
            raise InvalidArgumentError("message is required")
        if not isinstance(checksum, int) or isinstance(checksum, bool):
            raise InvalidArgumentError("checksum should be a number")

        key_material = _key_material(private_key, public_key, nonce_value)
        if _checksum(key_material) != checksum:
            logger.debug("Rejected message with nonce %d: checksum mismatch", nonce_value)
            raise ChecksumMismatchError("Invalid checksum")

        try:
            ciphertext = bytes.fromhex(message)
        except ValueError as e:
            raise InvalidFormatError(f"Invalid ciphertext hex: {e}") from e

        decryptor = _cipher(key_material).decryptor()
        try:
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = padding.PKCS7(AES_BLOCK_BITS).unpadder()
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            raise InvalidFormatError(f"Ciphertext could not be decrypted: {e}") from e


_default = Aes()


def encrypt(
    private_key: PrivateKey,
    public_key: PublicKey,
    message: bytes | str,
    nonce: int | str | None = None,
) -> EncryptedMessage:
    """`Aes.encrypt` on a channel with the default nonce source."""
    return _default.encrypt(private_key, public_key, message, nonce)


def decrypt(
    private_key: PrivateKey,
    public_key: PublicKey,
    nonce: int | str,
    message: str,
    checksum: int,
) -> bytes:
    """`Aes.decrypt` on a channel with the default nonce source."""
    return _default.decrypt(private_key, public_key, nonce, message, checksum)
