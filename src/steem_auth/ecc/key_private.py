"""
secp256k1 private keys.

A private key is a scalar d with 1 <= d < n. It is created from fresh
randomness, from a seed (brain key) hashed with SHA-256, or parsed from
Wallet Import Format:

    WIF = base58check(0x80 || d[32])
"""

from __future__ import annotations

from functools import cached_property
from typing import Final

from cryptography.hazmat.primitives.asymmetric import ec

from steem_auth.types import (
    Bytes32,
    InvalidDerivedKeyError,
    InvalidFormatError,
    InvalidLengthError,
    InvalidPointError,
    OutOfBoundsError,
    SteemAuthError,
)

from . import curve
from .base58 import base58check_decode, base58check_encode
from .hash import sha256
from .key_public import PublicKey

__all__ = [
    "PrivateKey",
    "WIF_VERSION",
]

WIF_VERSION: Final = 0x80
"""Version byte prefixed to the scalar in a WIF string."""


class PrivateKey:
    """
    A secp256k1 private scalar.

    Instances are immutable; the derived public key is computed once on demand.

    Attributes:
        d: The scalar.
    """

    def __init__(self, d: int) -> None:
        if not (1 <= d < curve.N):
            raise OutOfBoundsError("Private key must be in [1, n - 1]")
        self.d = d

    @classmethod
    def from_random(cls) -> PrivateKey:
        """Generate a fresh key from the operating system's randomness."""
        key = ec.generate_private_key(ec.SECP256K1())
        return cls(key.private_numbers().private_value)

    @classmethod
    def from_seed(cls, seed: str | bytes) -> PrivateKey:
        """
        Derive a key from seed material: d = sha256(seed).

        Raises:
            OutOfBoundsError: If the digest is zero or not below the curve order.
        """
        return cls(int.from_bytes(sha256(seed), "big"))

    @classmethod
    def from_buffer(cls, buffer: bytes) -> PrivateKey:
        """Decode a 32-byte big-endian scalar."""
        if len(buffer) != 32:
            raise InvalidLengthError("PrivateKey", expected=32, actual=len(buffer))
        return cls(int.from_bytes(buffer, "big"))

    def to_buffer(self) -> Bytes32:
        """The scalar as 32 big-endian bytes."""
        return Bytes32(self.d.to_bytes(32, "big"))

    @classmethod
    def from_hex(cls, value: str) -> PrivateKey:
        """Decode a hex-encoded 32-byte scalar."""
        try:
            buffer = bytes.fromhex(value)
        except ValueError as e:
            raise InvalidFormatError(f"Invalid private key hex: {e}") from e
        return cls.from_buffer(buffer)

    def to_hex(self) -> str:
        """Hex of `to_buffer()`."""
        return self.to_buffer().hex()

    @classmethod
    def from_wif(cls, wif: str) -> PrivateKey:
        """
        Parse a WIF string.

        Raises:
            InvalidChecksumError: If the trailing four checksum bytes mismatch.
            InvalidFormatError: If the string is not base58 or has the wrong version.
            InvalidLengthError: If the payload is not a version byte and 32-byte scalar.
        """
        payload = base58check_decode(wif)
        if len(payload) != 33:
            raise InvalidLengthError("WIF payload", expected=33, actual=len(payload))
        if payload[0] != WIF_VERSION:
            raise InvalidFormatError(
                f"Expected version {WIF_VERSION:#x}, instead got {payload[0]:#x}"
            )
        return cls.from_buffer(payload[1:])

    def to_wif(self) -> str:
        """Encode as WIF."""
        return base58check_encode(bytes([WIF_VERSION]) + self.to_buffer())

    @classmethod
    def from_string(cls, wif: str) -> PrivateKey:
        """Alias of `from_wif`."""
        return cls.from_wif(wif)

    def to_string(self) -> str:
        """Alias of `to_wif`."""
        return self.to_wif()

    @staticmethod
    def is_wif(text: str) -> bool:
        """True if `text` parses as a WIF private key."""
        try:
            PrivateKey.from_wif(text)
        except SteemAuthError:
            return False
        return True

    @cached_property
    def _key(self) -> ec.EllipticCurvePrivateKey:
        return ec.derive_private_key(self.d, ec.SECP256K1())

    def to_cryptography(self) -> ec.EllipticCurvePrivateKey:
        """Return the key as a `cryptography` object."""
        return self._key

    @cached_property
    def _public_key(self) -> PublicKey:
        return PublicKey.from_cryptography(self._key.public_key())

    def to_public(self) -> PublicKey:
        """Q = d*G."""
        return self._public_key

    def to_public_key(self) -> PublicKey:
        """Alias of `to_public`."""
        return self._public_key

    def get_shared_secret(self, public_key: PublicKey) -> Bytes32:
        """
        ECDH: the 32-byte x-coordinate of d * Q_peer.

        Raises:
            InvalidPointError: If the peer key is the null key.
        """
        if public_key.is_null:
            raise InvalidPointError("Cannot agree on a secret with the null public key")
        return Bytes32(self._key.exchange(ec.ECDH(), public_key.to_cryptography()))

    def child(self, offset: bytes) -> PrivateKey:
        """
        Derive the private counterpart of `PublicKey.child`.

        d' = (d + c) mod n with c = sha256(Q || offset), so that
        `parent.child(o).to_public() == parent.to_public().child(o)`.

        Raises:
            OutOfBoundsError: If c is not below the curve order.
            InvalidDerivedKeyError: If d' is zero.
        """
        offset = Bytes32(offset)
        c = int.from_bytes(sha256(self.to_public().to_buffer() + offset), "big")
        if c >= curve.N:
            raise OutOfBoundsError("Child offset went out of bounds, try again")

        derived = (self.d + c) % curve.N
        if derived == 0:
            raise InvalidDerivedKeyError("Child offset derived to an invalid key, try again")
        return PrivateKey(derived)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PrivateKey):
            return NotImplemented
        return self.d == other.d

    def __hash__(self) -> int:
        return hash(("PrivateKey", self.d))

    def __repr__(self) -> str:
        return f"PrivateKey({self.to_public()})"
