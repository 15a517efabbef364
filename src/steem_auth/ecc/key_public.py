"""
secp256k1 public keys and their text encodings.

A public key string is the network prefix followed by
base58(pubkey || ripemd160(pubkey)[:4]). The all-zero 33-byte buffer is the
null key, meaning "no key". It round-trips through every encoding without
being decoded as a curve point.
"""

from __future__ import annotations

from typing import Final

from cryptography.hazmat.primitives.asymmetric import ec

from steem_auth.config import address_prefix as resolve_prefix
from steem_auth.types import (
    Bytes20,
    Bytes32,
    InvalidDerivedKeyError,
    InvalidFormatError,
    InvalidLengthError,
    InvalidPointError,
    OutOfBoundsError,
    PrefixMismatchError,
    SteemAuthError,
)

from . import curve
from .base58 import base58check_encode, ripemd160_check_decode, ripemd160_check_encode
from .hash import ripemd160, sha256, sha512

__all__ = [
    "PublicKey",
    "NULL_KEY_BYTES",
]

NULL_KEY_BYTES: Final = b"\x00" * 33
"""Encoding of the null public key."""

PTS_ADDRESS_VERSION: Final = 0x38
"""Version byte of PTS-style addresses."""


class PublicKey:
    """
    A secp256k1 point, or the null key.

    Attributes:
        point: Affine coordinates, or None for the null key.
        compressed: Whether `to_buffer` emits the 33-byte SEC1 form by default.
    """

    __slots__ = ("point", "compressed", "_pubdata")

    def __init__(self, point: curve.Point | None, compressed: bool = True) -> None:
        self.point = point
        self.compressed = compressed
        self._pubdata: str | None = None

    @classmethod
    def null(cls) -> PublicKey:
        """The null key."""
        return cls(None)

    @property
    def is_null(self) -> bool:
        """True for the all-zero sentinel key."""
        return self.point is None

    @classmethod
    def from_point(cls, point: curve.Point, compressed: bool = True) -> PublicKey:
        """Wrap an affine point."""
        return cls(point, compressed)

    @classmethod
    def from_cryptography(cls, key: ec.EllipticCurvePublicKey) -> PublicKey:
        """Wrap a `cryptography` secp256k1 public key."""
        numbers = key.public_numbers()
        return cls((numbers.x, numbers.y))

    def to_cryptography(self) -> ec.EllipticCurvePublicKey:
        """
        Return the key as a `cryptography` object.

        Raises:
            InvalidPointError: For the null key.
        """
        if self.point is None:
            raise InvalidPointError("The null public key has no curve point")
        return ec.EllipticCurvePublicNumbers(
            self.point[0], self.point[1], ec.SECP256K1()
        ).public_key()

    @classmethod
    def from_buffer(cls, buffer: bytes) -> PublicKey:
        """
        Decode a SEC1 encoded point.

        The all-zero 33-byte buffer decodes to the null key.

        Raises:
            InvalidLengthError: If the buffer is neither 33 nor 65 bytes.
            InvalidPointError: If the bytes are not a point on secp256k1.
        """
        buffer = bytes(buffer)
        if buffer == NULL_KEY_BYTES:
            return cls.null()
        if len(buffer) not in (33, 65):
            raise InvalidLengthError("PublicKey", expected=(33, 65), actual=len(buffer))
        try:
            key = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), buffer)
        except ValueError as e:
            raise InvalidPointError(f"Invalid public key encoding: {e}") from e
        numbers = key.public_numbers()
        return cls((numbers.x, numbers.y), compressed=len(buffer) == 33)

    def to_buffer(self, compressed: bool | None = None) -> bytes:
        """Encode as SEC1 bytes, or the 33-byte sentinel for the null key."""
        if self.point is None:
            return NULL_KEY_BYTES
        if compressed is None:
            compressed = self.compressed
        return curve.encode_point(self.point, compressed)

    @classmethod
    def from_hex(cls, value: str) -> PublicKey:
        """Decode a hex SEC1 encoding; the empty string is the null key."""
        try:
            buffer = bytes.fromhex(value)
        except ValueError as e:
            raise InvalidFormatError(f"Invalid public key hex: {e}") from e
        if not buffer:
            return cls.null()
        return cls.from_buffer(buffer)

    def to_hex(self) -> str:
        """Hex of `to_buffer()`."""
        return self.to_buffer().hex()

    def to_uncompressed(self) -> PublicKey:
        """The same point, serialized in 65-byte form by default."""
        return PublicKey(self.point, compressed=False)

    def to_public_key_string(self, address_prefix: str | None = None) -> str:
        """
        Encode as `<prefix><base58(pubkey || ripemd160(pubkey)[:4])>`.

        Args:
            address_prefix: Overrides the process-wide prefix.
        """
        if self._pubdata is None:
            self._pubdata = ripemd160_check_encode(self.to_buffer())
        return resolve_prefix(address_prefix) + self._pubdata

    def to_string(self, address_prefix: str | None = None) -> str:
        """Alias of `to_public_key_string`."""
        return self.to_public_key_string(address_prefix)

    def __str__(self) -> str:
        return self.to_public_key_string()

    @classmethod
    def from_string_or_raise(cls, public_key: str, address_prefix: str | None = None) -> PublicKey:
        """
        Parse a prefixed public key string.

        Raises:
            PrefixMismatchError: If the string does not start with the prefix.
            ChecksumMismatchError: If the RIPEMD-160 checksum does not match.
            InvalidFormatError: If the body is not base58.
            InvalidPointError: If the key bytes are not a curve point.
        """
        prefix = resolve_prefix(address_prefix)
        actual = public_key[: len(prefix)]
        if actual != prefix:
            raise PrefixMismatchError(prefix, actual)
        key = ripemd160_check_decode(public_key[len(prefix) :])
        return cls.from_buffer(key)

    @classmethod
    def from_string(cls, public_key: str, address_prefix: str | None = None) -> PublicKey | None:
        """Parse a prefixed public key string, returning None if it is invalid."""
        try:
            return cls.from_string_or_raise(public_key, address_prefix)
        except SteemAuthError:
            return None

    @classmethod
    def from_string_hex(cls, value: str) -> PublicKey | None:
        """Parse a hex-encoded public key string; None if it is invalid."""
        try:
            text = bytes.fromhex(value).decode("utf-8")
        except ValueError:
            return None
        return cls.from_string(text)

    def to_blockchain_address(self) -> Bytes20:
        """RIPEMD-160 of the SHA-512 of the key: the 20-byte on-chain address."""
        return Bytes20(ripemd160(sha512(self.to_buffer())))

    def to_address_string(self, address_prefix: str | None = None) -> str:
        """Prefixed base58 of the blockchain address with a RIPEMD-160 checksum."""
        addy = self.to_blockchain_address()
        return resolve_prefix(address_prefix) + ripemd160_check_encode(addy)

    def to_pts_address(self) -> str:
        """Base58check of version 0x38 and the hash160 of the key (PTS-style address)."""
        addy = ripemd160(sha256(self.to_buffer()))
        return base58check_encode(bytes([PTS_ADDRESS_VERSION]) + addy)

    def child(self, offset: bytes) -> PublicKey:
        """
        Derive a child key: Q' = Q + c*G with c = sha256(Q || offset).

        Args:
            offset: 32-byte derivation offset.

        Raises:
            OutOfBoundsError: If c is not below the curve order.
            InvalidDerivedKeyError: If Q' is the point at infinity.
        """
        offset = Bytes32(offset)
        if self.point is None:
            raise InvalidPointError("Cannot derive a child of the null public key")

        c = int.from_bytes(sha256(self.to_buffer() + offset), "big")
        if c >= curve.N:
            raise OutOfBoundsError("Child offset went out of bounds, try again")

        derived = curve.point_add(self.point, curve.point_mul(c, curve.G))
        if derived is None:
            raise InvalidDerivedKeyError("Child offset derived to an invalid key, try again")
        return PublicKey.from_point(derived)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PublicKey):
            return NotImplemented
        return self.point == other.point

    def __hash__(self) -> int:
        return hash(self.point)

    def __repr__(self) -> str:
        return f"PublicKey({self.to_hex()})"
