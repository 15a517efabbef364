"""
Address encodings derived from public keys.

Two legacy families are supported and are not interchangeable:

1. Direct: `<prefix>base58(pubkey || ripemd160(pubkey)[:4])`. This is the
   public key string itself.
2. Derived: the key is hashed to a 20-byte address

       h    = ripemd160(sha256(pubkey))
       addy = ripemd160(version || h || sha256d(version || h)[:4])

   and rendered as `<prefix>base58(addy || ripemd160(addy)[:4])`.
   The outer RIPEMD-160 over the already checksummed buffer is what the
   chain expects and must be kept.
"""

from __future__ import annotations

from typing import Final

from steem_auth.config import address_prefix as resolve_prefix
from steem_auth.types import (
    Bytes20,
    ChecksumMismatchError,
    InvalidLengthError,
    PrefixMismatchError,
)

from .base58 import CHECKSUM_LENGTH, Base58, ripemd160_check_decode, ripemd160_check_encode
from .hash import ripemd160, sha256, sha256d
from .key_public import PublicKey

__all__ = [
    "Address",
    "DERIVED_ADDRESS_VERSION",
]

DERIVED_ADDRESS_VERSION: Final = 56
"""Default version byte mixed into derived addresses."""


class Address:
    """
    A 20-byte derived address.

    Attributes:
        addy: The address bytes.
    """

    __slots__ = ("addy",)

    def __init__(self, addy: bytes) -> None:
        self.addy = Bytes20(addy)

    @classmethod
    def from_public(
        cls,
        public_key: PublicKey,
        compressed: bool = True,
        version: int = DERIVED_ADDRESS_VERSION,
    ) -> Address:
        """Derive the address of a public key."""
        rep = ripemd160(sha256(public_key.to_buffer(compressed)))
        addr = bytes([version & 0xFF]) + rep
        check = sha256d(addr)[:CHECKSUM_LENGTH]
        return cls(ripemd160(addr + check))

    @staticmethod
    def from_public_key(
        public_key: PublicKey, compressed: bool = True, address_prefix: str | None = None
    ) -> str:
        """Direct address of a public key: the prefixed, checksummed key bytes."""
        pub_buffer = public_key.to_buffer(compressed)
        return resolve_prefix(address_prefix) + ripemd160_check_encode(pub_buffer)

    @classmethod
    def from_string(cls, address: str, address_prefix: str | None = None) -> Address:
        """
        Parse a derived address string.

        Raises:
            PrefixMismatchError: If the string does not start with the prefix.
            ChecksumMismatchError: If the checksum does not match.
            InvalidLengthError: If the payload is not 20 bytes.
        """
        prefix = resolve_prefix(address_prefix)
        actual = address[: len(prefix)]
        if actual != prefix:
            raise PrefixMismatchError(prefix, actual)
        payload = ripemd160_check_decode(address[len(prefix) :])
        if len(payload) != Bytes20.LENGTH:
            raise InvalidLengthError("Address", expected=Bytes20.LENGTH, actual=len(payload))
        return cls(payload)

    @staticmethod
    def from_buffer(buffer: bytes, address_prefix: str | None = None) -> str:
        """
        Render an already checksummed `addy || checksum` buffer as a string.

        Raises:
            ChecksumMismatchError: If the trailing checksum does not match.
        """
        payload, checksum = buffer[:-CHECKSUM_LENGTH], buffer[-CHECKSUM_LENGTH:]
        if ripemd160(payload)[:CHECKSUM_LENGTH] != checksum:
            raise ChecksumMismatchError("Invalid address checksum")
        return resolve_prefix(address_prefix) + Base58.encode(payload)

    def to_buffer(self) -> Bytes20:
        """The 20 address bytes."""
        return self.addy

    @property
    def version(self) -> int:
        """First byte of the address."""
        return self.addy[0]

    def to_string(self, address_prefix: str | None = None) -> str:
        """Render as `<prefix>base58(addy || ripemd160(addy)[:4])`."""
        return resolve_prefix(address_prefix) + ripemd160_check_encode(self.addy)

    def __str__(self) -> str:
        return self.to_string()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self.addy == other.addy

    def __hash__(self) -> int:
        return hash(self.addy)

    def __repr__(self) -> str:
        return f"Address({self.addy.hex()})"
