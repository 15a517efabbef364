"""
Base58 and base58check text encodings.

The alphabet is Bitcoin's, which leaves out the look-alike characters 0, O, I and l.
Base58check appends the first four bytes of a double SHA-256 of the payload.
Keys and addresses use a second framing whose checksum is a truncated RIPEMD-160.
"""

from __future__ import annotations

from typing import Final

from steem_auth.types import ChecksumMismatchError, InvalidFormatError

from .hash import ripemd160, sha256d

__all__ = [
    "Base58",
    "base58check_encode",
    "base58check_decode",
    "ripemd160_check_encode",
    "ripemd160_check_decode",
]

CHECKSUM_LENGTH: Final = 4
"""Number of checksum bytes appended by base58check."""


class Base58:
    """
    Base58 encoding/decoding (Bitcoin-style alphabet).

    The alphabet is: 123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz
    """

    ALPHABET: Final[str] = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
    """Base58 alphabet (Bitcoin style, excludes 0, O, I, l)."""

    @classmethod
    def encode(cls, data: bytes) -> str:
        """
        Encode bytes as Base58 string.

        Leading zero bytes become leading '1' characters.
        """
        leading_zeros = len(data) - len(data.lstrip(b"\x00"))

        num = int.from_bytes(data, "big")
        result: list[str] = []
        while num > 0:
            num, remainder = divmod(num, 58)
            result.append(cls.ALPHABET[remainder])

        result.extend([cls.ALPHABET[0]] * leading_zeros)
        return "".join(reversed(result))

    @classmethod
    def decode(cls, s: str) -> bytes:
        """
        Decode Base58 string to bytes.

        Leading '1' characters become leading zero bytes.

        Raises:
            InvalidFormatError: If the string contains a character outside the alphabet.
        """
        leading_ones = len(s) - len(s.lstrip("1"))

        num = 0
        for char in s:
            index = cls.ALPHABET.find(char)
            if index < 0:
                raise InvalidFormatError(f"Invalid Base58 character: {char!r}")
            num = num * 58 + index

        result = b"" if num == 0 else num.to_bytes((num.bit_length() + 7) // 8, "big")
        return b"\x00" * leading_ones + result


def base58check_encode(payload: bytes) -> str:
    """Encode `payload` followed by its double SHA-256 checksum."""
    return Base58.encode(payload + sha256d(payload)[:CHECKSUM_LENGTH])


def base58check_decode(value: str) -> bytes:
    """
    Decode a base58check string and return the payload without its checksum.

    Raises:
        InvalidFormatError: If the string is not base58 or too short to hold a checksum.
        ChecksumMismatchError: If the checksum does not match the payload.
    """
    data = Base58.decode(value)
    if len(data) <= CHECKSUM_LENGTH:
        raise InvalidFormatError(f"Base58check value too short: {len(data)} bytes")
    payload, checksum = data[:-CHECKSUM_LENGTH], data[-CHECKSUM_LENGTH:]
    if sha256d(payload)[:CHECKSUM_LENGTH] != checksum:
        raise ChecksumMismatchError("Invalid base58check checksum")
    return payload


def ripemd160_check_encode(payload: bytes) -> str:
    """Encode `payload` followed by the first four bytes of its RIPEMD-160."""
    return Base58.encode(payload + ripemd160(payload)[:CHECKSUM_LENGTH])


def ripemd160_check_decode(value: str) -> bytes:
    """
    Decode a RIPEMD-160 checksummed base58 string and return the payload.

    Public key strings and addresses use this framing instead of base58check.

    Raises:
        InvalidFormatError: If the string is not base58 or too short to hold a checksum.
        ChecksumMismatchError: If the checksum does not match the payload.
    """
    data = Base58.decode(value)
    if len(data) <= CHECKSUM_LENGTH:
        raise InvalidFormatError(f"Checksummed value too short: {len(data)} bytes")
    payload, checksum = data[:-CHECKSUM_LENGTH], data[-CHECKSUM_LENGTH:]
    if ripemd160(payload)[:CHECKSUM_LENGTH] != checksum:
        raise ChecksumMismatchError("Checksum did not match")
    return payload
