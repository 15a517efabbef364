"""
Recoverable, canonical ECDSA signatures over secp256k1.

Wire layout (65 bytes, hex-encoded for transport):

    header[1] || r[32] || s[32],   header = 27 + 4 (compressed) + recovery_id

The recovery id lets a verifier rebuild the signer's public key from the
digest and the signature alone. Signing is deterministic (RFC 6979) and only
returns signatures the chain accepts as canonical: s is at most n/2, and
both r and s encode to exactly 32 DER bytes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed, encode_dss_signature

from steem_auth import metrics
from steem_auth.types import (
    Bytes65,
    InvalidFormatError,
    InvalidLengthError,
    InvalidPointError,
)

from . import curve
from .hash import sha256
from .key_private import PrivateKey
from .key_public import PublicKey

__all__ = [
    "Signature",
    "SIGNATURE_SIZE",
]

logger = logging.getLogger(__name__)

SIGNATURE_SIZE: Final = 65
"""Serialized signature size: header byte, r and s."""

DIGEST_SIZE: Final = 32
"""Signatures are always computed over a 32-byte digest."""

HEADER_BASE: Final = 27
"""Offset added to the recovery id in the header byte."""

COMPRESSED_FLAG: Final = 4
"""Header bit marking a signature made by a compressed public key."""


def _as_private_key(private_key: PrivateKey | str) -> PrivateKey:
    if isinstance(private_key, str):
        return PrivateKey.from_wif(private_key)
    return private_key


def _is_canonical_scalar(value: bytes) -> bool:
    # Top bit clear and no superfluous leading zero in the DER encoding.
    return not (value[0] & 0x80) and not (value[0] == 0 and not (value[1] & 0x80))


@dataclass(frozen=True, slots=True)
class Signature:
    """
    An ECDSA signature with its public-key recovery id.

    Attributes:
        r: Signature scalar r.
        s: Signature scalar s.
        recovery_id: Which candidate nonce point R was used (0..3).
        compressed: Whether the signer's key is recovered in compressed form.
    """

    r: int
    s: int
    recovery_id: int
    compressed: bool = True

    @classmethod
    def sign_buffer_sha256(
        cls, digest: bytes, private_key: PrivateKey | str
    ) -> Signature:
        """
        Sign a 32-byte digest.

        Args:
            digest: SHA-256 (or other 32-byte) digest of the message.
            private_key: Signing key, or its WIF encoding.

        Raises:
            InvalidLengthError: If the digest is not 32 bytes.
        """
        if len(digest) != DIGEST_SIZE:
            raise InvalidLengthError("Digest", expected=DIGEST_SIZE, actual=len(digest))
        key = _as_private_key(private_key)
        e = int.from_bytes(digest, "big")

        attempt = 0
        while True:
            # Later attempts feed the counter to RFC 6979 as additional data,
            # so each one gets a fresh but still deterministic nonce.
            extra = attempt.to_bytes(32, "big") if attempt else b""
            attempt += 1
            if attempt % 10 == 0:
                logger.debug("%d attempts to find canonical signature", attempt)

            k = curve.deterministic_k(digest, key.d, extra)
            big_r = curve.point_mul(k, curve.G)
            if big_r is None:
                continue
            r = big_r[0] % curve.N
            if r == 0:
                continue
            s = curve.modinv(k, curve.N) * (e + r * key.d) % curve.N
            if s == 0:
                continue

            recovery_id = (big_r[1] & 1) | (2 if big_r[0] >= curve.N else 0)
            if s > curve.HALF_N:
                s = curve.N - s
                recovery_id ^= 1

            signature = cls(r=r, s=s, recovery_id=recovery_id)
            if signature.is_canonical():
                metrics.signatures_created.inc()
                metrics.signing_attempts.observe(attempt)
                return signature

    @classmethod
    def sign_buffer(cls, buffer: bytes | str, private_key: PrivateKey | str) -> Signature:
        """Hash `buffer` with SHA-256 and sign the digest."""
        return cls.sign_buffer_sha256(sha256(buffer), private_key)

    @classmethod
    def sign_hex(cls, hex_buffer: str, private_key: PrivateKey | str) -> Signature:
        """Sign the bytes encoded by `hex_buffer`."""
        return cls.sign_buffer(bytes.fromhex(hex_buffer), private_key)

    def is_canonical(self) -> bool:
        """True if the chain would accept this signature's encoding."""
        if self.s > curve.HALF_N:
            return False
        return _is_canonical_scalar(self.r.to_bytes(32, "big")) and _is_canonical_scalar(
            self.s.to_bytes(32, "big")
        )

    def verify_hash(self, digest: bytes, public_key: PublicKey) -> bool:
        """
        Check the ECDSA equation for a 32-byte digest and a known public key.

        Returns False for a wrong signature or the null key; never raises for them.

        Raises:
            InvalidLengthError: If the digest is not 32 bytes.
        """
        if len(digest) != DIGEST_SIZE:
            raise InvalidLengthError("Digest", expected=DIGEST_SIZE, actual=len(digest))
        if public_key.is_null:
            return False

        der_signature = encode_dss_signature(self.r, self.s)
        try:
            public_key.to_cryptography().verify(
                der_signature, bytes(digest), ec.ECDSA(Prehashed(hashes.SHA256()))
            )
            return True
        except InvalidSignature:
            return False

    def verify_buffer(self, buffer: bytes | str, public_key: PublicKey) -> bool:
        """Hash `buffer` with SHA-256 and verify against the digest."""
        return self.verify_hash(sha256(buffer), public_key)

    def recover_public_key(self, digest: bytes) -> PublicKey:
        """
        Rebuild the signer's public key from the digest.

        Raises:
            InvalidPointError: If no curve point matches the recovery id.
        """
        if len(digest) != DIGEST_SIZE:
            raise InvalidLengthError("Digest", expected=DIGEST_SIZE, actual=len(digest))
        point = curve.recover_point(digest, self.r, self.s, self.recovery_id)
        if point is None:
            raise InvalidPointError("Signature does not recover to a valid public key")
        return PublicKey.from_point(point, compressed=self.compressed)

    def recover_public_key_from_buffer(self, buffer: bytes | str) -> PublicKey:
        """Recover the signer of the SHA-256 of `buffer`."""
        return self.recover_public_key(sha256(buffer))

    @property
    def header(self) -> int:
        """The leading byte of the serialized form."""
        return HEADER_BASE + (COMPRESSED_FLAG if self.compressed else 0) + self.recovery_id

    @classmethod
    def from_buffer(cls, buffer: bytes) -> Signature:
        """
        Decode the 65-byte layout.

        Raises:
            InvalidLengthError: If the buffer is not 65 bytes.
            InvalidFormatError: If the header or scalars are out of range.
        """
        if len(buffer) != SIGNATURE_SIZE:
            raise InvalidLengthError("Signature", expected=SIGNATURE_SIZE, actual=len(buffer))

        flags = buffer[0] - HEADER_BASE
        if not (0 <= flags < 2 * COMPRESSED_FLAG):
            raise InvalidFormatError(f"Invalid signature header byte: {buffer[0]}")

        r = int.from_bytes(buffer[1:33], "big")
        s = int.from_bytes(buffer[33:65], "big")
        if not (0 < r < curve.N and 0 < s < curve.N):
            raise InvalidFormatError("Signature integers out of range")

        return cls(
            r=r,
            s=s,
            recovery_id=flags & 3,
            compressed=bool(flags & COMPRESSED_FLAG),
        )

    def to_buffer(self) -> Bytes65:
        """Encode as `header || r || s`."""
        return Bytes65(
            bytes([self.header]) + self.r.to_bytes(32, "big") + self.s.to_bytes(32, "big")
        )

    @classmethod
    def from_hex(cls, value: str) -> Signature:
        """Decode 130 hex characters."""
        try:
            buffer = bytes.fromhex(value)
        except ValueError as e:
            raise InvalidFormatError(f"Invalid signature hex: {e}") from e
        return cls.from_buffer(buffer)

    def to_hex(self) -> str:
        """Hex of `to_buffer()`."""
        return self.to_buffer().hex()
