"""
secp256k1 group arithmetic.

The `cryptography` package handles key generation, ECDH and verification but
does not expose point addition or public-key recovery. Child-key derivation and
recoverable signatures need both, so they are computed here on affine
coordinates, with `None` standing for the point at infinity.

None of this is constant-time. Signing multiplies the secret nonce with
`point_mul`, so timing leaks are possible where an attacker can measure it.
"""

from __future__ import annotations

from typing import Final

from .hash import hmac_sha256

Point = tuple[int, int]
"""Affine curve point (x, y)."""

P: Final = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
"""secp256k1 field prime."""

N: Final = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
"""secp256k1 curve order."""

HALF_N: Final = N // 2
"""Largest `s` value a canonical (low-S) signature may carry."""

GX: Final = 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798
"""secp256k1 generator x-coordinate."""

GY: Final = 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8
"""secp256k1 generator y-coordinate."""

G: Final[Point] = (GX, GY)
"""secp256k1 generator point."""


def modinv(a: int, m: int) -> int:
    """Compute modular inverse using Fermat's little theorem (m must be prime)."""
    return pow(a, m - 2, m)


def point_add(p1: Point | None, p2: Point | None) -> Point | None:
    """Add two secp256k1 curve points."""
    if p1 is None:
        return p2
    if p2 is None:
        return p1

    x1, y1 = p1
    x2, y2 = p2

    if x1 == x2 and (y1 + y2) % P == 0:
        return None

    if x1 == x2:
        # Point doubling.
        lam = (3 * x1 * x1 * modinv(2 * y1, P)) % P
    else:
        lam = ((y2 - y1) * modinv(x2 - x1, P)) % P

    x3 = (lam * lam - x1 - x2) % P
    y3 = (lam * (x1 - x3) - y1) % P
    return (x3, y3)


def point_neg(point: Point | None) -> Point | None:
    """Negate a point."""
    if point is None:
        return None
    return (point[0], (-point[1]) % P)


def point_mul(k: int, point: Point | None = G) -> Point | None:
    """Scalar multiplication using double-and-add."""
    result = None
    addend = point
    k %= N
    while k:
        if k & 1:
            result = point_add(result, addend)
        addend = point_add(addend, addend)
        k >>= 1
    return result


def lift_x(x: int, odd: bool) -> Point | None:
    """
    Return the curve point with the given x-coordinate and y parity.

    Returns None when x is not the x-coordinate of any curve point.
    """
    if x >= P:
        return None
    y_sq = (pow(x, 3, P) + 7) % P
    y = pow(y_sq, (P + 1) // 4, P)
    if (y * y) % P != y_sq:
        return None
    if (y & 1) != int(odd):
        y = P - y
    return (x, y)


def encode_point(point: Point, compressed: bool = True) -> bytes:
    """SEC1-encode a point (33 bytes compressed, 65 bytes uncompressed)."""
    x, y = point
    if not compressed:
        return b"\x04" + x.to_bytes(32, "big") + y.to_bytes(32, "big")
    prefix = b"\x02" if y % 2 == 0 else b"\x03"
    return prefix + x.to_bytes(32, "big")


def recover_point(digest: bytes, r: int, s: int, recovery_id: int) -> Point | None:
    """
    Recover the signer's public point from an ECDSA signature.

    Bit 0 of the recovery id is the y parity of the nonce point R and bit 1
    says whether R's x-coordinate was r + n rather than r.

        Q = r^-1 * (s*R - e*G)

    Returns None when the recovery id does not name a valid point.
    """
    if not (0 <= recovery_id <= 3):
        raise ValueError(f"Recovery id must be in [0, 3], got {recovery_id}")
    if not (0 < r < N and 0 < s < N):
        return None

    x = r + N if recovery_id & 2 else r
    big_r = lift_x(x, odd=bool(recovery_id & 1))
    if big_r is None:
        return None

    e = int.from_bytes(digest, "big") % N
    r_inv = modinv(r, N)
    s_r = point_mul(s, big_r)
    e_g = point_neg(point_mul(e, G))
    return point_mul(r_inv, point_add(s_r, e_g))


def deterministic_k(digest: bytes, secret: int, extra: bytes = b"") -> int:
    """
    Derive the ECDSA nonce per RFC 6979 with HMAC-SHA256.

    Args:
        digest: 32-byte message digest being signed.
        secret: Private scalar.
        extra: Optional additional data (RFC 6979 section 3.6). Different values
            yield independent nonces for the same digest and key.

    Returns:
        Nonce k with 1 <= k < n.
    """
    key = secret.to_bytes(32, "big")
    h1 = (int.from_bytes(digest, "big") % N).to_bytes(32, "big")

    v = b"\x01" * 32
    k = b"\x00" * 32
    k = hmac_sha256(k, v + b"\x00" + key + h1 + extra)
    v = hmac_sha256(k, v)
    k = hmac_sha256(k, v + b"\x01" + key + h1 + extra)
    v = hmac_sha256(k, v)

    while True:
        v = hmac_sha256(k, v)
        candidate = int.from_bytes(v, "big")
        if 1 <= candidate < N:
            return candidate
        k = hmac_sha256(k, v + b"\x00")
        v = hmac_sha256(k, v)
