"""Tests for private keys and WIF."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from steem_auth.ecc import PrivateKey, PublicKey, curve
from steem_auth.ecc.base58 import Base58, base58check_encode
from steem_auth.ecc.hash import sha256
from steem_auth.types import (
    InvalidChecksumError,
    InvalidDerivedKeyError,
    InvalidFormatError,
    InvalidLengthError,
    InvalidPointError,
    OutOfBoundsError,
)

WIF_OF_ONE = "5HpHagT65TZzG1PH3CSu63k8DbpvD8s5ip4nEB3kEsreAnchuDf"
"""WIF of the scalar 1."""

WIF_EXAMPLE = "5HueCGU8rMjxEXxiPuD5BDku4MkFqeZyd4dZ1jvhTVqvbTLvyTJ"
"""Well-known WIF example and its scalar below."""

WIF_EXAMPLE_HEX = "0c28fca386c7a227600b2fe50b7cae11ec86d3bf1fbe471be89827e19d72aa1d"


class TestConstruction:
    """Tests for creating private keys."""

    def test_scalar_range(self):
        """Scalars must lie in [1, n-1]."""
        PrivateKey(1)
        PrivateKey(curve.N - 1)
        with pytest.raises(OutOfBoundsError):
            PrivateKey(0)
        with pytest.raises(OutOfBoundsError):
            PrivateKey(curve.N)

    def test_from_seed_hashes_seed(self):
        """The scalar is sha256(seed)."""
        key = PrivateKey.from_seed("correct horse battery staple")
        assert key.to_buffer() == sha256(b"correct horse battery staple")

    def test_from_seed_accepts_bytes(self):
        """Text and bytes seeds agree."""
        assert PrivateKey.from_seed("seed") == PrivateKey.from_seed(b"seed")

    def test_from_random_is_valid(self):
        """Random keys are in range and distinct."""
        a = PrivateKey.from_random()
        b = PrivateKey.from_random()
        assert 1 <= a.d < curve.N
        assert a != b

    def test_from_buffer_requires_32_bytes(self):
        """Buffers of other lengths are rejected."""
        with pytest.raises(InvalidLengthError):
            PrivateKey.from_buffer(bytes(31))

    def test_hex_roundtrip(self):
        """Hex export and import agree."""
        key = PrivateKey.from_hex(WIF_EXAMPLE_HEX)
        assert key.to_hex() == WIF_EXAMPLE_HEX
        assert PrivateKey.from_hex(key.to_hex()) == key

    def test_invalid_hex_raises(self):
        """Non-hex input is malformed."""
        with pytest.raises(InvalidFormatError):
            PrivateKey.from_hex("zz" * 32)


class TestWif:
    """Tests for Wallet Import Format."""

    def test_known_wif_of_one(self):
        """Scalar 1 encodes to the well-known WIF."""
        assert PrivateKey(1).to_wif() == WIF_OF_ONE

    def test_known_wif_example(self):
        """The example WIF decodes to its documented scalar."""
        key = PrivateKey.from_wif(WIF_EXAMPLE)
        assert key.to_hex() == WIF_EXAMPLE_HEX
        assert key.to_wif() == WIF_EXAMPLE

    @given(st.integers(min_value=1, max_value=curve.N - 1))
    def test_roundtrip(self, d: int):
        """from_wif(to_wif(d)) == d."""
        assert PrivateKey.from_wif(PrivateKey(d).to_wif()).d == d

    @given(
        st.integers(min_value=0, max_value=36),
        st.integers(min_value=1, max_value=255),
    )
    def test_any_flipped_byte_fails_checksum(self, index: int, mask: int):
        """Changing any byte of the decoded WIF breaks the checksum."""
        data = bytearray(Base58.decode(WIF_EXAMPLE))
        data[index] ^= mask
        with pytest.raises(InvalidChecksumError):
            PrivateKey.from_wif(Base58.encode(bytes(data)))

    def test_wrong_version_raises(self):
        """Only version 0x80 is accepted."""
        wif = base58check_encode(b"\x81" + bytes.fromhex(WIF_EXAMPLE_HEX))
        with pytest.raises(InvalidFormatError, match="version"):
            PrivateKey.from_wif(wif)

    def test_wrong_length_raises(self):
        """Compressed-flag WIFs and other lengths are rejected."""
        wif = base58check_encode(b"\x80" + bytes.fromhex(WIF_EXAMPLE_HEX) + b"\x01")
        with pytest.raises(InvalidLengthError):
            PrivateKey.from_wif(wif)

    def test_not_base58_raises(self):
        """Strings outside the alphabet are malformed."""
        with pytest.raises(InvalidFormatError):
            PrivateKey.from_wif("0OIl")

    def test_is_wif(self):
        """is_wif reports validity without raising."""
        assert PrivateKey.is_wif(WIF_EXAMPLE)
        assert not PrivateKey.is_wif(WIF_EXAMPLE[:-1] + "1")
        assert not PrivateKey.is_wif("not a wif")

    def test_string_aliases(self):
        """from_string/to_string are WIF."""
        key = PrivateKey.from_string(WIF_EXAMPLE)
        assert key.to_string() == WIF_EXAMPLE


class TestPublicDerivation:
    """Tests for Q = d*G."""

    def test_public_key_of_one_is_generator(self):
        """The public key of 1 is G."""
        assert PrivateKey(1).to_public().point == curve.G

    def test_public_key_matches_curve_arithmetic(self):
        """cryptography and the local arithmetic agree."""
        key = PrivateKey.from_seed("agreement")
        assert key.to_public().point == curve.point_mul(key.d, curve.G)

    def test_public_key_is_cached(self):
        """Repeated calls return the same object."""
        key = PrivateKey.from_seed("cache")
        assert key.to_public() is key.to_public()


class TestSharedSecret:
    """Tests for ECDH."""

    def test_symmetric(self, alice_key, bob_key):
        """Both parties compute the same secret."""
        assert alice_key.get_shared_secret(bob_key.to_public()) == bob_key.get_shared_secret(
            alice_key.to_public()
        )

    def test_secret_is_x_coordinate(self, alice_key, bob_key):
        """The secret is the x-coordinate of d_a * Q_b."""
        point = curve.point_mul(alice_key.d, bob_key.to_public().point)
        assert alice_key.get_shared_secret(bob_key.to_public()) == point[0].to_bytes(32, "big")

    @given(
        st.integers(min_value=1, max_value=curve.N - 1),
        st.integers(min_value=1, max_value=curve.N - 1),
    )
    @settings(max_examples=25)
    def test_symmetric_for_any_pair(self, a: int, b: int):
        """ECDH symmetry holds for arbitrary scalars."""
        key_a, key_b = PrivateKey(a), PrivateKey(b)
        assert key_a.get_shared_secret(key_b.to_public()) == key_b.get_shared_secret(
            key_a.to_public()
        )

    def test_null_key_raises(self, alice_key):
        """No secret can be agreed with the null key."""
        with pytest.raises(InvalidPointError):
            alice_key.get_shared_secret(PublicKey.null())


class TestChildDerivation:
    """Tests for private child keys."""

    def test_matches_public_child(self, alice_key, offset):
        """Private and public derivation land on the same key."""
        assert alice_key.child(offset).to_public() == alice_key.to_public().child(offset)

    def test_offset_must_be_32_bytes(self, alice_key):
        """Short offsets are rejected."""
        with pytest.raises(InvalidLengthError):
            alice_key.child(bytes(31))

    def test_out_of_bounds_offset(self, alice_key, offset, monkeypatch):
        """A hash at or above n is rejected."""
        monkeypatch.setattr("steem_auth.ecc.key_private.sha256", lambda data: b"\xff" * 32)
        with pytest.raises(OutOfBoundsError):
            alice_key.child(offset)

    def test_zero_child_is_rejected(self, offset, monkeypatch):
        """(n-1) + 1 wraps to zero, which is not a key."""
        parent = PrivateKey(curve.N - 1)
        parent.to_public()
        monkeypatch.setattr(
            "steem_auth.ecc.key_private.sha256", lambda data: (1).to_bytes(32, "big")
        )
        with pytest.raises(InvalidDerivedKeyError):
            parent.child(offset)
