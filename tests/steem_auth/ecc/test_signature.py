"""Tests for canonical recoverable signatures."""

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed, decode_dss_signature
from hypothesis import given, settings
from hypothesis import strategies as st

from steem_auth.ecc import PrivateKey, PublicKey, Signature, curve
from steem_auth.ecc.hash import sha256
from steem_auth.types import InvalidFormatError, InvalidLengthError, InvalidPointError


class TestSigning:
    """Tests for producing signatures."""

    def test_sign_and_verify(self, alice_key):
        """A signature verifies against the signer's public key."""
        digest = sha256(b"hello")
        signature = Signature.sign_buffer_sha256(digest, alice_key)
        assert signature.verify_hash(digest, alice_key.to_public())

    def test_deterministic(self, alice_key):
        """Signing the same digest twice gives the same signature."""
        digest = sha256(b"hello")
        assert Signature.sign_buffer_sha256(digest, alice_key) == Signature.sign_buffer_sha256(
            digest, alice_key
        )

    def test_sign_buffer_hashes_first(self, alice_key):
        """sign_buffer is sign_buffer_sha256 over the SHA-256 of the input."""
        assert Signature.sign_buffer(b"payload", alice_key) == Signature.sign_buffer_sha256(
            sha256(b"payload"), alice_key
        )

    def test_sign_hex(self, alice_key):
        """sign_hex signs the decoded bytes."""
        assert Signature.sign_hex("deadbeef", alice_key) == Signature.sign_buffer(
            bytes.fromhex("deadbeef"), alice_key
        )

    def test_accepts_wif(self, alice_key):
        """A WIF string can stand in for the key."""
        digest = sha256(b"wif")
        assert Signature.sign_buffer_sha256(digest, alice_key.to_wif()) == (
            Signature.sign_buffer_sha256(digest, alice_key)
        )

    def test_digest_must_be_32_bytes(self, alice_key):
        """Raw messages are not accepted in place of a digest."""
        with pytest.raises(InvalidLengthError):
            Signature.sign_buffer_sha256(b"not a digest", alice_key)

    def test_compressed_header(self, alice_key):
        """Headers are 31 or 32 for compressed keys."""
        signature = Signature.sign_buffer(b"header", alice_key)
        assert signature.header in (31, 32, 33, 34)
        assert signature.to_buffer()[0] == signature.header

    @given(
        st.binary(min_size=32, max_size=32),
        st.integers(min_value=1, max_value=curve.N - 1),
    )
    @settings(max_examples=20)
    def test_canonical_and_recoverable(self, digest: bytes, d: int):
        """Signatures are low-S, DER-canonical, valid and recover the signer."""
        key = PrivateKey(d)
        signature = Signature.sign_buffer_sha256(digest, key)

        assert signature.s <= curve.HALF_N
        assert signature.is_canonical()
        assert signature.verify_hash(digest, key.to_public())
        assert signature.recover_public_key(digest) == key.to_public()


class TestCanonicality:
    """Tests for the canonical-form check."""

    def test_high_s_is_not_canonical(self):
        """s above n/2 fails the check."""
        assert not Signature(r=1 << 250, s=curve.N - 1, recovery_id=0).is_canonical()

    def test_high_r_is_not_canonical(self):
        """r with its top bit set fails the check."""
        assert not Signature(r=1 << 255, s=1 << 250, recovery_id=0).is_canonical()

    def test_short_r_is_not_canonical(self):
        """r with a superfluous leading zero byte fails the check."""
        assert not Signature(r=1 << 200, s=1 << 250, recovery_id=0).is_canonical()

    def test_zero_byte_with_high_next_byte_is_canonical(self):
        """A leading zero followed by a high byte is a 32-byte DER integer."""
        assert Signature(r=1 << 247, s=1 << 250, recovery_id=0).is_canonical()

    def test_retries_until_canonical(self, alice_key, monkeypatch):
        """A non-canonical first candidate is replaced by the next nonce."""
        calls = []
        original = curve.deterministic_k

        def tracking(digest, secret, extra=b""):
            calls.append(extra)
            return original(digest, secret, extra)

        monkeypatch.setattr(curve, "deterministic_k", tracking)
        monkeypatch.setattr(Signature, "is_canonical", lambda self: len(calls) >= 3)

        signature = Signature.sign_buffer(b"retry", alice_key)

        assert len(calls) == 3
        assert calls[0] == b""
        assert calls[1] == (1).to_bytes(32, "big")
        assert calls[2] == (2).to_bytes(32, "big")
        assert signature.verify_buffer(b"retry", alice_key.to_public())


class TestVerification:
    """Tests for verification failures that return False."""

    def test_wrong_key(self, alice_key, bob_public):
        """Another key does not verify."""
        signature = Signature.sign_buffer(b"message", alice_key)
        assert not signature.verify_buffer(b"message", bob_public)

    def test_wrong_message(self, alice_key, alice_public):
        """Another message does not verify."""
        signature = Signature.sign_buffer(b"message", alice_key)
        assert not signature.verify_buffer(b"other message", alice_public)

    def test_null_key(self, alice_key):
        """The null key verifies nothing."""
        signature = Signature.sign_buffer(b"message", alice_key)
        assert not signature.verify_buffer(b"message", PublicKey.null())

    def test_bad_digest_length_raises(self, alice_key, alice_public):
        """Malformed digests are an error, not a failed check."""
        signature = Signature.sign_buffer(b"message", alice_key)
        with pytest.raises(InvalidLengthError):
            signature.verify_hash(b"short", alice_public)

    def test_accepts_cryptography_signature(self, alice_key, alice_public):
        """Signatures made by `cryptography` verify too."""
        digest = sha256(b"interop")
        der = alice_key.to_cryptography().sign(digest, ec.ECDSA(Prehashed(hashes.SHA256())))
        r, s = decode_dss_signature(der)
        assert Signature(r=r, s=s, recovery_id=0).verify_hash(digest, alice_public)


class TestRecovery:
    """Tests for public key recovery."""

    def test_recover_from_buffer(self, alice_key, alice_public):
        """The signer is recovered from the message."""
        signature = Signature.sign_buffer(b"recover me", alice_key)
        assert signature.recover_public_key_from_buffer(b"recover me") == alice_public

    def test_wrong_recovery_id_gives_other_key(self, alice_key, alice_public):
        """Flipping the parity bit recovers a different key."""
        digest = sha256(b"parity")
        signature = Signature.sign_buffer_sha256(digest, alice_key)
        flipped = Signature(
            r=signature.r, s=signature.s, recovery_id=signature.recovery_id ^ 1
        )
        assert flipped.recover_public_key(digest) != alice_public

    def test_unrecoverable_raises(self):
        """A recovery id naming a non-existent R raises."""
        x = next(x for x in range(1, 100) if curve.lift_x(x, odd=False) is None)
        signature = Signature(r=x, s=1, recovery_id=0)
        with pytest.raises(InvalidPointError):
            signature.recover_public_key(bytes(32))


class TestEncoding:
    """Tests for the 65-byte wire format."""

    def test_hex_roundtrip(self, alice_key):
        """130 hex characters decode to the same signature."""
        signature = Signature.sign_buffer(b"encode", alice_key)
        text = signature.to_hex()
        assert len(text) == 130
        assert Signature.from_hex(text) == signature

    def test_layout(self, alice_key):
        """Header, then 32-byte r, then 32-byte s."""
        signature = Signature.sign_buffer(b"layout", alice_key)
        buffer = signature.to_buffer()
        assert buffer[0] == 27 + 4 + signature.recovery_id
        assert int.from_bytes(buffer[1:33], "big") == signature.r
        assert int.from_bytes(buffer[33:], "big") == signature.s

    def test_uncompressed_header(self):
        """Headers 27..30 decode as uncompressed."""
        buffer = bytes([28]) + (5).to_bytes(32, "big") + (7).to_bytes(32, "big")
        signature = Signature.from_buffer(buffer)
        assert signature.recovery_id == 1
        assert not signature.compressed
        assert signature.to_buffer() == buffer

    @pytest.mark.parametrize("length", [0, 64, 66])
    def test_wrong_length_raises(self, length: int):
        """Only 65-byte buffers are signatures."""
        with pytest.raises(InvalidLengthError):
            Signature.from_buffer(bytes(length))

    @pytest.mark.parametrize("header", [0, 26, 35, 255])
    def test_bad_header_raises(self, header: int):
        """Header bytes outside 27..34 are rejected."""
        buffer = bytes([header]) + (5).to_bytes(32, "big") + (7).to_bytes(32, "big")
        with pytest.raises(InvalidFormatError):
            Signature.from_buffer(buffer)

    def test_out_of_range_scalar_raises(self):
        """r must be below the curve order."""
        buffer = bytes([31]) + curve.N.to_bytes(32, "big") + (7).to_bytes(32, "big")
        with pytest.raises(InvalidFormatError, match="out of range"):
            Signature.from_buffer(buffer)

    def test_invalid_hex_raises(self):
        """Non-hex text is malformed."""
        with pytest.raises(InvalidFormatError):
            Signature.from_hex("xy" * 65)


class TestKnownVectors:
    """Tests against a signature computed independently for the graphene test key."""

    WIF = "5KQwrPbwdL6PhXujxW37FSSQZ1JiwsST4cqQzDeyXtP79zkvFD3"
    HELLO_SIGNATURE = (
        "1f0412eecfefd6a4daea948673f89d6e281d9fa5be9e3e5a3b5ec5fdfef194811c"
        "4f174828aabc1668b2e609ca1f7e1f387d8d83050fddfb275f467ae43527a00e"
    )

    def test_sign_hello(self):
        """Deterministic signing reproduces the fixed signature."""
        key = PrivateKey.from_wif(self.WIF)
        assert Signature.sign_buffer(b"hello", key).to_hex() == self.HELLO_SIGNATURE

    def test_verify_and_recover(self):
        """The fixed signature verifies and recovers the published key."""
        signature = Signature.from_hex(self.HELLO_SIGNATURE)
        assert signature.header == 31
        recovered = signature.recover_public_key_from_buffer(b"hello")
        assert recovered.to_string() == "STM6MRyAjQq8ud7hVNYcfnVPJqcVpscN5So8BhtHuGYqET5GDW5CV"
        assert signature.verify_buffer(b"hello", recovered)
