"""
Helpers over WIF and public key strings.

These mirror the wallet-facing helpers of the JavaScript client: checking and
converting key strings, signing short messages, and signing serialized
transactions for a chain.
"""

from __future__ import annotations

from collections.abc import Sequence

from steem_auth.config import get_config
from steem_auth.ecc import PrivateKey, PublicKey, Signature, brain_key
from steem_auth.types import InvalidArgumentError, SteemAuthError

__all__ = [
    "is_wif",
    "is_pubkey",
    "get_private_key",
    "get_public_key",
    "wif_to_public",
    "wif_is_valid",
    "sign_message",
    "verify_message",
    "sign_transaction_buffer",
]


def is_wif(text: str) -> bool:
    """True if `text` is a WIF private key with a valid checksum."""
    return PrivateKey.is_wif(text)


def is_pubkey(text: str, address_prefix: str | None = None) -> bool:
    """True if `text` is a valid prefixed public key string."""
    return PublicKey.from_string(text, address_prefix) is not None


def get_private_key(seed: str) -> str:
    """WIF of the key derived from a brain key (normalized before hashing)."""
    return PrivateKey.from_seed(brain_key.normalize(seed)).to_wif()


def get_public_key(wif: str) -> str:
    """Public key string of a WIF private key."""
    return PrivateKey.from_wif(wif).to_public().to_string()


wif_to_public = get_public_key


def wif_is_valid(wif: str, public_key: str) -> bool:
    """True if `wif` parses and its public key string equals `public_key`."""
    try:
        return wif_to_public(wif) == public_key
    except SteemAuthError:
        return False


def sign_message(message: str | bytes, wif: str) -> str:
    """Hex signature of the SHA-256 of `message`."""
    return Signature.sign_buffer(message, PrivateKey.from_wif(wif)).to_hex()


def verify_message(message: str | bytes, signature: str, public_key: str) -> bool:
    """
    Check a `sign_message` signature against a public key string.

    Returns False for malformed signatures or keys instead of raising.
    """
    pub = PublicKey.from_string(public_key)
    if pub is None:
        return False
    try:
        return Signature.from_hex(signature).verify_buffer(message, pub)
    except SteemAuthError:
        return False


def sign_transaction_buffer(
    serialized: bytes,
    keys: Sequence[PrivateKey | str],
    chain_id: bytes | str | None = None,
) -> list[Signature]:
    """
    Sign a serialized transaction with every key.

    Each signature covers sha256(chain_id || serialized).

    Args:
        serialized: Transaction bytes as produced by the chain's serializer.
        keys: Private keys or WIF strings.
        chain_id: 32-byte chain id (or hex). Defaults to the configured chain id.
    """
    if isinstance(keys, (str, bytes)):
        raise InvalidArgumentError("Keys must be a sequence")
    if chain_id is None:
        cid = get_config().chain_id_bytes
    elif isinstance(chain_id, str):
        cid = bytes.fromhex(chain_id)
    else:
        cid = bytes(chain_id)

    buffer = cid + bytes(serialized)
    return [Signature.sign_buffer(buffer, key) for key in keys]
