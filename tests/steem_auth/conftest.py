"""
Shared pytest fixtures for steem_auth tests.

Keys are derived from fixed seeds so every run sees the same values.
"""

from __future__ import annotations

import pytest

from steem_auth.ecc import PrivateKey, PublicKey


@pytest.fixture
def alice_key() -> PrivateKey:
    """Private key of the primary test account."""
    return PrivateKey.from_seed("aliceactivepassword")


@pytest.fixture
def bob_key() -> PrivateKey:
    """Private key of the secondary test account."""
    return PrivateKey.from_seed("bobactivepassword")


@pytest.fixture
def alice_public(alice_key: PrivateKey) -> PublicKey:
    """Public key of the primary test account."""
    return alice_key.to_public()


@pytest.fixture
def bob_public(bob_key: PrivateKey) -> PublicKey:
    """Public key of the secondary test account."""
    return bob_key.to_public()


@pytest.fixture
def offset() -> bytes:
    """32-byte child derivation offset."""
    return bytes(range(32))
