"""
Process-wide configuration for key and address encoding.

Initial values come from the environment when this module is imported:

- `STEEM_ADDRESS_PREFIX`: network prefix of public keys and addresses (default "STM").
- `STEEM_CHAIN_ID`: hex chain id mixed into transaction signatures (default mainnet).
"""

from __future__ import annotations

import os
from typing import Any, Final

from pydantic import field_validator

from steem_auth.types import StrictBaseModel

DEFAULT_ADDRESS_PREFIX: Final = "STM"
"""Steem mainnet public key and address prefix."""

DEFAULT_CHAIN_ID: Final = "0" * 64
"""Steem mainnet chain id: 32 zero bytes, hex-encoded."""


class EccConfig(StrictBaseModel):
    """Settings shared by every encoding operation in the process."""

    address_prefix: str = DEFAULT_ADDRESS_PREFIX
    """Prefix prepended to public key and address strings."""

    chain_id: str = DEFAULT_CHAIN_ID
    """Hex-encoded chain id prepended to serialized transactions before signing."""

    @field_validator("address_prefix")
    @classmethod
    def _validate_prefix(cls, v: str) -> str:
        if not v:
            raise ValueError("address_prefix must not be empty")
        return v

    @field_validator("chain_id")
    @classmethod
    def _validate_chain_id(cls, v: str) -> str:
        if len(bytes.fromhex(v)) != 32:
            raise ValueError(f"chain_id must be 32 bytes of hex, got {v!r}")
        return v.lower()

    @property
    def chain_id_bytes(self) -> bytes:
        """The chain id as raw bytes."""
        return bytes.fromhex(self.chain_id)


def _from_environment() -> EccConfig:
    return EccConfig(
        address_prefix=os.environ.get("STEEM_ADDRESS_PREFIX", DEFAULT_ADDRESS_PREFIX),
        chain_id=os.environ.get("STEEM_CHAIN_ID", DEFAULT_CHAIN_ID),
    )


_config: EccConfig = _from_environment()


def get_config() -> EccConfig:
    """Return the active process-wide settings."""
    return _config


def set_config(**changes: Any) -> EccConfig:
    """
    Replace the process-wide settings with a validated copy.

    Args:
        **changes: Field values to override, e.g. `address_prefix="TST"`.

    Returns:
        The new active settings.
    """
    global _config
    _config = _config.copy(**changes)
    return _config


def reset_config() -> EccConfig:
    """Restore the settings read from the environment."""
    global _config
    _config = _from_environment()
    return _config


def address_prefix(override: str | None = None) -> str:
    """Resolve an explicit prefix argument against the process-wide default."""
    return _config.address_prefix if override is None else override
