"""
Steem key cryptography and signed JSON-RPC authentication.

Subpackages:

- `steem_auth.ecc`: keys, addresses, signatures and ECDH encryption.
- `steem_auth.rpc`: signing and validating JSON-RPC requests.
"""

from .config import EccConfig, get_config, reset_config, set_config
from .ecc import Address, Aes, PrivateKey, PublicKey, Signature

__all__ = [
    "Address",
    "Aes",
    "EccConfig",
    "PrivateKey",
    "PublicKey",
    "Signature",
    "get_config",
    "reset_config",
    "set_config",
]
