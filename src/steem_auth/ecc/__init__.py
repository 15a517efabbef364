"""
secp256k1 keys, addresses, signatures and ECDH encryption.

Keys and signatures use the encodings of the Steem blockchain:

- Private keys: Wallet Import Format (base58check, version 0x80).
- Public keys: `STM` prefix + base58 with a RIPEMD-160 checksum.
- Signatures: 65 bytes, recovery header + r + s, always canonical.
"""

from . import brain_key, hash
from .address import DERIVED_ADDRESS_VERSION, Address
from .aes import Aes, EncryptedMessage, NonceSource, UniqueNonceSource, decrypt, encrypt
from .base58 import Base58, base58check_decode, base58check_encode
from .key_private import WIF_VERSION, PrivateKey
from .key_public import NULL_KEY_BYTES, PublicKey
from .signature import SIGNATURE_SIZE, Signature

__all__ = [
    # Keys
    "PrivateKey",
    "PublicKey",
    "NULL_KEY_BYTES",
    "WIF_VERSION",
    # Addresses
    "Address",
    "DERIVED_ADDRESS_VERSION",
    # Signatures
    "Signature",
    "SIGNATURE_SIZE",
    # Encryption
    "Aes",
    "EncryptedMessage",
    "NonceSource",
    "UniqueNonceSource",
    "encrypt",
    "decrypt",
    # Encodings
    "Base58",
    "base58check_encode",
    "base58check_decode",
    # Submodules
    "brain_key",
    "hash",
]
