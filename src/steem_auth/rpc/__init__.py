"""Authentication of JSON-RPC calls with account signatures."""

from .auth import (
    K,
    NONCE_SIZE,
    SIGNATURE_MAX_AGE,
    AuthorityVerifier,
    CallbackVerifier,
    hash_message,
    sign,
    validate,
)
from .types import RpcRequest, SignedParams, SignedPayload, SignedRequest

__all__ = [
    "K",
    "NONCE_SIZE",
    "SIGNATURE_MAX_AGE",
    "AuthorityVerifier",
    "CallbackVerifier",
    "hash_message",
    "sign",
    "validate",
    "RpcRequest",
    "SignedParams",
    "SignedPayload",
    "SignedRequest",
]
