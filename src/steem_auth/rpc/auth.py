"""
Signed JSON-RPC requests.

A client authenticates a call to an account without a session. It signs a
digest of the call with one or more of the account's keys and attaches a
random nonce and a timestamp:

    inner  = sha256(timestamp || account || method || params_b64)
    digest = sha256(K || inner || nonce)

K is sha256("steem_jsonrpc_auth"). It keeps these signatures from being
valid in any other protocol that uses the same keys.

The server rebuilds the digest and hands it to an `AuthorityVerifier`.
The verifier decides whether the signatures carry enough weight for the account.
Requests older than 60 seconds are rejected.
"""

from __future__ import annotations

import base64
import binascii
import inspect
import json
import logging
import os
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Final, Protocol, runtime_checkable

from pydantic import JsonValue, ValidationError

from steem_auth import metrics
from steem_auth.ecc import PrivateKey, Signature
from steem_auth.ecc.hash import sha256
from steem_auth.types import (
    Bytes8,
    Bytes32,
    InvalidArgumentError,
    InvalidEncodedParamsError,
    InvalidNonceError,
    InvalidParamsError,
    InvalidTimestampError,
    MalformedRequestError,
    MissingAccountError,
    MissingParamsError,
    MissingSignedPayloadError,
    RpcValidationError,
    SignatureExpiredError,
    VerificationFailedError,
)

from .types import (
    JSONRPC_VERSION,
    SIGNED_PARAMS_KEY,
    RpcRequest,
    SignedParams,
    SignedPayload,
    SignedRequest,
)

__all__ = [
    "K",
    "NONCE_SIZE",
    "SIGNATURE_MAX_AGE",
    "AuthorityVerifier",
    "CallbackVerifier",
    "hash_message",
    "sign",
    "validate",
]

logger = logging.getLogger(__name__)

K: Final = Bytes32("3b3b081e46ea808d5a96b08c4bc5003f5e15767090f344faab531ec57565136b")
"""Domain separation constant: sha256("steem_jsonrpc_auth")."""

NONCE_SIZE: Final = 8
"""Random bytes per signed request."""

SIGNATURE_MAX_AGE: Final = timedelta(milliseconds=60_000)
"""Replay window: how old a signing timestamp may be when validated."""


@runtime_checkable
class AuthorityVerifier(Protocol):
    """
    Decides whether signatures are sufficient to act as an account.

    Implementations typically look up the account's key authorities on chain,
    recover the signers with `Signature.recover_public_key(message)` and
    compare the summed key weights with the authority's threshold.
    """

    def verify(
        self, message: bytes, signatures: list[str], account: str
    ) -> Awaitable[bool | None] | bool | None:
        """
        Accept or reject the signatures over `message`.

        Reject by raising (the exception text becomes the failure reason)
        or by returning False. May be a coroutine.
        """
        ...


VerifyCallback = Callable[[bytes, list[str], str], Awaitable[bool | None] | bool | None]
"""Plain function form of `AuthorityVerifier.verify`."""


@dataclass(frozen=True, slots=True)
class CallbackVerifier:
    """Adapts a plain (sync or async) function to `AuthorityVerifier`."""

    callback: VerifyCallback
    """Function called with (message, signatures, account)."""

    def verify(
        self, message: bytes, signatures: list[str], account: str
    ) -> Awaitable[bool | None] | bool | None:
        return self.callback(message, signatures, account)


def hash_message(timestamp: str, account: str, method: str, params: str, nonce: bytes) -> Bytes32:
    """
    Build the digest that request signatures cover.

    Args:
        timestamp: ISO-8601 signing time, exactly as transmitted.
        account: Signing account name.
        method: RPC method.
        params: Base64-encoded JSON params, exactly as transmitted.
        nonce: The 8 nonce bytes.

    Returns:
        sha256(K || sha256(timestamp || account || method || params) || nonce)
    """
    first = sha256(
        timestamp.encode("utf-8")
        + account.encode("utf-8")
        + method.encode("utf-8")
        + params.encode("utf-8")
    )
    return Bytes32(sha256(K + first + bytes(nonce)))


def _format_timestamp(moment: datetime) -> str:
    # ISO-8601 in UTC with millisecond precision and a "Z" suffix.
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def _parse_timestamp(value: Any) -> datetime:
    if not isinstance(value, str):
        raise InvalidTimestampError("Invalid timestamp")
    try:
        moment = datetime.fromisoformat(value)
    except ValueError as e:
        raise InvalidTimestampError("Invalid timestamp") from e
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _encode_params(params: JsonValue) -> str:
    # Compact separators and raw UTF-8 match the JSON text other clients sign.
    text = json.dumps(params, separators=(",", ":"), ensure_ascii=False)
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def _decode_params(encoded: Any) -> JsonValue:
    try:
        if not isinstance(encoded, str):
            raise TypeError(f"expected a base64 string, got {type(encoded).__name__}")
        return json.loads(base64.b64decode(encoded).decode("utf-8"))
    except (TypeError, ValueError, binascii.Error) as e:
        raise InvalidEncodedParamsError(f"Invalid encoded params: {e}") from e


def _as_private_key(key: PrivateKey | str) -> PrivateKey:
    return PrivateKey.from_wif(key) if isinstance(key, str) else key


def sign(
    request: RpcRequest | Mapping[str, Any],
    account: str,
    keys: Sequence[PrivateKey | str],
    *,
    timestamp: datetime | str | None = None,
    nonce: bytes | str | None = None,
) -> SignedRequest:
    """
    Sign a JSON-RPC request as `account` with every key in `keys`.

    Args:
        request: The call, as a model or a `{method, params, id}` mapping.
        account: Account the call is made on behalf of.
        keys: Private keys (or WIF strings); one signature is attached per key.
        timestamp: Signing time. Defaults to now.
        nonce: 8 nonce bytes (or their hex). Defaults to fresh random bytes.

    Raises:
        MissingParamsError: If the request has no params.
        InvalidArgumentError: If the request mapping has no method or ill-typed fields.
    """
    if not isinstance(request, RpcRequest):
        if request.get("params") is None:
            raise MissingParamsError("Unable to sign a request without params")
        try:
            request = RpcRequest(
                method=request["method"],
                params=request["params"],
                id=request.get("id", 0),
            )
        except (KeyError, ValidationError) as e:
            raise InvalidArgumentError(f"Invalid JSON RPC request: {e}") from e
    if request.params is None:
        raise MissingParamsError("Unable to sign a request without params")

    params = _encode_params(request.params)
    nonce_bytes = Bytes8(os.urandom(NONCE_SIZE) if nonce is None else nonce)
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)
    timestamp_text = timestamp if isinstance(timestamp, str) else _format_timestamp(timestamp)

    message = hash_message(timestamp_text, account, request.method, params, nonce_bytes)
    signatures = [
        Signature.sign_buffer_sha256(message, _as_private_key(key)).to_hex() for key in keys
    ]

    metrics.rpc_requests_signed.inc()
    return SignedRequest(
        jsonrpc=JSONRPC_VERSION,
        method=request.method,
        id=request.id,
        params=SignedParams(
            signed=SignedPayload(
                account=account,
                nonce=nonce_bytes.hex(),
                params=params,
                signatures=signatures,
                timestamp=timestamp_text,
            )
        ),
    )


def _as_verifier(verifier: AuthorityVerifier | VerifyCallback) -> AuthorityVerifier:
    if isinstance(verifier, AuthorityVerifier):
        return verifier
    if callable(verifier):
        return CallbackVerifier(verifier)
    raise InvalidArgumentError("verifier must implement verify() or be callable")


async def validate(
    request: SignedRequest | Mapping[str, Any],
    verifier: AuthorityVerifier | VerifyCallback,
    *,
    now: datetime | None = None,
) -> JsonValue:
    """
    Validate a signed JSON-RPC request and return its decoded params.

    Checks run in a fixed order and each failure has its own exception type.

    Args:
        request: The envelope, as a model or as decoded JSON.
        verifier: Authority check for the recomputed digest and signatures.
        now: Current time for the replay window. Defaults to the system clock.

    Raises:
        MalformedRequestError: Not JSON-RPC 2.0, or the method is not a string.
        MissingSignedPayloadError: `params.__signed` is absent.
        InvalidParamsError: `params` has keys besides `__signed`.
        MissingAccountError: No account in the payload.
        InvalidEncodedParamsError: Params are not base64 JSON.
        InvalidNonceError: Nonce missing, not hex, or not 8 bytes.
        InvalidTimestampError: Timestamp is not ISO-8601.
        SignatureExpiredError: Timestamp is older than the replay window.
        VerificationFailedError: The verifier rejected the signatures.
    """
    check = _as_verifier(verifier)
    with metrics.rpc_validation_time.time():
        try:
            params = await _run_checks(request, check, now)
        except RpcValidationError as e:
            metrics.rpc_validations.labels(result=type(e).__name__).inc()
            raise
    metrics.rpc_validations.labels(result="accepted").inc()
    return params


async def _run_checks(
    request: SignedRequest | Mapping[str, Any],
    check: AuthorityVerifier,
    now: datetime | None,
) -> JsonValue:
    if isinstance(request, SignedRequest):
        request = request.to_wire()
    if not isinstance(request, Mapping):
        raise MalformedRequestError("Invalid JSON RPC Request")

    method = request.get("method")
    if request.get("jsonrpc") != JSONRPC_VERSION or not isinstance(method, str):
        raise MalformedRequestError("Invalid JSON RPC Request")

    params = request.get("params")
    if not isinstance(params, Mapping) or params.get(SIGNED_PARAMS_KEY) is None:
        raise MissingSignedPayloadError("Signed payload missing")
    if len(params) != 1:
        raise InvalidParamsError("Invalid request params")

    signed = params[SIGNED_PARAMS_KEY]
    if not isinstance(signed, Mapping):
        raise MissingSignedPayloadError("Signed payload missing")

    account = signed.get("account")
    if not isinstance(account, str):
        raise MissingAccountError("Missing account")

    decoded_params = _decode_params(signed.get("params"))

    nonce_hex = signed.get("nonce")
    if not isinstance(nonce_hex, str):
        raise InvalidNonceError("Invalid nonce")
    try:
        nonce = bytes.fromhex(nonce_hex)
    except ValueError as e:
        raise InvalidNonceError("Invalid nonce") from e
    if len(nonce) != NONCE_SIZE:
        raise InvalidNonceError("Invalid nonce")

    timestamp = signed.get("timestamp")
    signed_at = _parse_timestamp(timestamp)

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    if now - signed_at > SIGNATURE_MAX_AGE:
        logger.debug("Rejected request from %s: signed at %s is expired", account, timestamp)
        raise SignatureExpiredError("Signature expired")

    message = hash_message(timestamp, account, method, signed["params"], nonce)

    signatures = signed.get("signatures")
    try:
        if not isinstance(signatures, list) or not all(isinstance(s, str) for s in signatures):
            raise TypeError("signatures must be a list of hex strings")
        result = check.verify(bytes(message), list(signatures), account)
        if inspect.isawaitable(result):
            result = await result
        if result is False:
            raise PermissionError("signatures rejected by verifier")
    except Exception as cause:
        logger.debug("Rejected request from %s: %s", account, cause)
        raise VerificationFailedError(f"Verification failed: {cause}") from cause

    return decoded_params
