"""JSON-RPC request and signed-envelope models."""

from __future__ import annotations

from typing import Final

from pydantic import Field, JsonValue

from steem_auth.types import StrictBaseModel

JSONRPC_VERSION: Final = "2.0"
"""The only JSON-RPC version accepted."""

SIGNED_PARAMS_KEY: Final = "__signed"
"""Sole key of the `params` object of a signed request."""


class RpcRequest(StrictBaseModel):
    """An unsigned JSON-RPC call."""

    method: str
    """RPC method name."""

    params: JsonValue = None
    """Call parameters: any JSON value, usually an array."""

    id: int = 0
    """Request id echoed by the server."""


class SignedPayload(StrictBaseModel):
    """Contents of `params.__signed`."""

    account: str
    """Account the request is signed on behalf of."""

    nonce: str
    """8 random bytes, hex-encoded."""

    params: str
    """Base64 of the UTF-8 JSON encoding of the original params."""

    signatures: list[str]
    """Hex-encoded 65-byte signatures, one per signing key."""

    timestamp: str
    """ISO-8601 signing time."""


class SignedParams(StrictBaseModel):
    """The `params` object of a signed request: exactly one `__signed` key."""

    signed: SignedPayload = Field(alias=SIGNED_PARAMS_KEY)
    """The signed payload."""


class SignedRequest(StrictBaseModel):
    """A JSON-RPC call carrying signatures and replay-protection metadata."""

    jsonrpc: str = JSONRPC_VERSION
    """JSON-RPC protocol version."""

    method: str
    """RPC method name."""

    id: int
    """Request id."""

    params: SignedParams
    """Signed parameters."""

    def to_wire(self) -> dict[str, JsonValue]:
        """The envelope as a JSON-compatible dict, with `__signed` as the params key."""
        return self.model_dump(by_alias=True)

    def to_json(self) -> str:
        """The envelope serialized as JSON text."""
        return self.model_dump_json(by_alias=True)
