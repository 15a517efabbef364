"""Exception hierarchy for key handling, signatures and RPC authentication."""

from __future__ import annotations


class SteemAuthError(Exception):
    """
    Base exception for all errors raised by this package.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class MalformedInputError(SteemAuthError, ValueError):
    """Base class for inputs that cannot be decoded at all."""


class InvalidFormatError(MalformedInputError):
    """Raised when an encoded value (base58, hex, SEC1) fails to decode."""


class InvalidLengthError(InvalidFormatError):
    """
    Raised when a decoded value has the wrong number of bytes.

    Attributes:
        type_name: Name of the value being decoded.
        expected: Expected length in bytes, or the accepted lengths.
        actual: Length that was received.
    """

    def __init__(self, type_name: str, *, expected: int | tuple[int, ...], actual: int) -> None:
        self.type_name = type_name
        self.expected = expected
        self.actual = actual
        lengths = " or ".join(map(str, expected)) if isinstance(expected, tuple) else expected
        super().__init__(f"{type_name} requires exactly {lengths} bytes, got {actual}")


class InvalidPointError(MalformedInputError):
    """Raised when a public key is the null key or not a point on the curve."""


class ChecksumMismatchError(SteemAuthError):
    """Raised when a recomputed checksum disagrees with the encoded one."""


InvalidChecksumError = ChecksumMismatchError
"""Alias used by WIF decoding."""


class PrefixMismatchError(SteemAuthError):
    """
    Raised when a key or address string does not start with the network prefix.

    Attributes:
        expected: The configured prefix.
        actual: The leading characters found in the string.
    """

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expecting key to begin with {expected}, instead got {actual}")


class OutOfBoundsError(SteemAuthError):
    """Raised when a scalar is zero or not below the curve order."""


class InvalidDerivedKeyError(SteemAuthError):
    """Raised when child-key derivation lands on the point at infinity or zero."""


class InvalidArgumentError(SteemAuthError):
    """Raised when a required argument is missing or has the wrong type."""


class RpcValidationError(SteemAuthError):
    """Base class for rejections of a signed JSON-RPC request."""


class MissingParamsError(RpcValidationError):
    """Raised when asked to sign a request that carries no params."""


class MalformedRequestError(RpcValidationError):
    """Raised when the envelope is not a JSON-RPC 2.0 request with a string method."""


class MissingSignedPayloadError(RpcValidationError):
    """Raised when `params.__signed` is absent."""


class InvalidParamsError(RpcValidationError):
    """Raised when `params` holds anything besides `__signed`."""


class MissingAccountError(RpcValidationError):
    """Raised when the signed payload names no account."""


class InvalidEncodedParamsError(RpcValidationError):
    """Raised when the base64 JSON params cannot be decoded."""


class InvalidNonceError(RpcValidationError):
    """Raised when the nonce is absent or does not decode to 8 bytes."""


class InvalidTimestampError(RpcValidationError):
    """Raised when the signing timestamp is not a valid ISO-8601 instant."""


class SignatureExpiredError(RpcValidationError):
    """Raised when the signing timestamp is older than the replay window."""


class VerificationFailedError(RpcValidationError):
    """Raised when the authority verifier rejects the signatures."""
