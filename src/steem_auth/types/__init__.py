"""Reusable type definitions shared across the package."""

from .base import StrictBaseModel
from .byte_arrays import (
    BaseBytes,
    Bytes8,
    Bytes20,
    Bytes32,
    Bytes65,
)
from .exceptions import (
    ChecksumMismatchError,
    InvalidArgumentError,
    InvalidChecksumError,
    InvalidDerivedKeyError,
    InvalidEncodedParamsError,
    InvalidFormatError,
    InvalidLengthError,
    InvalidNonceError,
    InvalidParamsError,
    InvalidPointError,
    InvalidTimestampError,
    MalformedInputError,
    MalformedRequestError,
    MissingAccountError,
    MissingParamsError,
    MissingSignedPayloadError,
    OutOfBoundsError,
    PrefixMismatchError,
    RpcValidationError,
    SignatureExpiredError,
    SteemAuthError,
    VerificationFailedError,
)

__all__ = [
    # Core types
    "BaseBytes",
    "Bytes8",
    "Bytes20",
    "Bytes32",
    "Bytes65",
    "StrictBaseModel",
    # Exceptions
    "SteemAuthError",
    "MalformedInputError",
    "InvalidFormatError",
    "InvalidLengthError",
    "InvalidPointError",
    "ChecksumMismatchError",
    "InvalidChecksumError",
    "PrefixMismatchError",
    "OutOfBoundsError",
    "InvalidDerivedKeyError",
    "InvalidArgumentError",
    "RpcValidationError",
    "MissingParamsError",
    "MalformedRequestError",
    "MissingSignedPayloadError",
    "InvalidParamsError",
    "MissingAccountError",
    "InvalidEncodedParamsError",
    "InvalidNonceError",
    "InvalidTimestampError",
    "SignatureExpiredError",
    "VerificationFailedError",
]
