"""Brain key normalization."""

from __future__ import annotations

import re

from steem_auth.types import InvalidArgumentError

_WHITESPACE = re.compile(r"[\t\n\v\f\r ]+")


def normalize(brain_key: str) -> str:
    """
    Canonical form of a brain key: trimmed, with whitespace runs collapsed to one space.

    Raises:
        InvalidArgumentError: If `brain_key` is not a string.
    """
    if not isinstance(brain_key, str):
        raise InvalidArgumentError("string required for brain_key")
    return _WHITESPACE.sub(" ", brain_key.strip())
