"""Deterministic resource fingerprints used as store keys."""

from __future__ import annotations

import base64
import hashlib

from .exceptions import InvalidArgumentError


def fingerprint(value: object) -> str:
    """
    Map a resource identifier to a fixed-length opaque key.

    The key is the base64 text of the SHA-256 digest of the UTF-8 bytes of
    ``value``. Equal identifiers always yield equal keys.

    Examples:
        >>> fingerprint("resource")
        'XelTGfF0Z+1txY5OCxbBGToTs11g3Ei88Gv2t77rvmw='

    Raises:
        InvalidArgumentError: If ``value`` is empty, ``None`` or not a ``str``.
    """
    if not value:
        raise InvalidArgumentError("Could not hash falsy value")
    if not isinstance(value, str):
        raise InvalidArgumentError("Can not hash value which is not a string")

    digest = hashlib.sha256(value.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")
