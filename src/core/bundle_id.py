"""Bundle identifier helpers.

This module validates and derives 43-character base64url item ids.
"""

from __future__ import annotations

import base64
import hashlib
import re

from core.constants import BUNDLE_ID_PATTERN
from core.errors import UnpackArgumentError

_BUNDLE_ID_RE = re.compile(BUNDLE_ID_PATTERN)


def is_bundle_id(value: str) -> bool:
    """Return whether value is a well-formed 43-character id."""
    return _BUNDLE_ID_RE.fullmatch(value) is not None


def validate_bundle_id(value: str) -> str:
    """Validate a bundle id supplied by a user.

    Args:
        value: Candidate identifier.

    Returns:
        The identifier unchanged.

    Raises:
        UnpackArgumentError: If value is not 43 base64url characters.
    """
    if not is_bundle_id(value):
        raise UnpackArgumentError(
            f"Invalid bundle id '{value}': expected 43 characters of [A-Za-z0-9_-]. "
            "Pass a transaction id copied from a gateway or explorer."
        )
    return value


def encode_item_id(raw_id: bytes) -> str:
    """Encode raw id bytes as unpadded base64url text."""
    return base64.urlsafe_b64encode(raw_id).decode("ascii").rstrip("=")


def item_id_from_signature(signature: bytes) -> str:
    """Derive an item id as base64url(sha256(signature))."""
    return encode_item_id(hashlib.sha256(signature).digest())
