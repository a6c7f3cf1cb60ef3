"""ArFS metadata payload decoding.

This module turns metadata item payloads into JSON objects and builds
the placeholder used for encrypted (private drive) metadata.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping

from core.constants import CIPHER_IV_TAG_NAME, CIPHER_TAG_NAME, DATA_TX_ID_FIELD
from core.errors import UnpackDecodeError
from core.types import ItemTag
from transforms.item_classifier import find_tag_value


def decode_metadata(payload: bytes) -> dict[str, Any]:
    """Decode a metadata payload as a JSON object.

    Args:
        payload: Raw metadata item payload.

    Returns:
        Decoded object with key order preserved.

    Raises:
        UnpackDecodeError: If payload is not UTF-8 JSON the parser accepts, or not an object.
    """
    try:
        decoded = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, ValueError, RecursionError) as error:
        raise UnpackDecodeError(f"Failed to decode metadata payload as JSON: {error}.") from error
    if not isinstance(decoded, dict):
        raise UnpackDecodeError(
            f"Failed to decode metadata payload: expected JSON object, got {type(decoded).__name__}."
        )
    return decoded


def encrypted_placeholder(tags: Iterable[ItemTag]) -> dict[str, object]:
    """Build the redaction placeholder for encrypted metadata.

    Args:
        tags: Metadata item tags carrying cipher details.

    Returns:
        Placeholder object without a data reference.
    """
    tag_list = tuple(tags)
    return {
        "encrypted": True,
        "cipher": find_tag_value(tag_list, CIPHER_TAG_NAME),
        "cipherIv": find_tag_value(tag_list, CIPHER_IV_TAG_NAME),
    }


def referenced_data_item_id(metadata: Mapping[str, object] | None) -> str | None:
    """Return the dataTxId reference when it is a non-empty string."""
    if metadata is None:
        return None
    reference = metadata.get(DATA_TX_ID_FIELD)
    if isinstance(reference, str) and reference:
        return reference
    return None
