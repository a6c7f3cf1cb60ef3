"""Unit tests for metadata payload decoding."""

from __future__ import annotations

import pytest

from core.errors import UnpackDecodeError
from core.types import ItemTag
from transforms.metadata_decoding import (
    decode_metadata,
    encrypted_placeholder,
    referenced_data_item_id,
)

def test_decode_metadata_preserves_unknown_fields() -> None:
    """Arbitrary metadata fields should be kept in original order."""
    metadata = decode_metadata(b'{"name": "x.txt", "size": 3, "dataTxId": "D1"}')

    assert list(metadata) == ["name", "size", "dataTxId"]

@pytest.mark.parametrize("payload", [b"{broken", b"[1, 2]", b"\xff\xfe", b'"text"'])
def test_decode_metadata_rejects_non_objects(payload: bytes) -> None:
    """Invalid JSON or non-object JSON should raise a decode error."""
    with pytest.raises(UnpackDecodeError):
        decode_metadata(payload)

def test_encrypted_placeholder_has_no_data_reference() -> None:
    """Encrypted metadata placeholders never carry a dataTxId."""
    placeholder = encrypted_placeholder((ItemTag("Cipher", "AES256-GCM"),))

    assert placeholder["encrypted"] is True and referenced_data_item_id(placeholder) is None

@pytest.mark.parametrize(
    ("metadata", "expected"),
    [(None, None), ({}, None), ({"dataTxId": ""}, None), ({"dataTxId": 7}, None), ({"dataTxId": "D1"}, "D1")],
)
def test_referenced_data_item_id_requires_non_empty_string(metadata, expected) -> None:
    """Only non-empty string references count as cross-references."""
    assert referenced_data_item_id(metadata) == expected
