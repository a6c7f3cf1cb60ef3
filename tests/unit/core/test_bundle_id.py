"""Unit tests for bundle id helpers."""

from __future__ import annotations

import pytest

from core.bundle_id import (
    encode_item_id,
    is_bundle_id,
    item_id_from_signature,
    validate_bundle_id,
)
from core.errors import UnpackArgumentError

VALID_ID = "bNbA3TEQVL60xlgCcqdz4ZPHFZ711cZ3hmkpGttDt_U"


def test_is_bundle_id_accepts_43_base64url_characters() -> None:
    """A 43-character base64url token should be accepted."""
    assert is_bundle_id(VALID_ID)


@pytest.mark.parametrize(
    "value",
    ["", VALID_ID[:-1], VALID_ID + "A", VALID_ID[:-1] + "+", VALID_ID[:-1] + "="],
)
def test_validate_bundle_id_rejects_malformed_values(value: str) -> None:
    """Wrong lengths and non-base64url characters should be rejected."""
    with pytest.raises(UnpackArgumentError):
        validate_bundle_id(value)

    assert is_bundle_id(value) is False


def test_item_id_from_signature_is_43_characters() -> None:
    """Derived item ids should be unpadded 43-character base64url."""
    item_id = item_id_from_signature(b"signature-bytes")

    assert len(item_id) == 43 and is_bundle_id(item_id)


def test_encode_item_id_strips_padding() -> None:
    """Raw 32-byte ids should encode without trailing padding."""
    encoded = encode_item_id(bytes(range(32)))

    assert not encoded.endswith("=") and len(encoded) == 43
