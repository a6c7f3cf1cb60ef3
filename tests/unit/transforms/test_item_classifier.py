"""Unit tests for item classification."""

from __future__ import annotations

import re

import pytest

from core.types import ItemTag
from transforms.item_classifier import classify_item, find_tag_value, is_encrypted


@pytest.mark.parametrize(
    ("tags", "expected"),
    [
        ((), "ordinary"),
        ((ItemTag("ArFS", ""),), "metadata"),
        ((ItemTag("App-Name", "ArDrive-Web"), ItemTag("ArFS", "0.11")), "metadata"),
        ((ItemTag("App-Name", "ArDrive"),), "data"),
        ((ItemTag("App-Name", "ArDrive-CLI"),), "data"),
        ((ItemTag("App-Name", "SmartWeaveAction"),), "ordinary"),
        ((ItemTag("Content-Type", "ArDrive"),), "ordinary"),
    ],
)
def test_classify_item_uses_tag_names(tags: tuple[ItemTag, ...], expected: str) -> None:
    """ArFS wins over App-Name; App-Name must match the app pattern."""
    assert classify_item(tags) == expected


def test_classify_item_uses_first_app_name() -> None:
    """Repeated App-Name tags should resolve first-match-wins."""
    tags = (ItemTag("App-Name", "Other"), ItemTag("App-Name", "ArDrive"))

    assert classify_item(tags) == "ordinary"


def test_classify_item_accepts_custom_pattern() -> None:
    """A configured pattern should replace the ArDrive default."""
    tags = (ItemTag("App-Name", "Akord"),)

    assert classify_item(tags, re.compile("^Akord")) == "data"


def test_is_encrypted_detects_cipher_tag() -> None:
    """Only a Cipher tag marks a payload as encrypted."""
    assert is_encrypted((ItemTag("Cipher", "AES256-GCM"),))
    assert not is_encrypted((ItemTag("Cipher-IV", "x"),))


def test_find_tag_value_returns_first_match() -> None:
    """Tag lookup should return the first value for a repeated name."""
    tags = (ItemTag("Tag", "first"), ItemTag("Tag", "second"))

    assert find_tag_value(tags, "Tag") == "first" and find_tag_value(tags, "Missing") is None
