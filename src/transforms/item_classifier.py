"""Bundle item classification by tag set.

This module decides whether an item carries ArFS metadata, application
data awaiting metadata, or neither. Classification is pure and total.
"""

from __future__ import annotations

import re
from typing import Iterable, Pattern

from core.constants import (
    APP_NAME_TAG_NAME,
    CIPHER_TAG_NAME,
    DEFAULT_DATA_APP_PATTERN,
    METADATA_TAG_NAME,
)
from core.types import ItemCategory, ItemTag

DEFAULT_DATA_APP_RE = re.compile(DEFAULT_DATA_APP_PATTERN)


def classify_item(
    tags: Iterable[ItemTag],
    data_app_pattern: Pattern[str] = DEFAULT_DATA_APP_RE,
) -> ItemCategory:
    """Classify an item from its tags.

    Args:
        tags: Ordered item tags.
        data_app_pattern: Regex an App-Name value must match for data items.

    Returns:
        ``"metadata"`` when an ArFS tag is present, ``"data"`` when the first
        App-Name tag matches the pattern, otherwise ``"ordinary"``.
    """
    tag_list = tuple(tags)
    if has_tag(tag_list, METADATA_TAG_NAME):
        return "metadata"
    app_name = find_tag_value(tag_list, APP_NAME_TAG_NAME)
    if app_name is not None and data_app_pattern.search(app_name):
        return "data"
    return "ordinary"


def is_encrypted(tags: Iterable[ItemTag]) -> bool:
    """Return whether a Cipher tag marks the payload as encrypted."""
    return has_tag(tags, CIPHER_TAG_NAME)


def has_tag(tags: Iterable[ItemTag], name: str) -> bool:
    """Return whether any tag has the given name."""
    return any(tag.name == name for tag in tags)


def find_tag_value(tags: Iterable[ItemTag], name: str) -> str | None:
    """Return the value of the first tag with the given name."""
    for tag in tags:
        if tag.name == name:
            return tag.value
    return None
