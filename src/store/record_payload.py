"""Shared JSON serialization for reconciled records.

This module centralizes the on-disk JSON shape of tags and metadata
records. It is used by the artifact writer for every record file.
"""

from __future__ import annotations

import json
from typing import Iterable, Mapping

from core.types import ItemTag, ReconciledRecord


def tags_to_payload(tags: Iterable[ItemTag]) -> list[dict[str, str]]:
    """Serialize tags as an ordered list of name/value objects.

    Args:
        tags: Ordered item tags.

    Returns:
        JSON-safe list; repeated names are kept.
    """
    return [{"name": tag.name, "value": tag.value} for tag in tags]


def record_to_payload(record: ReconciledRecord) -> dict[str, object]:
    """Serialize a reconciled record into its JSON-safe shape.

    Args:
        record: Record emitted by the reconciliation engine.

    Returns:
        ``{dataItemTxId, tags}`` for tags records,
        ``{dataItemTxId, tags, metaDataItemTxId, metadata}`` for merged
        records, and ``{metaDataItemTxId, metadata}`` for standalone metadata.
    """
    if record.kind == "standalone_metadata":
        return {
            "metaDataItemTxId": record.metadata_item_id,
            "metadata": _metadata_payload(record.metadata),
        }
    payload: dict[str, object] = {
        "dataItemTxId": record.data_item_id,
        "tags": tags_to_payload(record.tags or ()),
    }
    if record.kind == "merged":
        payload["metaDataItemTxId"] = record.metadata_item_id
        payload["metadata"] = _metadata_payload(record.metadata)
    return payload


def format_json(payload: object) -> str:
    """Render a payload as tab-indented JSON text with a trailing newline."""
    return json.dumps(payload, indent="\t", ensure_ascii=False) + "\n"


def _metadata_payload(metadata: Mapping[str, object] | None) -> dict[str, object] | None:
    if metadata is None:
        return None
    return dict(metadata)
