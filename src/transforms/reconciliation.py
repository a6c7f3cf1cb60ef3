"""Data/metadata item reconciliation for one bundle pass.

A data item and the metadata item describing it may appear in either
order within a bundle. The engine keeps one pending map per side and
merges the pair on arrival of whichever comes second. Items must be
fed strictly in stream order; one engine serves exactly one bundle.
"""

from __future__ import annotations

from typing import Mapping

from core.logging_config import get_logger
from core.types import (
    ItemTag,
    MetadataEntry,
    OrphanFlush,
    ReconciledRecord,
    TagsEntry,
)
from transforms.metadata_decoding import referenced_data_item_id

_LOGGER = get_logger(__name__)


class ReconciliationEngine:
    """Two-sided pending cache with merge-on-arrival."""

    def __init__(self, bundle_name: str = "") -> None:
        self._bundle_name = bundle_name
        self._pending_tags: dict[str, TagsEntry] = {}
        self._pending_metadata: dict[str, MetadataEntry] = {}

    @property
    def pending_tags_count(self) -> int:
        """Return number of data items still awaiting metadata."""
        return len(self._pending_tags)

    @property
    def pending_metadata_count(self) -> int:
        """Return number of metadata entries still awaiting data items."""
        return len(self._pending_metadata)

    def accept_data_item(
        self,
        item_id: str,
        tags: tuple[ItemTag, ...],
    ) -> tuple[ReconciledRecord, ...]:
        """Record a data item's tags, merging with pending metadata.

        Args:
            item_id: Data item id.
            tags: Data item tags.

        Returns:
            The merged record when metadata was already pending, else nothing.
        """
        entry = TagsEntry(item_id=item_id, tags=tags)
        metadata_entry = self._pending_metadata.pop(item_id, None)
        if metadata_entry is not None:
            return (_merged_record(entry, metadata_entry),)
        self._pending_tags[item_id] = entry
        return ()

    def accept_ordinary_item(
        self,
        item_id: str,
        tags: tuple[ItemTag, ...],
    ) -> tuple[ReconciledRecord, ...]:
        """Emit an ordinary item's tags immediately."""
        return (
            ReconciledRecord(
                kind="standalone_tags",
                record_key=item_id,
                data_item_id=item_id,
                tags=tags,
            ),
        )

    def accept_metadata_item(
        self,
        item_id: str,
        metadata: Mapping[str, object] | None,
    ) -> tuple[ReconciledRecord, ...]:
        """Record metadata, merging with pending tags when referenced.

        Metadata without a ``dataTxId`` (including absent, undecodable, or
        encrypted metadata) is emitted standalone. When two metadata items
        reference the same pending data item, the later one replaces the
        earlier one.

        Args:
            item_id: Metadata item id.
            metadata: Decoded metadata, encrypted placeholder, or None.

        Returns:
            Records to materialize now.
        """
        data_item_id = referenced_data_item_id(metadata)
        if metadata is None or data_item_id is None:
            return (
                ReconciledRecord(
                    kind="standalone_metadata",
                    record_key=item_id,
                    metadata_item_id=item_id,
                    metadata=metadata,
                ),
            )
        metadata_entry = MetadataEntry(metadata_item_id=item_id, metadata=metadata)
        tags_entry = self._pending_tags.pop(data_item_id, None)
        if tags_entry is not None:
            return (_merged_record(tags_entry, metadata_entry),)
        replaced = self._pending_metadata.get(data_item_id)
        if replaced is not None:
            _LOGGER.warning(
                "pending_metadata_replaced",
                bundle_name=self._bundle_name,
                data_item_id=data_item_id,
                replaced_metadata_item_id=replaced.metadata_item_id,
                metadata_item_id=item_id,
            )
        self._pending_metadata[data_item_id] = metadata_entry
        return ()

    def flush_orphans(self) -> OrphanFlush:
        """Emit unmatched data item tags and drop unmatched metadata.

        Returns:
            Orphan tags records in arrival order and the dropped metadata count.
        """
        records = tuple(
            ReconciledRecord(
                kind="orphan_tags",
                record_key=entry.item_id,
                data_item_id=entry.item_id,
                tags=entry.tags,
            )
            for entry in self._pending_tags.values()
        )
        dropped_metadata = len(self._pending_metadata)
        if dropped_metadata:
            _LOGGER.debug(
                "orphan_metadata_dropped",
                bundle_name=self._bundle_name,
                data_item_ids=sorted(self._pending_metadata),
            )
        self._pending_tags.clear()
        self._pending_metadata.clear()
        return OrphanFlush(records=records, dropped_metadata=dropped_metadata)


def _merged_record(tags_entry: TagsEntry, metadata_entry: MetadataEntry) -> ReconciledRecord:
    return ReconciledRecord(
        kind="merged",
        record_key=tags_entry.item_id,
        data_item_id=tags_entry.item_id,
        tags=tags_entry.tags,
        metadata_item_id=metadata_entry.metadata_item_id,
        metadata=metadata_entry.metadata,
    )
