"""Shared typed models.

This module defines immutable data models used by ingest, transforms,
store, and SDK layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Mapping, Union

ItemCategory = Literal["metadata", "data", "ordinary"]
RecordKind = Literal["standalone_tags", "orphan_tags", "merged", "standalone_metadata"]


@dataclass(frozen=True)
class ItemTag:
    """One name/value tag pair attached to a bundle item."""

    name: str
    value: str


@dataclass(frozen=True)
class ByteRange:
    """Payload location inside a specific bundle file.

    Attributes:
        offset: Absolute byte offset of the payload in the bundle file.
        length: Payload length in bytes.
    """

    offset: int
    length: int


PayloadLocator = Union[bytes, ByteRange]


@dataclass(frozen=True)
class BundleItem:
    """One signed item read from a bundle.

    Attributes:
        item_id: Base64url item identifier, unique within the bundle.
        tags: Ordered tags; names may repeat.
        payload: Inline payload bytes or a byte range into the bundle file.
    """

    item_id: str
    tags: tuple[ItemTag, ...]
    payload: PayloadLocator


@dataclass(frozen=True)
class TagsEntry:
    """Pending data item tags awaiting their metadata item."""

    item_id: str
    tags: tuple[ItemTag, ...]


@dataclass(frozen=True)
class MetadataEntry:
    """Pending metadata awaiting the data item it references."""

    metadata_item_id: str
    metadata: Mapping[str, object]


@dataclass(frozen=True)
class ReconciledRecord:
    """Tags/metadata side-channel record ready to materialize.

    Attributes:
        kind: Which emission path produced the record.
        record_key: Item id the record file is named after.
        data_item_id: Data item id for tag-bearing records.
        tags: Data item tags for tag-bearing records.
        metadata_item_id: Metadata item id for metadata-bearing records.
        metadata: Decoded metadata, placeholder, or None when absent.
    """

    kind: RecordKind
    record_key: str
    data_item_id: str | None = None
    tags: tuple[ItemTag, ...] | None = None
    metadata_item_id: str | None = None
    metadata: Mapping[str, object] | None = None


@dataclass(frozen=True)
class OrphanFlush:
    """End-of-stream flush outcome for one bundle.

    Attributes:
        records: Orphan tags records to materialize.
        dropped_metadata: Count of pending metadata entries discarded.
    """

    records: tuple[ReconciledRecord, ...]
    dropped_metadata: int


@dataclass(frozen=True)
class ContainerResult:
    """Outcome of unpacking one bundle.

    Attributes:
        bundle_name: Bundle file name, also the output folder name.
        output_dir: Directory holding the bundle's artifacts.
        artifacts_written: Payload files plus record files written.
        orphans_flushed: Orphan tags records written at end-of-stream.
        merged_count: Data/metadata pairs reconciled into one record.
        extraction_failures: Items whose payload could not be read.
        orphaned_metadata_dropped: Metadata entries never matched.
    """

    bundle_name: str
    output_dir: Path
    artifacts_written: int
    orphans_flushed: int
    merged_count: int
    extraction_failures: int
    orphaned_metadata_dropped: int


@dataclass(frozen=True)
class ContainerFailure:
    """Bundle that could not be unpacked and why."""

    bundle_name: str
    error: str


@dataclass(frozen=True)
class UnpackRunReport:
    """Aggregate outcome of one unpack run over many bundles."""

    results: tuple[ContainerResult, ...]
    failures: tuple[ContainerFailure, ...]

    @property
    def failed_count(self) -> int:
        """Return number of bundles that failed."""
        return len(self.failures)
