"""Per-bundle artifact materialization.

This module writes item payload files and ``.TAGS.json`` record files
into one bundle's output directory. Every write replaces any existing
file at the same path, so re-running an unpack is safe.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

from core.constants import TAGS_FILE_SUFFIX
from core.types import ReconciledRecord
from ingest.bundle_source import ensure_directory
from store.record_payload import format_json, record_to_payload


class ArtifactWriter:
    """Filesystem writer scoped to one bundle output directory."""

    def __init__(self, output_dir: Path) -> None:
        self._output_dir = ensure_directory(output_dir)
        self._written_count = 0

    @property
    def output_dir(self) -> Path:
        """Return the bundle output directory."""
        return self._output_dir

    @property
    def written_count(self) -> int:
        """Return number of files written by this writer."""
        return self._written_count

    def write_payload(self, item_id: str, data: bytes) -> Path:
        """Write raw item payload bytes under the item id.

        Args:
            item_id: Item id used as file name.
            data: Payload bytes.

        Returns:
            Written file path.
        """
        return self._write(self.payload_path(item_id), data)

    def write_metadata_payload(self, item_id: str, metadata: Mapping[str, object]) -> Path:
        """Write decoded metadata as JSON under the metadata item id."""
        return self._write(self.payload_path(item_id), format_json(dict(metadata)).encode("utf-8"))

    def write_record(self, record: ReconciledRecord) -> Path:
        """Write a reconciled record as ``<record_key>.TAGS.json``.

        Args:
            record: Record emitted by the reconciliation engine.

        Returns:
            Written file path.
        """
        text = format_json(record_to_payload(record))
        return self._write(self.record_path(record.record_key), text.encode("utf-8"))

    def payload_path(self, item_id: str) -> Path:
        """Return the payload file path for an item id."""
        return self._output_dir / item_id

    def record_path(self, record_key: str) -> Path:
        """Return the record file path for a record key."""
        return self._output_dir / f"{record_key}{TAGS_FILE_SUFFIX}"

    def _write(self, path: Path, data: bytes) -> Path:
        path.write_bytes(data)
        self._written_count += 1
        return path
