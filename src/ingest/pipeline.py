"""Bundle unpack orchestration.

This module coordinates bundle parsing, verification, item
classification, payload extraction, reconciliation, and artifact
writes. Items of one bundle run sequentially through a single
reconciliation engine; separate bundles run in parallel workers
that share no mutable state.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
import re
from typing import Iterable, Mapping, Pattern, Sequence

from core.config import UnpackConfig
from core.errors import UnpackDecodeError, UnpackError, UnpackExtractionError
from core.logging_config import get_logger
from core.types import (
    BundleItem,
    ContainerFailure,
    ContainerResult,
    ReconciledRecord,
    UnpackRunReport,
)
from ingest.bundle_reader import read_bundle
from ingest.payload_extractor import extract_payload
from store.artifact_writer import ArtifactWriter
from transforms.item_classifier import classify_item, is_encrypted
from transforms.metadata_decoding import decode_metadata, encrypted_placeholder
from transforms.reconciliation import ReconciliationEngine

_LOGGER = get_logger(__name__)


class ContainerUnpackRunner:
    """Stateful runner for one bundle's item pass."""

    def __init__(
        self,
        bundle_path: Path,
        output_dir: Path,
        data_app_pattern: Pattern[str],
    ) -> None:
        self._bundle_path = bundle_path
        self._bundle_name = bundle_path.name
        self._data_app_pattern = data_app_pattern
        self._engine = ReconciliationEngine(self._bundle_name)
        self._writer = ArtifactWriter(output_dir)
        self._merged_count = 0
        self._extraction_failures = 0

    def run(self, items: Iterable[BundleItem]) -> ContainerResult:
        """Process items in stream order, then flush orphans.

        Args:
            items: Bundle items in the order they appear in the bundle.

        Returns:
            Counts of artifacts and reconciliation outcomes.
        """
        for item in items:
            self._process_item(item)
        orphan_flush = self._engine.flush_orphans()
        for record in orphan_flush.records:
            self._writer.write_record(record)
        return ContainerResult(
            bundle_name=self._bundle_name,
            output_dir=self._writer.output_dir,
            artifacts_written=self._writer.written_count,
            orphans_flushed=len(orphan_flush.records),
            merged_count=self._merged_count,
            extraction_failures=self._extraction_failures,
            orphaned_metadata_dropped=orphan_flush.dropped_metadata,
        )

    def _process_item(self, item: BundleItem) -> None:
        category = classify_item(item.tags, self._data_app_pattern)
        payload = self._extract(item)
        if category == "metadata":
            metadata = self._load_metadata(item, payload)
            if payload is not None:
                self._write_metadata_item_payload(item, payload, metadata)
            records = self._engine.accept_metadata_item(item.item_id, metadata)
        else:
            if payload is not None:
                self._writer.write_payload(item.item_id, payload)
            if category == "data":
                records = self._engine.accept_data_item(item.item_id, item.tags)
            else:
                records = self._engine.accept_ordinary_item(item.item_id, item.tags)
        self._write_records(records)

    def _extract(self, item: BundleItem) -> bytes | None:
        try:
            return extract_payload(self._bundle_path, item.payload)
        except UnpackExtractionError as error:
            self._extraction_failures += 1
            _LOGGER.warning(
                "payload_extraction_failed",
                bundle_name=self._bundle_name,
                item_id=item.item_id,
                error=str(error),
            )
            return None

    def _load_metadata(
        self,
        item: BundleItem,
        payload: bytes | None,
    ) -> Mapping[str, object] | None:
        if is_encrypted(item.tags):
            return encrypted_placeholder(item.tags)
        if payload is None:
            return None
        try:
            return decode_metadata(payload)
        except UnpackDecodeError as error:
            _LOGGER.warning(
                "metadata_decode_failed",
                bundle_name=self._bundle_name,
                item_id=item.item_id,
                error=str(error),
            )
            return None

    def _write_metadata_item_payload(
        self,
        item: BundleItem,
        payload: bytes,
        metadata: Mapping[str, object] | None,
    ) -> None:
        if metadata is None or is_encrypted(item.tags):
            self._writer.write_payload(item.item_id, payload)
            return
        self._writer.write_metadata_payload(item.item_id, metadata)

    def _write_records(self, records: tuple[ReconciledRecord, ...]) -> None:
        for record in records:
            self._writer.write_record(record)
            if record.kind == "merged":
                self._merged_count += 1


def unpack_container(bundle_path: Path, config: UnpackConfig) -> ContainerResult:
    """Unpack one bundle file into its output directory.

    Args:
        bundle_path: Bundle file to unpack.
        config: Runtime configuration.

    Returns:
        Per-bundle artifact and reconciliation counts.

    Raises:
        UnpackFormatError: If bundle framing is malformed.
        UnpackVerificationError: If an item fails verification.
    """
    bundle_name = bundle_path.name
    _LOGGER.info("container_unpack_started", bundle_name=bundle_name, path=str(bundle_path))
    bundle = read_bundle(bundle_path)
    if config.verify_signatures:
        bundle.verify()
    runner = ContainerUnpackRunner(
        bundle_path=bundle_path,
        output_dir=config.output_dir / bundle_name,
        data_app_pattern=re.compile(config.data_app_pattern),
    )
    result = runner.run(bundle.items)
    _log_container_completion(result, len(bundle.headers))
    return result


def unpack_bundles(bundle_paths: Sequence[Path], config: UnpackConfig) -> UnpackRunReport:
    """Unpack many bundles in parallel, isolating per-bundle failures.

    Args:
        bundle_paths: Bundle files to unpack.
        config: Runtime configuration.

    Returns:
        Results sorted by bundle name plus any per-bundle failures.
    """
    if not bundle_paths:
        return UnpackRunReport(results=(), failures=())
    results: list[ContainerResult] = []
    failures: list[ContainerFailure] = []
    worker_count = min(config.max_workers, len(bundle_paths))
    with ThreadPoolExecutor(max_workers=worker_count) as executor:
        futures = {
            executor.submit(unpack_container, bundle_path, config): bundle_path
            for bundle_path in bundle_paths
        }
        try:
            for future in as_completed(futures):
                bundle_path = futures[future]
                try:
                    results.append(future.result())
                except (UnpackError, OSError) as error:
                    _LOGGER.error(
                        "container_unpack_failed",
                        bundle_name=bundle_path.name,
                        error_type=type(error).__name__,
                        error=str(error),
                    )
                    failures.append(ContainerFailure(bundle_name=bundle_path.name, error=str(error)))
        except KeyboardInterrupt:
            executor.shutdown(wait=False, cancel_futures=True)
            raise
    return UnpackRunReport(
        results=tuple(sorted(results, key=lambda result: result.bundle_name)),
        failures=tuple(sorted(failures, key=lambda failure: failure.bundle_name)),
    )


def _log_container_completion(result: ContainerResult, item_count: int) -> None:
    """Log bundle completion with contextual counts."""
    _LOGGER.info(
        "container_unpack_completed",
        bundle_name=result.bundle_name,
        item_count=item_count,
        artifacts_written=result.artifacts_written,
        orphans_flushed=result.orphans_flushed,
        merged_count=result.merged_count,
        extraction_failures=result.extraction_failures,
        orphaned_metadata_dropped=result.orphaned_metadata_dropped,
        output_dir=str(result.output_dir),
    )
