"""Public SDK surface for the bundle unpacker.

This module provides a stable import path for library users.
It re-exports the client, typed models, and the core building blocks.
"""

from __future__ import annotations

from core.config import UnpackConfig
from core.errors import (
    UnpackArgumentError,
    UnpackDecodeError,
    UnpackError,
    UnpackExtractionError,
    UnpackFetchError,
    UnpackFormatError,
    UnpackVerificationError,
)
from core.types import (
    BundleItem,
    ByteRange,
    ContainerResult,
    ItemTag,
    ReconciledRecord,
    UnpackRunReport,
)
from ingest.bundle_reader import BundleFile, read_bundle, read_bundle_bytes
from ingest.payload_extractor import extract_payload, read_range
from ingest.pipeline import ContainerUnpackRunner, unpack_bundles, unpack_container
from store.unpack_sdk import UnpackClient
from transforms.item_classifier import classify_item, is_encrypted
from transforms.reconciliation import ReconciliationEngine

__all__ = [
    "BundleFile",
    "BundleItem",
    "ByteRange",
    "ContainerResult",
    "ContainerUnpackRunner",
    "ItemTag",
    "ReconciledRecord",
    "ReconciliationEngine",
    "UnpackArgumentError",
    "UnpackClient",
    "UnpackConfig",
    "UnpackDecodeError",
    "UnpackError",
    "UnpackExtractionError",
    "UnpackFetchError",
    "UnpackFormatError",
    "UnpackRunReport",
    "UnpackVerificationError",
    "classify_item",
    "extract_payload",
    "is_encrypted",
    "read_bundle",
    "read_bundle_bytes",
    "read_range",
    "unpack_bundles",
    "unpack_container",
]
