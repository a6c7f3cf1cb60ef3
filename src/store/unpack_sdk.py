"""Python SDK for bundle unpack operations.

This module exposes high-level APIs for listing, fetching, unpacking,
and exporting bundles backed by the ingest pipeline.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import httpx

from core.bundle_id import is_bundle_id
from core.config import UnpackConfig
from core.errors import UnpackArgumentError, UnpackStoreError
from core.logging_config import get_logger
from core.s3_uri import parse_s3_uri
from core.types import ContainerResult, UnpackRunReport
from ingest.bundle_fetcher import cached_bundle_path, fetch_bundle
from ingest.bundle_source import list_bundle_files
from ingest.pipeline import unpack_bundles, unpack_container
from store.s3_export import create_s3_client, upload_directory

_LOGGER = get_logger(__name__)


class UnpackClient:
    """Primary SDK entry point for unpack workflows."""

    def __init__(
        self,
        config: UnpackConfig | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
            http_client: Optional HTTP client used for gateway fetches.
        """
        self._config = config or UnpackConfig.from_env()
        self._http_client = http_client

    @property
    def config(self) -> UnpackConfig:
        """Return the active runtime configuration."""
        return self._config

    def list_bundles(self) -> list[str]:
        """List bundle file names present in the input directory."""
        return list_bundle_files(self._config.input_dir)

    def fetch(self, bundle_id: str) -> Path:
        """Fetch a bundle by id unless it is already cached locally.

        Args:
            bundle_id: 43-character bundle transaction id.

        Returns:
            Local bundle path.

        Raises:
            UnpackArgumentError: If bundle_id is malformed.
            UnpackFetchError: If the gateway request fails.
        """
        return fetch_bundle(bundle_id, self._config, self._http_client)

    def process_container(self, bundle_id_or_path: str) -> ContainerResult:
        """Unpack one bundle given an id or a file path.

        A well-formed id that is not an existing path resolves to the
        input directory, fetching it from the gateway when missing.

        Args:
            bundle_id_or_path: Bundle id or bundle file path.

        Returns:
            Per-bundle unpack counts.

        Raises:
            UnpackError: If fetch, parsing, or verification fails.
        """
        return unpack_container(self._resolve_bundle_path(bundle_id_or_path), self._config)

    def process_all(self, bundle_id: str | None = None) -> UnpackRunReport:
        """Unpack every local bundle, fetching ``bundle_id`` first if given.

        Args:
            bundle_id: Optional bundle id to fetch before the run.

        Returns:
            Aggregate run report.

        Raises:
            UnpackArgumentError: If bundle_id is malformed.
            UnpackFetchError: If the gateway request fails.
        """
        if bundle_id is not None:
            self.fetch(bundle_id)
        bundle_paths = [self._config.input_dir / name for name in self.list_bundles()]
        return unpack_bundles(bundle_paths, self._config)

    def export_output(self, bundle_name: str, output_uri: str) -> int:
        """Upload one bundle's unpacked artifacts to S3.

        Args:
            bundle_name: Bundle whose output directory is exported.
            output_uri: Destination ``s3://bucket/prefix`` URI.

        Returns:
            Number of uploaded files.

        Raises:
            UnpackStoreError: If the URI is invalid, output is missing, or upload fails.
        """
        location = parse_s3_uri(output_uri)
        bundle_output_dir = self._config.output_dir / bundle_name
        if not bundle_output_dir.is_dir():
            raise UnpackStoreError(
                f"Cannot export bundle {bundle_name}: output directory {bundle_output_dir} "
                "does not exist. Unpack the bundle before exporting."
            )
        s3_client = create_s3_client(self._config)
        prefix = f"{location.prefix}/{bundle_name}"
        uploaded = upload_directory(s3_client, bundle_output_dir, location.bucket, prefix)
        _LOGGER.info(
            "output_exported",
            bundle_name=bundle_name,
            output_uri=f"s3://{location.bucket}/{prefix}",
            file_count=uploaded,
        )
        return uploaded

    def with_directories(
        self,
        input_dir: str | None = None,
        output_dir: str | None = None,
    ) -> "UnpackClient":
        """Clone the client with different input/output directories.

        Args:
            input_dir: Optional new bundle input directory.
            output_dir: Optional new output root directory.

        Returns:
            New SDK client instance.
        """
        updated_config = self._config
        if input_dir:
            updated_config = replace(updated_config, input_dir=Path(input_dir).expanduser().resolve())
        if output_dir:
            updated_config = replace(
                updated_config, output_dir=Path(output_dir).expanduser().resolve()
            )
        return UnpackClient(updated_config, self._http_client)

    def _resolve_bundle_path(self, bundle_id_or_path: str) -> Path:
        candidate = Path(bundle_id_or_path).expanduser()
        if candidate.is_file():
            return candidate
        if is_bundle_id(bundle_id_or_path):
            cached_path = cached_bundle_path(bundle_id_or_path, self._config)
            if cached_path.is_file():
                return cached_path
            return self.fetch(bundle_id_or_path)
        raise UnpackArgumentError(
            f"Bundle '{bundle_id_or_path}' is neither an existing file nor a valid bundle id. "
            "Pass a bundle file path or a 43-character transaction id."
        )
