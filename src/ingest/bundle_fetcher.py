"""Gateway retrieval of bundles by transaction id.

This module downloads a bundle once into the local input directory.
Cached bundles are reused; failed fetches are never retried.
"""

from __future__ import annotations

import os
from pathlib import Path

import httpx

from core.bundle_id import validate_bundle_id
from core.config import UnpackConfig
from core.constants import PARTIAL_DOWNLOAD_SUFFIX
from core.errors import UnpackFetchError
from core.logging_config import get_logger
from ingest.bundle_source import ensure_directory

_LOGGER = get_logger(__name__)


def cached_bundle_path(bundle_id: str, config: UnpackConfig) -> Path:
    """Return where a bundle id is stored in the input directory."""
    return config.input_dir / bundle_id


def fetch_bundle(
    bundle_id: str,
    config: UnpackConfig,
    client: httpx.Client | None = None,
) -> Path:
    """Fetch a bundle into the input directory unless already cached.

    Args:
        bundle_id: 43-character transaction id of the bundle.
        config: Runtime configuration with gateway and input dir.
        client: Optional preconfigured HTTP client.

    Returns:
        Local path of the bundle file.

    Raises:
        UnpackArgumentError: If bundle_id is malformed.
        UnpackFetchError: If the gateway request fails.
    """
    validate_bundle_id(bundle_id)
    target_path = cached_bundle_path(bundle_id, config)
    if target_path.is_file():
        _LOGGER.info("bundle_cache_hit", bundle_id=bundle_id, path=str(target_path))
        return target_path
    ensure_directory(config.input_dir)
    url = f"{config.gateway_url}/{bundle_id}"
    _LOGGER.info("bundle_fetch_started", bundle_id=bundle_id, url=url)
    if client is not None:
        byte_count = _download(client, url, target_path)
    else:
        with httpx.Client(timeout=config.fetch_timeout_seconds) as owned_client:
            byte_count = _download(owned_client, url, target_path)
    _LOGGER.info("bundle_fetched", bundle_id=bundle_id, path=str(target_path), bytes=byte_count)
    return target_path


def partial_download_path(target_path: Path) -> Path:
    """Return the hidden partial file a download streams into."""
    return target_path.with_name(f".{target_path.name}{PARTIAL_DOWNLOAD_SUFFIX}")


def _download(client: httpx.Client, url: str, target_path: Path) -> int:
    """Stream a URL into target_path through a partial file."""
    partial_path = partial_download_path(target_path)
    byte_count = 0
    try:
        with client.stream("GET", url, follow_redirects=True) as response:
            response.raise_for_status()
            with partial_path.open("wb") as handle:
                for chunk in response.iter_bytes():
                    handle.write(chunk)
                    byte_count += len(chunk)
        os.replace(partial_path, target_path)
    except httpx.HTTPStatusError as error:
        raise UnpackFetchError(
            f"Failed to fetch bundle from {url}: gateway returned "
            f"HTTP {error.response.status_code}. Check the id and gateway URL."
        ) from error
    except httpx.HTTPError as error:
        raise UnpackFetchError(
            f"Failed to fetch bundle from {url}: {error}. "
            "Check network access or set UNPACK_GATEWAY_URL."
        ) from error
    finally:
        partial_path.unlink(missing_ok=True)
    return byte_count
