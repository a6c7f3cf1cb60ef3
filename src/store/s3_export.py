"""S3 export helpers for unpacked bundle output.

This module builds a boto3 client from the unpack config and publishes
one bundle output directory, file by file, under a key prefix.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from core.config import UnpackConfig
from core.constants import TAGS_FILE_SUFFIX
from core.errors import UnpackDependencyError, UnpackStoreError

_RECORD_CONTENT_TYPE = "application/json"
_PAYLOAD_CONTENT_TYPE = "application/octet-stream"


def create_s3_client(config: UnpackConfig) -> Any:
    """Create boto3 S3 client for exports.

    Args:
        config: Runtime config with optional session settings.

    Returns:
        Boto3 S3 client.

    Raises:
        UnpackDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise UnpackDependencyError(
            "S3 export requires boto3, but it is not installed. "
            "Install boto3 to export unpacked bundles to s3:// destinations."
        ) from error
    session_kwargs: dict[str, str] = {}
    if config.s3_profile:
        session_kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        session_kwargs["region_name"] = config.s3_region
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")


def upload_directory(s3_client: Any, local_dir: Path, bucket: str, prefix: str) -> int:
    """Upload one bundle output directory to S3.

    Tag records are stored as JSON objects; item payloads keep an opaque
    binary content type since their real type lives in the item tags.

    Args:
        s3_client: Boto3 S3 client.
        local_dir: Local bundle output directory.
        bucket: Destination bucket.
        prefix: Destination key prefix.

    Returns:
        Number of uploaded files.

    Raises:
        UnpackStoreError: If any upload fails.
    """
    artifact_paths = [path for path in sorted(local_dir.iterdir()) if path.is_file()]
    for artifact_path in artifact_paths:
        object_key = f"{prefix.rstrip('/')}/{artifact_path.name}"
        try:
            s3_client.upload_file(
                str(artifact_path),
                bucket,
                object_key,
                ExtraArgs={"ContentType": _content_type(artifact_path)},
            )
        except Exception as error:
            raise UnpackStoreError(
                f"Failed to export artifact {artifact_path.name} to s3://{bucket}/{object_key}: "
                f"{error}. Check AWS credentials and retry export."
            ) from error
    return len(artifact_paths)


def _content_type(artifact_path: Path) -> str:
    if artifact_path.name.endswith(TAGS_FILE_SUFFIX):
        return _RECORD_CONTENT_TYPE
    return _PAYLOAD_CONTENT_TYPE
