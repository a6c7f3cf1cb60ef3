"""Unit tests for S3 export of unpacked output."""

from __future__ import annotations

import pytest

from core.errors import UnpackStoreError
from store.s3_export import upload_directory


class _RecordingS3Client:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[str, str, str]] = []

    def upload_file(self, filename: str, bucket: str, key: str, ExtraArgs=None) -> None:
        if self.fail:
            raise RuntimeError("access denied")
        self.calls.append((bucket, key, ExtraArgs["ContentType"]))


def test_upload_directory_sets_content_types(tmp_path) -> None:
    """Records should upload as JSON and payloads as opaque bytes."""
    (tmp_path / "D1").write_bytes(b"payload")
    (tmp_path / "D1.TAGS.json").write_text("{}\n", encoding="utf-8")
    s3_client = _RecordingS3Client()

    uploaded = upload_directory(s3_client, tmp_path, "archive", "unpacked/bundle-a/")

    assert uploaded == 2
    assert s3_client.calls == [
        ("archive", "unpacked/bundle-a/D1", "application/octet-stream"),
        ("archive", "unpacked/bundle-a/D1.TAGS.json", "application/json"),
    ]


def test_upload_directory_wraps_client_errors(tmp_path) -> None:
    """Client failures should surface as store errors."""
    (tmp_path / "D1").write_bytes(b"payload")

    with pytest.raises(UnpackStoreError, match="D1"):
        upload_directory(_RecordingS3Client(fail=True), tmp_path, "archive", "unpacked")
