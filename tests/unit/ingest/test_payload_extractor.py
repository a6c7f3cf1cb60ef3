"""Unit tests for payload byte-range extraction."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import UnpackExtractionError
from core.types import ByteRange
from ingest.payload_extractor import extract_payload, iter_range, read_range


def _write_container(tmp_path: Path) -> Path:
    container_path = tmp_path / "container.bin"
    container_path.write_bytes(b"0123456789abcdef")
    return container_path


def test_extract_payload_returns_inline_bytes(tmp_path: Path) -> None:
    """Inline locators should be returned without reading the file."""
    payload = extract_payload(tmp_path / "missing.bin", b"inline")

    assert payload == b"inline"


def test_extract_payload_reads_exact_range(tmp_path: Path) -> None:
    """Byte-range locators should read exactly the requested span."""
    container_path = _write_container(tmp_path)

    payload = extract_payload(container_path, ByteRange(offset=4, length=6))

    assert payload == b"456789"


def test_extract_payload_is_idempotent(tmp_path: Path) -> None:
    """Repeated extraction of one range should yield identical bytes."""
    container_path = _write_container(tmp_path)
    locator = ByteRange(offset=10, length=6)

    first = extract_payload(container_path, locator)
    second = extract_payload(container_path, locator)

    assert first == second == b"abcdef"


def test_read_range_allows_empty_range_at_end(tmp_path: Path) -> None:
    """A zero-length read at end-of-file should succeed."""
    container_path = _write_container(tmp_path)

    assert read_range(container_path, 16, 0) == b""


@pytest.mark.parametrize(("offset", "length"), [(10, 7), (17, 0), (-1, 2), (0, -1)])
def test_read_range_rejects_out_of_bounds(tmp_path: Path, offset: int, length: int) -> None:
    """Ranges past end-of-file or negative values should fail."""
    container_path = _write_container(tmp_path)

    with pytest.raises(UnpackExtractionError):
        read_range(container_path, offset, length)

    assert container_path.stat().st_size == 16


def test_iter_range_yields_whole_span(tmp_path: Path) -> None:
    """Streaming a range should reassemble to the same bytes."""
    container_path = _write_container(tmp_path)

    chunks = list(iter_range(container_path, 2, 12))

    assert b"".join(chunks) == b"23456789abcd"


def test_read_range_wraps_open_failures(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """A bundle that disappears after the size check should fail as an extraction error."""
    bundle_path = tmp_path / "bundle.bin"
    bundle_path.write_bytes(b"0123456789")
    monkeypatch.setattr("ingest.payload_extractor._check_range", lambda path, offset, length: None)
    bundle_path.unlink()

    with pytest.raises(UnpackExtractionError, match="Failed to read bundle file"):
        extract_payload(bundle_path, ByteRange(offset=0, length=4))
