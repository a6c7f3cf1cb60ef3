"""Item payload extraction from bundle files.

This module performs bounded random-access reads against a bundle.
Each read opens, seeks, reads, and releases its own file handle.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from core.constants import READ_CHUNK_BYTES
from core.errors import UnpackExtractionError
from core.types import ByteRange, PayloadLocator


def extract_payload(bundle_path: Path, locator: PayloadLocator) -> bytes:
    """Return the exact payload bytes for an item.

    Args:
        bundle_path: Bundle file the locator refers to.
        locator: Inline bytes or byte range into the bundle.

    Returns:
        Payload bytes.

    Raises:
        UnpackExtractionError: If the byte range is outside the file.
    """
    if isinstance(locator, ByteRange):
        return read_range(bundle_path, locator.offset, locator.length)
    return bytes(locator)


def read_range(path: Path, offset: int, length: int) -> bytes:
    """Read exactly ``length`` bytes starting at ``offset``.

    Args:
        path: File to read.
        offset: Absolute start offset.
        length: Number of bytes to read.

    Returns:
        The requested bytes.

    Raises:
        UnpackExtractionError: If the range exceeds the file or the read is short.
    """
    _check_range(path, offset, length)
    try:
        with path.open("rb") as handle:
            handle.seek(offset)
            data = handle.read(length)
    except OSError as error:
        raise UnpackExtractionError(f"Failed to read bundle file {path}: {error}.") from error
    if len(data) != length:
        raise UnpackExtractionError(
            f"Failed to read {length} bytes at offset {offset} from {path}: "
            f"only {len(data)} bytes available. The bundle is truncated."
        )
    return data


def iter_range(path: Path, offset: int, length: int) -> Iterator[bytes]:
    """Yield a byte range in bounded chunks.

    Args:
        path: File to read.
        offset: Absolute start offset.
        length: Number of bytes to yield in total.

    Yields:
        Consecutive chunks of at most one read buffer each.

    Raises:
        UnpackExtractionError: If the range exceeds the file or the read is short.
    """
    _check_range(path, offset, length)
    remaining = length
    try:
        handle = path.open("rb")
    except OSError as error:
        raise UnpackExtractionError(f"Failed to read bundle file {path}: {error}.") from error
    with handle:
        handle.seek(offset)
        while remaining > 0:
            chunk = handle.read(min(READ_CHUNK_BYTES, remaining))
            if not chunk:
                raise UnpackExtractionError(
                    f"Failed to stream {length} bytes at offset {offset} from {path}: "
                    f"file ended with {remaining} bytes missing."
                )
            remaining -= len(chunk)
            yield chunk


def _check_range(path: Path, offset: int, length: int) -> None:
    if offset < 0 or length < 0:
        raise UnpackExtractionError(
            f"Invalid byte range offset={offset} length={length} for {path}: "
            "offset and length must be non-negative."
        )
    try:
        file_size = path.stat().st_size
    except OSError as error:
        raise UnpackExtractionError(f"Failed to stat bundle file {path}: {error}.") from error
    if offset + length > file_size:
        raise UnpackExtractionError(
            f"Byte range {offset}+{length} exceeds size {file_size} of {path}. "
            "The bundle is truncated or the item locator is corrupt."
        )
