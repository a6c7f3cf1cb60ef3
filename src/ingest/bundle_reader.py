"""ANS-104 bundle parsing and verification.

This module reads the bundle header and every item header, yielding
items whose payloads are byte-range locators into the bundle file.
Payload bytes are never loaded during parsing; verification streams
them through the deep hash in bounded chunks.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Protocol

from core.bundle_id import encode_item_id, item_id_from_signature
from core.constants import (
    ANCHOR_BYTES,
    BUNDLE_COUNT_BYTES,
    BUNDLE_ENTRY_ID_BYTES,
    BUNDLE_ENTRY_SIZE_BYTES,
    MAX_TAG_COUNT,
    MAX_TAG_NAME_BYTES,
    MAX_TAG_VALUE_BYTES,
    SIGNATURE_TYPE_BYTES,
    TAG_COUNT_BYTES,
    TAG_LENGTH_BYTES,
    TARGET_BYTES,
)
from core.errors import UnpackFormatError, UnpackVerificationError
from core.logging_config import get_logger
from core.types import BundleItem, ByteRange, ItemTag, PayloadLocator
from ingest.payload_extractor import iter_range
from ingest.signature import StreamedBlob, deep_hash, scheme_for, verify_signature
from ingest.tag_codec import decode_tags

_LOGGER = get_logger(__name__)
_ENTRY_BYTES = BUNDLE_ENTRY_SIZE_BYTES + BUNDLE_ENTRY_ID_BYTES


@dataclass(frozen=True)
class DataItemHeader:
    """Parsed header fields of one bundle item.

    Attributes:
        item_id: Id listed for the item in the bundle header.
        signature_type: Signature type code.
        signature: Raw signature bytes.
        owner: Raw owner public key bytes.
        target: Target bytes, empty when absent.
        anchor: Anchor bytes, empty when absent.
        raw_tags: Avro-encoded tag bytes as signed.
        tags: Decoded tags.
        data: Payload locator.
    """

    item_id: str
    signature_type: int
    signature: bytes
    owner: bytes
    target: bytes
    anchor: bytes
    raw_tags: bytes
    tags: tuple[ItemTag, ...]
    data: PayloadLocator


class BundleFile:
    """Parsed bundle with its items in stream order."""

    def __init__(self, headers: tuple[DataItemHeader, ...], bundle_path: Path | None = None) -> None:
        self._headers = headers
        self._bundle_path = bundle_path

    @property
    def items(self) -> tuple[BundleItem, ...]:
        """Return bundle items in stream order."""
        return tuple(
            BundleItem(item_id=header.item_id, tags=header.tags, payload=header.data)
            for header in self._headers
        )

    @property
    def headers(self) -> tuple[DataItemHeader, ...]:
        """Return full item headers in stream order."""
        return self._headers

    def verify(self) -> None:
        """Verify ids, tag limits, and signatures of every item.

        Raises:
            UnpackVerificationError: On the first item that fails a check.
        """
        for header in self._headers:
            self._verify_item(header)
        _LOGGER.debug(
            "bundle_verified",
            bundle_path=str(self._bundle_path) if self._bundle_path else None,
            item_count=len(self._headers),
        )

    def _verify_item(self, header: DataItemHeader) -> None:
        derived_id = item_id_from_signature(header.signature)
        if derived_id != header.item_id:
            raise UnpackVerificationError(
                f"Item id mismatch: bundle header lists {header.item_id} "
                f"but the signature hashes to {derived_id}."
            )
        _check_tag_limits(header)
        message = deep_hash(
            [
                b"dataitem",
                b"1",
                str(header.signature_type).encode("ascii"),
                header.owner,
                header.target,
                header.anchor,
                header.raw_tags,
                self._data_part(header.data),
            ]
        )
        if not verify_signature(header.signature_type, header.owner, header.signature, message):
            raise UnpackVerificationError(
                f"Invalid signature for item {header.item_id}. "
                "The bundle was modified or is not a valid ANS-104 bundle."
            )

    def _data_part(self, data: PayloadLocator) -> bytes | StreamedBlob:
        if isinstance(data, ByteRange):
            if self._bundle_path is None:
                raise UnpackVerificationError("Cannot verify byte-range items without a bundle path.")
            return StreamedBlob(
                length=data.length,
                chunks=iter_range(self._bundle_path, data.offset, data.length),
            )
        return data


def read_bundle(bundle_path: Path) -> BundleFile:
    """Parse a bundle file into byte-range items.

    Args:
        bundle_path: Path to an ANS-104 bundle file.

    Returns:
        Parsed bundle.

    Raises:
        UnpackFormatError: If framing is malformed or truncated.
    """
    file_size = bundle_path.stat().st_size
    with bundle_path.open("rb") as handle:
        headers = _parse_bundle(_FileSource(handle, file_size), inline=False)
    return BundleFile(headers, bundle_path)


def read_bundle_bytes(data: bytes) -> BundleFile:
    """Parse an in-memory bundle into inline-payload items.

    Args:
        data: Complete bundle bytes.

    Returns:
        Parsed bundle.

    Raises:
        UnpackFormatError: If framing is malformed or truncated.
    """
    return BundleFile(_parse_bundle(_BytesSource(data), inline=True))


class _ByteSource(Protocol):
    size: int

    def read_at(self, offset: int, length: int) -> bytes: ...


class _FileSource:
    def __init__(self, handle: BinaryIO, size: int) -> None:
        self._handle = handle
        self.size = size

    def read_at(self, offset: int, length: int) -> bytes:
        self._handle.seek(offset)
        return self._handle.read(length)


class _BytesSource:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self.size = len(data)

    def read_at(self, offset: int, length: int) -> bytes:
        return self._data[offset : offset + length]


class _ItemCursor:
    """Bounded reader over one item's byte span."""

    def __init__(self, source: _ByteSource, start: int, size: int, item_id: str) -> None:
        self._source = source
        self._position = start
        self._end = start + size
        self._item_id = item_id

    @property
    def position(self) -> int:
        return self._position

    @property
    def remaining(self) -> int:
        return self._end - self._position

    def take(self, length: int, field_name: str) -> bytes:
        if length > self.remaining:
            raise UnpackFormatError(
                f"Malformed item {self._item_id}: {field_name} needs {length} bytes "
                f"but only {self.remaining} remain in the item."
            )
        data = self._source.read_at(self._position, length)
        self._position += length
        return data

    def take_int(self, length: int, field_name: str) -> int:
        return int.from_bytes(self.take(length, field_name), "little")

    def take_optional(self, length: int, field_name: str) -> bytes:
        flag = self.take_int(1, f"{field_name} flag")
        if flag == 0:
            return b""
        if flag != 1:
            raise UnpackFormatError(
                f"Malformed item {self._item_id}: {field_name} flag must be 0 or 1, got {flag}."
            )
        return self.take(length, field_name)


def _parse_bundle(source: _ByteSource, inline: bool) -> tuple[DataItemHeader, ...]:
    if source.size < BUNDLE_COUNT_BYTES:
        raise UnpackFormatError(
            f"Bundle is {source.size} bytes, shorter than the {BUNDLE_COUNT_BYTES}-byte item count."
        )
    item_count = int.from_bytes(source.read_at(0, BUNDLE_COUNT_BYTES), "little")
    header_end = BUNDLE_COUNT_BYTES + item_count * _ENTRY_BYTES
    if header_end > source.size:
        raise UnpackFormatError(
            f"Bundle header declares {item_count} items but the file is only {source.size} bytes."
        )
    entries = source.read_at(BUNDLE_COUNT_BYTES, item_count * _ENTRY_BYTES)
    headers: list[DataItemHeader] = []
    offset = header_end
    for index in range(item_count):
        entry = entries[index * _ENTRY_BYTES : (index + 1) * _ENTRY_BYTES]
        item_size = int.from_bytes(entry[:BUNDLE_ENTRY_SIZE_BYTES], "little")
        item_id = encode_item_id(entry[BUNDLE_ENTRY_SIZE_BYTES:])
        if offset + item_size > source.size:
            raise UnpackFormatError(
                f"Item {item_id} spans {offset}+{item_size} past bundle end {source.size}."
            )
        headers.append(_parse_item(source, offset, item_size, item_id, inline))
        offset += item_size
    return tuple(headers)


def _parse_item(
    source: _ByteSource,
    start: int,
    size: int,
    item_id: str,
    inline: bool,
) -> DataItemHeader:
    """Parse one item header and locate its data."""
    cursor = _ItemCursor(source, start, size, item_id)
    signature_type = cursor.take_int(SIGNATURE_TYPE_BYTES, "signature type")
    scheme = scheme_for(signature_type)
    signature = cursor.take(scheme.signature_length, "signature")
    owner = cursor.take(scheme.owner_length, "owner")
    target = cursor.take_optional(TARGET_BYTES, "target")
    anchor = cursor.take_optional(ANCHOR_BYTES, "anchor")
    tag_count = cursor.take_int(TAG_COUNT_BYTES, "tag count")
    tag_length = cursor.take_int(TAG_LENGTH_BYTES, "tag length")
    raw_tags = cursor.take(tag_length, "tags")
    tags = decode_tags(raw_tags)
    if len(tags) != tag_count:
        raise UnpackFormatError(
            f"Malformed item {item_id}: header declares {tag_count} tags, decoded {len(tags)}."
        )
    data: PayloadLocator
    if inline:
        data = cursor.take(cursor.remaining, "data")
    else:
        data = ByteRange(offset=cursor.position, length=cursor.remaining)
    return DataItemHeader(
        item_id=item_id,
        signature_type=signature_type,
        signature=signature,
        owner=owner,
        target=target,
        anchor=anchor,
        raw_tags=raw_tags,
        tags=tags,
        data=data,
    )


def _check_tag_limits(header: DataItemHeader) -> None:
    if len(header.tags) > MAX_TAG_COUNT:
        raise UnpackVerificationError(
            f"Item {header.item_id} has {len(header.tags)} tags, above the limit of {MAX_TAG_COUNT}."
        )
    for tag in header.tags:
        name_length = len(tag.name.encode("utf-8"))
        value_length = len(tag.value.encode("utf-8"))
        if name_length == 0 or name_length > MAX_TAG_NAME_BYTES:
            raise UnpackVerificationError(
                f"Item {header.item_id} has a tag name of {name_length} bytes; "
                f"allowed range is 1..{MAX_TAG_NAME_BYTES}."
            )
        if value_length == 0 or value_length > MAX_TAG_VALUE_BYTES:
            raise UnpackVerificationError(
                f"Item {header.item_id} has a tag value of {value_length} bytes; "
                f"allowed range is 1..{MAX_TAG_VALUE_BYTES}."
            )
