"""Avro codec for bundle item tags.

Item tags are serialized as an Avro array of ``{name: bytes, value: bytes}``
records. Longs use zig-zag varint encoding; array blocks end with a zero
count and a negative count is followed by the block byte size.
"""

from __future__ import annotations

from typing import Sequence

from core.errors import UnpackFormatError
from core.types import ItemTag


def decode_tags(raw_tags: bytes) -> tuple[ItemTag, ...]:
    """Decode Avro-serialized tags.

    Args:
        raw_tags: Tag bytes from a data item header.

    Returns:
        Ordered tags, duplicates preserved.

    Raises:
        UnpackFormatError: If bytes are truncated or not valid UTF-8.
    """
    if not raw_tags:
        return ()
    reader = _AvroReader(raw_tags)
    tags: list[ItemTag] = []
    while True:
        block_count = reader.read_long()
        if block_count == 0:
            break
        if block_count < 0:
            block_count = -block_count
            reader.read_long()
        for _ in range(block_count):
            name = reader.read_text()
            value = reader.read_text()
            tags.append(ItemTag(name=name, value=value))
    if not reader.at_end():
        raise UnpackFormatError(
            f"Failed to decode item tags: {reader.remaining()} trailing bytes after array end."
        )
    return tuple(tags)


def encode_tags(tags: Sequence[ItemTag]) -> bytes:
    """Encode tags as a single-block Avro array.

    Args:
        tags: Ordered tags to serialize.

    Returns:
        Avro bytes, or empty bytes when there are no tags.
    """
    if not tags:
        return b""
    encoded = bytearray(_encode_long(len(tags)))
    for tag in tags:
        encoded += _encode_bytes(tag.name.encode("utf-8"))
        encoded += _encode_bytes(tag.value.encode("utf-8"))
    encoded += _encode_long(0)
    return bytes(encoded)


class _AvroReader:
    """Cursor over Avro-encoded bytes."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._position = 0

    def read_long(self) -> int:
        shift = 0
        accumulator = 0
        while True:
            if self._position >= len(self._data):
                raise UnpackFormatError("Failed to decode item tags: varint runs past end of data.")
            byte = self._data[self._position]
            self._position += 1
            accumulator |= (byte & 0x7F) << shift
            if not byte & 0x80:
                break
            shift += 7
        return (accumulator >> 1) ^ -(accumulator & 1)

    def read_text(self) -> str:
        length = self.read_long()
        end = self._position + length
        if length < 0 or end > len(self._data):
            raise UnpackFormatError(
                f"Failed to decode item tags: field length {length} exceeds remaining data."
            )
        chunk = self._data[self._position : end]
        self._position = end
        try:
            return chunk.decode("utf-8")
        except UnicodeDecodeError as error:
            raise UnpackFormatError(f"Failed to decode item tags: {error}.") from error

    def at_end(self) -> bool:
        return self._position == len(self._data)

    def remaining(self) -> int:
        return len(self._data) - self._position


def _encode_long(value: int) -> bytes:
    zigzag = (value << 1) ^ (value >> 63)
    encoded = bytearray()
    while zigzag & ~0x7F:
        encoded.append((zigzag & 0x7F) | 0x80)
        zigzag >>= 7
    encoded.append(zigzag)
    return bytes(encoded)


def _encode_bytes(value: bytes) -> bytes:
    return _encode_long(len(value)) + value
