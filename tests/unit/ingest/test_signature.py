"""Unit tests for deep hash and signature verification."""

from __future__ import annotations

import hashlib

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from core.errors import UnpackFormatError, UnpackVerificationError
from ingest.signature import StreamedBlob, deep_hash, scheme_for, verify_signature


def _sha384(data: bytes) -> bytes:
    return hashlib.sha384(data).digest()


def test_deep_hash_of_blob_matches_definition() -> None:
    """Blob hash should be sha384(sha384(tag) + sha384(data))."""
    data = b"payload"
    expected = _sha384(_sha384(b"blob7") + _sha384(data))

    assert deep_hash(data) == expected


def test_deep_hash_of_list_chains_children() -> None:
    """List hash should fold child hashes onto the tagged list hash."""
    accumulator = _sha384(b"list2")
    accumulator = _sha384(accumulator + deep_hash(b"a"))
    accumulator = _sha384(accumulator + deep_hash(b"bc"))

    assert deep_hash([b"a", b"bc"]) == accumulator


def test_deep_hash_streamed_blob_equals_bytes_blob() -> None:
    """Chunked blobs should hash identically to in-memory bytes."""
    streamed = StreamedBlob(length=6, chunks=iter([b"ab", b"cd", b"ef"]))

    assert deep_hash([b"x", streamed]) == deep_hash([b"x", b"abcdef"])


def test_deep_hash_rejects_short_streamed_blob() -> None:
    """A streamed blob shorter than declared should fail verification."""
    with pytest.raises(UnpackVerificationError):
        deep_hash(StreamedBlob(length=10, chunks=iter([b"short"])))

    assert True


def test_verify_signature_accepts_ed25519() -> None:
    """Valid Ed25519 signatures should verify."""
    private_key = Ed25519PrivateKey.generate()
    owner = private_key.public_key().public_bytes(
        serialization.Encoding.Raw, serialization.PublicFormat.Raw
    )
    message = deep_hash(b"message")

    valid = verify_signature(2, owner, private_key.sign(message), message)
    tampered = verify_signature(2, owner, private_key.sign(message), deep_hash(b"other"))

    assert valid is True and tampered is False


def test_verify_signature_accepts_arweave_rsa_pss() -> None:
    """Arweave RSA-PSS signatures over the modulus owner should verify."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=4096)
    owner = private_key.public_key().public_numbers().n.to_bytes(512, "big")
    message = deep_hash(b"message")
    signature = private_key.sign(
        message,
        padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=32),
        hashes.SHA256(),
    )

    assert verify_signature(1, owner, signature, message) is True


def test_verify_signature_rejects_unsupported_type() -> None:
    """Ethereum signatures cannot be checked and should fail loudly."""
    with pytest.raises(UnpackVerificationError):
        verify_signature(3, b"\x04" * 65, b"\x00" * 65, b"message")

    assert scheme_for(3).name == "ethereum"


def test_scheme_for_rejects_unknown_type() -> None:
    """Unknown signature type codes are a framing error."""
    with pytest.raises(UnpackFormatError):
        scheme_for(99)

    assert scheme_for(1).signature_length == 512
