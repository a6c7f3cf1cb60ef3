"""Signature schemes and verification for bundle items.

This module knows the signature/owner sizes of every ANS-104 signature
type and verifies the ones that have a standard public-key primitive:
Arweave RSA-PSS and Ed25519 (also used by Solana signers).
"""

from __future__ import annotations

from dataclasses import dataclass
import hashlib
from typing import Iterable, Sequence, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicNumbers

from core.errors import UnpackFormatError, UnpackVerificationError

_RSA_PUBLIC_EXPONENT = 65537


@dataclass(frozen=True)
class SignatureScheme:
    """Byte layout of one signature type."""

    signature_type: int
    name: str
    signature_length: int
    owner_length: int


SIGNATURE_SCHEMES: dict[int, SignatureScheme] = {
    scheme.signature_type: scheme
    for scheme in (
        SignatureScheme(1, "arweave", 512, 512),
        SignatureScheme(2, "ed25519", 64, 32),
        SignatureScheme(3, "ethereum", 65, 65),
        SignatureScheme(4, "solana", 64, 32),
        SignatureScheme(5, "injectedaptos", 64, 32),
        SignatureScheme(6, "multiaptos", 64 * 32 + 4, 32 * 32 + 1),
        SignatureScheme(7, "typedethereum", 65, 42),
    )
}
_ED25519_TYPES = (2, 4)
_ARWEAVE_TYPE = 1


@dataclass(frozen=True)
class StreamedBlob:
    """Deep-hash blob whose bytes arrive in chunks.

    Attributes:
        length: Expected total byte length.
        chunks: Iterable yielding the blob bytes in order.
    """

    length: int
    chunks: Iterable[bytes]


DeepHashPart = Union[bytes, StreamedBlob, Sequence["DeepHashPart"]]


def scheme_for(signature_type: int) -> SignatureScheme:
    """Look up the layout of a signature type.

    Args:
        signature_type: Two-byte type code from the item header.

    Returns:
        Matching signature scheme.

    Raises:
        UnpackFormatError: If the type code is unknown.
    """
    scheme = SIGNATURE_SCHEMES.get(signature_type)
    if scheme is None:
        raise UnpackFormatError(
            f"Unknown item signature type {signature_type}. "
            f"Supported types: {sorted(SIGNATURE_SCHEMES)}."
        )
    return scheme


def deep_hash(part: DeepHashPart) -> bytes:
    """Compute the Arweave deep hash (SHA-384) of a blob or nested list.

    Args:
        part: Bytes, streamed blob, or sequence of further parts.

    Returns:
        48-byte digest.

    Raises:
        UnpackVerificationError: If a streamed blob length does not match.
    """
    if isinstance(part, (bytes, bytearray, StreamedBlob)):
        return _blob_hash(part)
    accumulator = _sha384(b"list" + str(len(part)).encode("ascii"))
    for child in part:
        accumulator = _sha384(accumulator + deep_hash(child))
    return accumulator


def verify_signature(
    signature_type: int,
    owner: bytes,
    signature: bytes,
    message: bytes,
) -> bool:
    """Check a signature over a deep-hash message.

    Args:
        signature_type: Item signature type code.
        owner: Raw public key bytes from the item header.
        signature: Raw signature bytes.
        message: Deep-hash signature data.

    Returns:
        True when the signature is valid for the owner key.

    Raises:
        UnpackVerificationError: If the signature type cannot be verified.
    """
    try:
        if signature_type == _ARWEAVE_TYPE:
            _verify_arweave(owner, signature, message)
        elif signature_type in _ED25519_TYPES:
            Ed25519PublicKey.from_public_bytes(owner).verify(signature, message)
        else:
            scheme = scheme_for(signature_type)
            raise UnpackVerificationError(
                f"Cannot verify items signed with unsupported signature type "
                f"{signature_type} ({scheme.name}). "
                "Disable verification with --no-verify to unpack this bundle anyway."
            )
    except (InvalidSignature, ValueError):
        return False
    return True


def _verify_arweave(owner: bytes, signature: bytes, message: bytes) -> None:
    public_key = RSAPublicNumbers(
        _RSA_PUBLIC_EXPONENT, int.from_bytes(owner, "big")
    ).public_key()
    public_key.verify(
        signature,
        message,
        padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=padding.PSS.AUTO),
        hashes.SHA256(),
    )


def _blob_hash(part: Union[bytes, bytearray, StreamedBlob]) -> bytes:
    if isinstance(part, StreamedBlob):
        digest = hashlib.sha384()
        seen = 0
        for chunk in part.chunks:
            digest.update(chunk)
            seen += len(chunk)
        if seen != part.length:
            raise UnpackVerificationError(
                f"Failed to hash item data: expected {part.length} bytes, read {seen}."
            )
        length, data_digest = part.length, digest.digest()
    else:
        length, data_digest = len(part), _sha384(bytes(part))
    tag = _sha384(b"blob" + str(length).encode("ascii"))
    return _sha384(tag + data_digest)


def _sha384(data: bytes) -> bytes:
    return hashlib.sha384(data).digest()
