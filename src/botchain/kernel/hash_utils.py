"""Hash utilities with explicit framing rules for record hashing.

This module provides the canonical byte framing and digest functions that
guarantee stable, deterministic record hashes across Python versions and
environments.

Framing rules (``canonical_record_bytes``):
- Fixed domain tag ``b"botchain.record.v1\\x00"``
- Position as 8-byte big-endian unsigned integer
- Payload length (8-byte big-endian) followed by the payload bytes
- Previous-hash length (8-byte big-endian) followed by its UTF-8 bytes

Every variable-length field is length-prefixed, so two different
``(position, payload, previous_hash)`` triples can never frame to the same
bytes. Plain concatenation such as ``f"{index}{data}{prev}"`` does not have
this property: ``(1, "23", h)`` and ``(12, "3", h)`` collide.

Hash strings are ``"<algorithm>:<hex digest>"``.
"""

import hashlib
import struct
from typing import Tuple, Union

from botchain.errors import InvalidRecordInput, UnsupportedDigestError


DEFAULT_ALGORITHM = "sha256"

SUPPORTED_ALGORITHMS = (
    "sha256",
    "sha384",
    "sha512",
    "sha3_256",
    "sha3_512",
    "blake2b",
    "blake2s",
)

RECORD_DOMAIN_TAG = b"botchain.record.v1\x00"

MAX_POSITION = 2 ** 64 - 1

_U64 = struct.Struct(">Q")

BytesLike = Union[bytes, bytearray, memoryview]


def normalize_algorithm(algorithm: str) -> str:
    """Validate and normalize a digest algorithm name.

    Args:
        algorithm: Algorithm name, case-insensitive (e.g. "SHA256", "sha3_256")

    Returns:
        Lower-case algorithm name

    Raises:
        UnsupportedDigestError: If the algorithm is not in SUPPORTED_ALGORITHMS
    """
    if not isinstance(algorithm, str):
        raise UnsupportedDigestError(
            f"Digest algorithm must be a string, got {type(algorithm).__name__}"
        )
    name = algorithm.strip().lower().replace("-", "_")
    if name not in SUPPORTED_ALGORITHMS:
        raise UnsupportedDigestError(
            f"Unsupported digest algorithm: {algorithm!r}. "
            f"Supported: {', '.join(SUPPORTED_ALGORITHMS)}"
        )
    return name


def digest_size(algorithm: str) -> int:
    """Return the digest size in bytes for a supported algorithm."""
    return hashlib.new(normalize_algorithm(algorithm)).digest_size


def genesis_hash(algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Genesis sentinel for a chain: an all-zero digest of the algorithm's length.

    This is a fixed sentinel, not the digest of any input.
    """
    name = normalize_algorithm(algorithm)
    return f"{name}:" + "0" * (2 * digest_size(name))


GENESIS_HASH = genesis_hash(DEFAULT_ALGORITHM)


def split_hash(value: str) -> Tuple[str, str]:
    """Split ``"<algorithm>:<hex>"`` into ``(algorithm, hex)``.

    A value without a prefix returns ``("", value)``.
    """
    algorithm, sep, hex_digest = value.partition(":")
    if not sep:
        return "", value
    return algorithm, hex_digest


def _check_position(position: int) -> None:
    # bool is an int subclass but never a valid position
    if isinstance(position, bool) or not isinstance(position, int):
        raise InvalidRecordInput(
            f"Record position must be an int, got {type(position).__name__}"
        )
    if position < 0:
        raise InvalidRecordInput(f"Record position must be >= 0, got {position}")
    if position > MAX_POSITION:
        raise InvalidRecordInput(f"Record position exceeds {MAX_POSITION}: {position}")


def as_bytes(payload: BytesLike) -> bytes:
    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, (bytearray, memoryview)):
        return bytes(payload)
    raise InvalidRecordInput(
        f"Record payload must be bytes-like, got {type(payload).__name__}"
    )


def canonical_record_bytes(position: int, payload: BytesLike, previous_hash: str) -> bytes:
    """Frame a record's hash inputs into one unambiguous byte sequence.

    Args:
        position: Record position (0 <= position < 2**64)
        payload: Opaque record payload
        previous_hash: Hash string of the previous record, or the genesis sentinel

    Returns:
        Framed bytes (see module docstring for the layout)

    Raises:
        InvalidRecordInput: If position is negative/too large or payload is not bytes-like
    """
    _check_position(position)
    payload_bytes = as_bytes(payload)
    if not isinstance(previous_hash, str):
        raise InvalidRecordInput(
            f"previous_hash must be a string, got {type(previous_hash).__name__}"
        )
    prev_bytes = previous_hash.encode("utf-8")

    return b"".join((
        RECORD_DOMAIN_TAG,
        _U64.pack(position),
        _U64.pack(len(payload_bytes)),
        payload_bytes,
        _U64.pack(len(prev_bytes)),
        prev_bytes,
    ))


def hash_bytes(data: BytesLike, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Compute the digest of raw bytes.

    Returns:
        Hash string prefixed with the algorithm name (e.g. "sha256:<64 hex>")
    """
    name = normalize_algorithm(algorithm)
    digest = hashlib.new(name, as_bytes(data)).hexdigest()
    return f"{name}:{digest}"


def hash_record(
    position: int,
    payload: BytesLike,
    previous_hash: str,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """Compute a record hash from its framed inputs.

    Deterministic: identical inputs always produce the same hash string.
    """
    return hash_bytes(canonical_record_bytes(position, payload, previous_hash), algorithm)
