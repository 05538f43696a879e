"""Immutable chain record model."""

from pydantic import BaseModel, ConfigDict

from botchain.kernel.hash_utils import (
    DEFAULT_ALGORITHM,
    BytesLike,
    as_bytes,
    hash_record,
)


class Record(BaseModel):
    """One hash-linked entry of a chain.

    ``hash`` is derived from ``(position, payload, previous_hash)`` when the
    record is built by ``make_record``. The model itself trusts its fields:
    records reconstructed from storage keep whatever hashes were persisted
    until ``Chain.verify`` recomputes them.
    """
    position: int
    payload: bytes
    previous_hash: str
    hash: str

    model_config = ConfigDict(frozen=True, extra="forbid", strict=True)

    def recompute_hash(self, algorithm: str = DEFAULT_ALGORITHM) -> str:
        """Recompute the hash from this record's stored inputs."""
        return hash_record(self.position, self.payload, self.previous_hash, algorithm)


def make_record(
    position: int,
    payload: BytesLike,
    previous_hash: str,
    algorithm: str = DEFAULT_ALGORITHM,
) -> Record:
    """Build a record and derive its hash.

    Args:
        position: Record position; the chain passes its current length
        payload: Opaque payload bytes (empty is valid)
        previous_hash: Hash of the previous record, or the genesis sentinel
        algorithm: Digest algorithm name

    Returns:
        New immutable Record

    Raises:
        InvalidRecordInput: If position is negative or not an int, or payload is not bytes-like
        UnsupportedDigestError: If algorithm is unknown
    """
    payload_bytes = as_bytes(payload)
    record_hash = hash_record(position, payload_bytes, previous_hash, algorithm)
    return Record(
        position=position,
        payload=payload_bytes,
        previous_hash=previous_hash,
        hash=record_hash,
    )
