"""Tests for record construction and immutability."""

import pytest
from pydantic import ValidationError

from botchain.errors import InvalidRecordInput, UnsupportedDigestError
from botchain.kernel.hash_utils import GENESIS_HASH, canonical_record_bytes, hash_bytes
from botchain.kernel.record import Record, make_record


def test_make_record_derives_hash():
    record = make_record(0, b'{"name":"MyChatbot"}', GENESIS_HASH)

    assert record.position == 0
    assert record.payload == b'{"name":"MyChatbot"}'
    assert record.previous_hash == GENESIS_HASH
    assert record.hash == hash_bytes(canonical_record_bytes(0, record.payload, GENESIS_HASH))


def test_make_record_deterministic():
    """Two constructions from identical inputs produce identical hashes."""
    a = make_record(7, b"same", "sha256:" + "1" * 64)
    b = make_record(7, b"same", "sha256:" + "1" * 64)
    assert a.hash == b.hash
    assert a == b


def test_make_record_copies_bytearray():
    buf = bytearray(b"mutable")
    record = make_record(0, buf, GENESIS_HASH)
    buf[:] = b"changed"
    assert record.payload == b"mutable"
    assert isinstance(record.payload, bytes)


def test_make_record_negative_position_rejected():
    with pytest.raises(InvalidRecordInput):
        make_record(-1, b"x", GENESIS_HASH)


def test_make_record_unknown_algorithm_rejected():
    with pytest.raises(UnsupportedDigestError):
        make_record(0, b"x", GENESIS_HASH, algorithm="crc32")


def test_record_is_frozen():
    """Records cannot be mutated after construction."""
    record = make_record(0, b"x", GENESIS_HASH)
    with pytest.raises(ValidationError):
        record.payload = b"y"
    with pytest.raises(ValidationError):
        record.hash = "sha256:" + "0" * 64


def test_record_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        Record(position=0, payload=b"", previous_hash=GENESIS_HASH, hash="h", extra="nope")


def test_record_recompute_hash_matches():
    record = make_record(3, b"abc", "sha256:" + "f" * 64)
    assert record.recompute_hash() == record.hash
