"""Tests for hash utilities and record framing rules."""

import hashlib
import struct

import pytest
from botchain.kernel.hash_utils import (
    GENESIS_HASH,
    RECORD_DOMAIN_TAG,
    canonical_record_bytes,
    genesis_hash,
    hash_bytes,
    hash_record,
    normalize_algorithm,
    split_hash,
)
from botchain.errors import InvalidRecordInput, UnsupportedDigestError


class TestCanonicalRecordBytes:
    """Tests for canonical_record_bytes framing."""

    def test_layout(self):
        """Domain tag, u64 position, length-prefixed payload, length-prefixed previous hash."""
        framed = canonical_record_bytes(3, b"abc", "sha256:ff")
        expected = (
            RECORD_DOMAIN_TAG
            + struct.pack(">Q", 3)
            + struct.pack(">Q", 3) + b"abc"
            + struct.pack(">Q", 9) + b"sha256:ff"
        )
        assert framed == expected

    def test_naive_concatenation_collision_is_avoided(self):
        """(1, "23") and (12, "3") concatenate identically as text but must frame differently."""
        prev = GENESIS_HASH
        assert f"{1}23{prev}" == f"{12}3{prev}"
        assert canonical_record_bytes(1, b"23", prev) != canonical_record_bytes(12, b"3", prev)
        assert hash_record(1, b"23", prev) != hash_record(12, b"3", prev)

    def test_payload_previous_hash_boundary_is_unambiguous(self):
        """Moving bytes between payload and previous_hash must change the framing."""
        a = canonical_record_bytes(0, b"abc", "def")
        b = canonical_record_bytes(0, b"ab", "cdef")
        assert a != b
        assert hash_record(0, b"abc", "def") != hash_record(0, b"ab", "cdef")

    def test_empty_payload_allowed(self):
        framed = canonical_record_bytes(0, b"", GENESIS_HASH)
        assert struct.pack(">Q", 0) + struct.pack(">Q", 0) in framed

    def test_bytearray_and_memoryview_accepted(self):
        expected = canonical_record_bytes(0, b"xyz", "p")
        assert canonical_record_bytes(0, bytearray(b"xyz"), "p") == expected
        assert canonical_record_bytes(0, memoryview(b"xyz"), "p") == expected

    def test_negative_position_rejected(self):
        with pytest.raises(InvalidRecordInput, match=">= 0"):
            canonical_record_bytes(-1, b"x", GENESIS_HASH)

    def test_bool_position_rejected(self):
        with pytest.raises(InvalidRecordInput, match="must be an int"):
            canonical_record_bytes(True, b"x", GENESIS_HASH)

    def test_oversized_position_rejected(self):
        with pytest.raises(InvalidRecordInput, match="exceeds"):
            canonical_record_bytes(2 ** 64, b"x", GENESIS_HASH)

    def test_str_payload_rejected(self):
        with pytest.raises(InvalidRecordInput, match="bytes-like"):
            canonical_record_bytes(0, "text", GENESIS_HASH)


class TestHashRecord:
    """Tests for hash_record and hash_bytes."""

    def test_matches_sha256_of_framing(self):
        framed = canonical_record_bytes(0, b"{}", GENESIS_HASH)
        assert hash_record(0, b"{}", GENESIS_HASH) == "sha256:" + hashlib.sha256(framed).hexdigest()

    def test_deterministic(self):
        """Same inputs should produce same hash."""
        assert hash_record(5, b"data", "sha256:abc") == hash_record(5, b"data", "sha256:abc")

    def test_each_field_changes_hash(self):
        base = hash_record(1, b"data", "sha256:abc")
        assert hash_record(2, b"data", "sha256:abc") != base
        assert hash_record(1, b"datA", "sha256:abc") != base
        assert hash_record(1, b"data", "sha256:abd") != base

    def test_prefix_and_length(self):
        result = hash_bytes(b"hello")
        assert result.startswith("sha256:")
        assert len(result) == 71  # "sha256:" + 64 hex chars

    def test_other_algorithm(self):
        result = hash_bytes(b"hello", "sha3_256")
        assert result == "sha3_256:" + hashlib.sha3_256(b"hello").hexdigest()


class TestAlgorithms:
    """Tests for algorithm names and the genesis sentinel."""

    def test_normalize_case_and_dash(self):
        assert normalize_algorithm("SHA256") == "sha256"
        assert normalize_algorithm("sha3-256") == "sha3_256"

    def test_unknown_algorithm_rejected(self):
        with pytest.raises(UnsupportedDigestError, match="Unsupported digest algorithm"):
            normalize_algorithm("md5")

    def test_genesis_is_all_zero_digest(self):
        assert GENESIS_HASH == "sha256:" + "0" * 64
        assert genesis_hash("sha512") == "sha512:" + "0" * 128
        assert genesis_hash("blake2s") == "blake2s:" + "0" * 64

    def test_genesis_is_not_hash_of_empty_input(self):
        assert GENESIS_HASH != hash_bytes(b"")

    def test_split_hash(self):
        assert split_hash("sha256:abcd") == ("sha256", "abcd")
        assert split_hash("abcd") == ("", "abcd")
