"""Tests for canonical JSON encoding."""

import math

import pytest

from botchain._internal.canonical_json import canonical_bytes, canonical_dumps


def test_keys_sorted_at_every_depth():
    assert canonical_dumps({"b": {"z": 1, "a": 2}, "a": [3, 1]}) == '{"a":[3,1],"b":{"a":2,"z":1}}'


def test_bytes_are_utf8_of_text():
    assert canonical_bytes({"name": "café"}) == '{"name":"café"}'.encode("utf-8")


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
def test_non_finite_numbers_rejected(value):
    with pytest.raises(ValueError):
        canonical_dumps({"score": value})
