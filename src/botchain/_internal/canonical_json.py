"""Byte-stable JSON for chatbot definition payloads and verify reports.

A record hash covers the payload bytes, so an unchanged definition must
always encode to the same bytes or re-publishing it would fork the history.
"""

import json
from typing import Any

_SEPARATORS = (",", ":")


def canonical_dumps(obj: Any) -> str:
    """Encode ``obj`` as canonical JSON text.

    Keys are sorted at every depth, list order is kept, there is no
    whitespace and non-ASCII text stays as-is. NaN and infinities have no
    JSON spelling and raise ValueError.
    """
    return json.dumps(obj, sort_keys=True, separators=_SEPARATORS, ensure_ascii=False, allow_nan=False)


def canonical_bytes(obj: Any) -> bytes:
    """``canonical_dumps`` encoded as UTF-8: the exact payload bytes a record hashes."""
    return canonical_dumps(obj).encode("utf-8")
