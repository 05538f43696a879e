"""Chain persistence as JSON lines (internal).

File layout:
- Line 1: header ``{"format":"botchain.chain","version":"1","algorithm":"sha256"}``
- Then one record per line, keys in fixed order:
  ``position``, ``payload`` (base64), ``previous_hash``, ``hash``

Loading never trusts persisted hashes: records are rebuilt verbatim and
the chain is re-verified before it is returned.
"""

import base64
import binascii
import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple, Union

from pydantic import ValidationError

from botchain.errors import ChainIntegrityError, ChainStoreError, UnsupportedDigestError
from botchain.kernel.chain import Chain
from botchain.kernel.hash_utils import DEFAULT_ALGORITHM, normalize_algorithm
from botchain.kernel.record import Record

logger = logging.getLogger("botchain.store")

STORE_FORMAT = "botchain.chain"
STORE_VERSION = "1"

RECORD_FIELDS = ("position", "payload", "previous_hash", "hash")


def _header_line(algorithm: str) -> str:
    header = {"format": STORE_FORMAT, "version": STORE_VERSION, "algorithm": algorithm}
    return json.dumps(header, separators=(",", ":"), ensure_ascii=False)


def record_to_line(record: Record) -> str:
    """Serialize one record to a JSON line (no trailing newline)."""
    # Plain dict keeps insertion order; do not sort keys here
    obj = {
        "position": record.position,
        "payload": base64.b64encode(record.payload).decode("ascii"),
        "previous_hash": record.previous_hash,
        "hash": record.hash,
    }
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


def record_from_line(line: str, line_no: int = 0) -> Record:
    """Parse one JSON line into a Record without recomputing its hash.

    Raises:
        ChainStoreError: If the line is not a well-formed record
    """
    try:
        obj = json.loads(line)
    except json.JSONDecodeError as e:
        raise ChainStoreError(f"Line {line_no}: invalid JSON ({e.msg})") from e
    if not isinstance(obj, dict):
        raise ChainStoreError(f"Line {line_no}: expected an object, got {type(obj).__name__}")

    missing = [k for k in RECORD_FIELDS if k not in obj]
    if missing:
        raise ChainStoreError(f"Line {line_no}: missing fields {missing}")
    extra = sorted(set(obj) - set(RECORD_FIELDS))
    if extra:
        raise ChainStoreError(f"Line {line_no}: unknown fields {extra}")

    encoded = obj["payload"]
    if not isinstance(encoded, str):
        raise ChainStoreError(f"Line {line_no}: payload must be a base64 string")
    try:
        payload = base64.b64decode(encoded.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ChainStoreError(f"Line {line_no}: payload is not valid base64") from e

    try:
        return Record(
            position=obj["position"],
            payload=payload,
            previous_hash=obj["previous_hash"],
            hash=obj["hash"],
        )
    except ValidationError as e:
        raise ChainStoreError(f"Line {line_no}: invalid record fields ({e.error_count()} errors)") from e


def _parse_header(line: str) -> str:
    try:
        header = json.loads(line)
    except json.JSONDecodeError as e:
        raise ChainStoreError(f"Line 1: invalid header JSON ({e.msg})") from e
    if not isinstance(header, dict) or header.get("format") != STORE_FORMAT:
        raise ChainStoreError(f"Line 1: not a {STORE_FORMAT} file")
    if header.get("version") != STORE_VERSION:
        raise ChainStoreError(
            f"Unsupported store version: {header.get('version')!r} (expected {STORE_VERSION!r})"
        )
    try:
        return normalize_algorithm(str(header.get("algorithm") or DEFAULT_ALGORITHM))
    except UnsupportedDigestError as e:
        raise ChainStoreError(f"Line 1: {e}") from e


def read_records(path: Union[str, Path]) -> Tuple[Optional[str], List[Record]]:
    """Read the header algorithm and raw records of a store file.

    Returns ``(None, [])`` for a missing or empty file.

    Raises:
        ChainStoreError: If the file is malformed
    """
    store_path = Path(path)
    if not store_path.exists():
        return None, []

    algorithm: Optional[str] = None
    records: List[Record] = []
    with open(store_path, "rb") as f:
        for line_no, raw in enumerate(f, start=1):
            try:
                line = raw.decode("utf-8").strip()
            except UnicodeDecodeError as e:
                raise ChainStoreError(f"Line {line_no}: not valid UTF-8") from e
            if not line:
                continue
            if algorithm is None:
                algorithm = _parse_header(line)
                continue
            records.append(record_from_line(line, line_no))
    return algorithm, records


def load_chain(path: Union[str, Path], algorithm: Optional[str] = None) -> Chain:
    """Load a chain from disk and re-verify it.

    Args:
        path: Store file path; a missing file loads as an empty chain
        algorithm: Expected digest algorithm; defaults to the file header's

    Raises:
        ChainStoreError: If the file is malformed or uses a different algorithm
        ChainIntegrityError: If any record fails verification
    """
    stored_algorithm, records = read_records(path)
    expected = normalize_algorithm(algorithm) if algorithm is not None else None
    if stored_algorithm is not None and expected is not None and stored_algorithm != expected:
        raise ChainStoreError(
            f"Store uses {stored_algorithm}, expected {expected}"
        )
    chain_algorithm = stored_algorithm or expected or DEFAULT_ALGORITHM

    try:
        chain = Chain.from_records(records, algorithm=chain_algorithm)
    except ChainIntegrityError as e:
        logger.warning("Integrity check failed for %s: %s", path, e.report.message)
        raise
    logger.debug("Loaded %d records from %s (head %s)", len(chain), path, chain.head_hash)
    return chain


def save_chain(chain: Chain, path: Union[str, Path]) -> Path:
    """Write the whole chain atomically (temp file + replace)."""
    store_path = Path(path)
    store_path.parent.mkdir(parents=True, exist_ok=True)
    tmp = store_path.with_name(store_path.name + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        f.write(_header_line(chain.algorithm) + "\n")
        for record in chain.records():
            f.write(record_to_line(record) + "\n")
    os.replace(tmp, store_path)
    logger.debug("Saved %d records to %s", len(chain), store_path)
    return store_path


def append_record(path: Union[str, Path], record: Record, algorithm: str = DEFAULT_ALGORITHM) -> None:
    """Append one record line, writing the header first for a new file.

    The caller is responsible for appending records in position order
    (normally straight after ``Chain.append``). The line is flushed and
    fsynced before returning. A file whose last line lacks its newline gets
    one first, so the new record never merges into that line; a truncated
    last line is still reported by ``load_chain``.
    """
    store_path = Path(path)
    store_path.parent.mkdir(parents=True, exist_ok=True)
    is_new = not store_path.exists() or store_path.stat().st_size == 0
    needs_newline = False
    if not is_new:
        with open(store_path, "rb") as f:
            f.seek(-1, os.SEEK_END)
            needs_newline = f.read(1) != b"\n"
    with open(store_path, "a", encoding="utf-8") as f:
        if is_new:
            f.write(_header_line(normalize_algorithm(algorithm)) + "\n")
        elif needs_newline:
            f.write("\n")
        f.write(record_to_line(record) + "\n")
        f.flush()
        os.fsync(f.fileno())
    logger.debug("Appended record %d to %s", record.position, store_path)
