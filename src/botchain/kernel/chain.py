"""Append-only hash-linked chain of records (pure logic, no I/O)."""

from __future__ import annotations

import threading
from typing import Iterable, Iterator, List, Optional, Tuple

from botchain.codes import IntegrityCode
from botchain.contracts import IntegrityIssue, IntegrityReport
from botchain.errors import ChainIntegrityError, InvalidRecordInput
from botchain.kernel.hash_utils import (
    DEFAULT_ALGORITHM,
    BytesLike,
    genesis_hash,
    normalize_algorithm,
    split_hash,
)
from botchain.kernel.record import Record, make_record


class Chain:
    """Ordered, append-only collection of Records.

    ``append`` is the only mutating operation and is serialized by a lock.
    Reads (``get``, ``verify``, iteration) work on a snapshot of records
    already appended; records are immutable so no lock is needed.
    """

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM):
        self.algorithm = normalize_algorithm(algorithm)
        self.genesis_hash = genesis_hash(self.algorithm)
        self._records: List[Record] = []
        self._lock = threading.Lock()

    @classmethod
    def from_records(cls, records: Iterable[Record], algorithm: str = DEFAULT_ALGORITHM) -> Chain:
        """Rebuild a chain from existing records and verify it.

        Stored ``hash``/``previous_hash`` values are kept as given, then
        recomputed and compared by ``verify``.

        Raises:
            ChainIntegrityError: If the rebuilt chain does not verify
        """
        chain = cls(algorithm=algorithm)
        chain._records = list(records)
        report = chain.verify()
        if not report.ok:
            raise ChainIntegrityError(report)
        return chain

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records())

    def records(self) -> Tuple[Record, ...]:
        """Snapshot of all records in position order."""
        return tuple(self._records)

    @property
    def head_hash(self) -> str:
        """Hash of the last record, or the genesis sentinel when empty."""
        records = self._records
        return records[-1].hash if records else self.genesis_hash

    def append(self, payload: BytesLike) -> Record:
        """Hash and append a payload as the next record.

        Returns the new Record. Empty payloads are valid.
        """
        with self._lock:
            position = len(self._records)
            previous_hash = self._records[-1].hash if self._records else self.genesis_hash
            record = make_record(position, payload, previous_hash, self.algorithm)
            self._records.append(record)
            return record

    def get(self, position: int) -> Optional[Record]:
        """Return the record at ``position``, or None when out of range.

        Total over any caller-supplied value: negatives are never treated as
        Python-style offsets from the end, and non-int values return None.
        """
        if isinstance(position, bool) or not isinstance(position, int):
            return None
        records = self._records
        if 0 <= position < len(records):
            return records[position]
        return None

    def verify(self) -> IntegrityReport:
        """Recompute every hash and check every link.

        Returns:
            IntegrityReport with ``broken_at`` set to the first failing position
        """
        records = self.records()
        issues: List[IntegrityIssue] = []
        expected_previous = self.genesis_hash

        for index, record in enumerate(records):
            if record.position != index:
                issues.append(IntegrityIssue(
                    position=index,
                    code=IntegrityCode.POSITION_MISMATCH,
                    message=f"Record at index {index} claims position {record.position}",
                    expected=str(index),
                    found=str(record.position),
                ))

            if record.previous_hash != expected_previous:
                code = IntegrityCode.GENESIS_MISMATCH if index == 0 else IntegrityCode.PREVIOUS_HASH_MISMATCH
                issues.append(IntegrityIssue(
                    position=index,
                    code=code,
                    message=f"previous_hash at position {index} does not link to its predecessor",
                    expected=expected_previous,
                    found=record.previous_hash,
                ))

            stored_algorithm, _ = split_hash(record.hash)
            if stored_algorithm != self.algorithm:
                issues.append(IntegrityIssue(
                    position=index,
                    code=IntegrityCode.ALGORITHM_MISMATCH,
                    message=f"Hash at position {index} uses {stored_algorithm or 'no'} algorithm, chain uses {self.algorithm}",
                    expected=self.algorithm,
                    found=stored_algorithm,
                ))
            else:
                # Hash input uses the stored position so a renumbered record still fails here
                try:
                    recomputed: Optional[str] = record.recompute_hash(self.algorithm)
                except InvalidRecordInput:
                    recomputed = None
                if recomputed != record.hash:
                    issues.append(IntegrityIssue(
                        position=index,
                        code=IntegrityCode.HASH_MISMATCH,
                        message=f"Stored hash at position {index} does not match recomputed hash",
                        expected=recomputed,
                        found=record.hash,
                    ))

            expected_previous = record.hash

        head = records[-1].hash if records else self.genesis_hash
        if not issues:
            return IntegrityReport(
                ok=True,
                checked=len(records),
                head_hash=head,
                algorithm=self.algorithm,
                message=f"Chain verified ({len(records)} records)",
            )

        broken_at = issues[0].position
        return IntegrityReport(
            ok=False,
            checked=len(records),
            broken_at=broken_at,
            issues=issues,
            head_hash=head,
            algorithm=self.algorithm,
            message=f"Chain integrity broken at position {broken_at}: {issues[0].code.value}",
        )
