"""Exception types raised by botchain.

Absence (``Chain.get`` past the end) and integrity breaks (``Chain.verify``)
are result values, not exceptions. The exceptions below cover contract
violations and loaders that cannot produce a trustworthy chain.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from botchain.contracts import IntegrityReport


class InvalidRecordInput(ValueError):
    """Raised when a record is constructed from out-of-contract input."""
    pass


class UnsupportedDigestError(ValueError):
    """Raised when a digest algorithm name is not supported."""
    pass


class ChainStoreError(ValueError):
    """Raised when a persisted chain cannot be read or parsed."""
    pass


class DefinitionDecodeError(ValueError):
    """Raised when a payload does not decode to a chatbot definition."""
    pass


class ChainIntegrityError(ValueError):
    """Raised by loaders when a chain fails verification.

    The full report is available as ``.report`` so callers can decide
    whether to truncate at ``report.broken_at`` or reject the chain.
    """

    def __init__(self, report: "IntegrityReport"):
        self.report = report
        super().__init__(report.message or f"Chain integrity broken at position {report.broken_at}")
