"""botchain: hash-linked, append-only storage for chatbot definitions."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("botchain")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from botchain.kernel.chain import Chain
from botchain.kernel.record import Record, make_record
from botchain.kernel.hash_utils import GENESIS_HASH
from botchain.contracts import IntegrityIssue, IntegrityReport
from botchain.codes import IntegrityCode
from botchain.definition import ChatbotDefinition, Intent, Response
from botchain.errors import (
    ChainIntegrityError,
    ChainStoreError,
    DefinitionDecodeError,
    InvalidRecordInput,
    UnsupportedDigestError,
)

__all__ = [
    "__version__",
    "Chain",
    "Record",
    "make_record",
    "GENESIS_HASH",
    "IntegrityIssue",
    "IntegrityReport",
    "IntegrityCode",
    "ChatbotDefinition",
    "Intent",
    "Response",
    "ChainIntegrityError",
    "ChainStoreError",
    "DefinitionDecodeError",
    "InvalidRecordInput",
    "UnsupportedDigestError",
]
