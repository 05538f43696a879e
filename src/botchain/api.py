"""Public API for the botchain package.

High-level functions that connect chatbot definitions to a chain and a
store file. The kernel (``botchain.kernel``) stays payload-agnostic; this
module is where payload bytes become ChatbotDefinition objects.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from botchain.config import StoreSettings
from botchain.contracts import IntegrityReport
from botchain.definition import ChatbotDefinition, Intent, Response
from botchain.errors import ChainIntegrityError, DefinitionDecodeError
from botchain.kernel.chain import Chain
from botchain.kernel.record import Record
from botchain._internal.io.chain_store import append_record, load_chain

logger = logging.getLogger("botchain.api")


def _normalize_path(path: Union[str, os.PathLike, Path]) -> Path:
    """Normalize path input to Path object."""
    return Path(path) if not isinstance(path, Path) else path


def generate_chatbot(
    name: str,
    description: str,
    intents: Iterable[Union[Intent, Dict]],
    responses: Iterable[Union[Response, Dict]],
) -> str:
    """Build a chatbot definition and return its canonical JSON text.

    Raises:
        DefinitionDecodeError: If the fields do not form a valid definition
    """
    definition = ChatbotDefinition.from_dict({
        "name": name,
        "description": description,
        "intents": [i.model_dump() if isinstance(i, Intent) else i for i in intents],
        "responses": [r.model_dump() if isinstance(r, Response) else r for r in responses],
    })
    return definition.to_json()


def publish_definition(chain: Chain, definition: ChatbotDefinition) -> Record:
    """Encode a definition and append it as the next chain record."""
    record = chain.append(definition.to_payload())
    logger.info("Published %r at position %d (%s)", definition.name, record.position, record.hash)
    return record


def load_definition(chain: Chain, position: int) -> Optional[ChatbotDefinition]:
    """Decode the definition stored at ``position``.

    Returns None when the position is absent.

    Raises:
        DefinitionDecodeError: If the record exists but its payload is not a definition
    """
    record = chain.get(position)
    if record is None:
        return None
    return ChatbotDefinition.from_payload(record.payload)


def latest_definition(chain: Chain) -> Optional[ChatbotDefinition]:
    """Decode the most recently appended definition, or None for an empty chain."""
    return load_definition(chain, len(chain) - 1)


def history(chain: Chain) -> List[Dict[str, object]]:
    """One summary row per record: position, hash, definition name.

    Undecodable payloads are listed with ``name`` None and ``error`` set.
    """
    rows: List[Dict[str, object]] = []
    for record in chain:
        row: Dict[str, object] = {"position": record.position, "hash": record.hash, "name": None}
        try:
            row["name"] = ChatbotDefinition.from_payload(record.payload).name
        except DefinitionDecodeError as e:
            row["error"] = str(e)
        rows.append(row)
    return rows


def open_store(settings: StoreSettings) -> Chain:
    """Load (and verify) the chain at ``settings.path``.

    The store header decides the digest unless ``settings.algorithm`` is
    set. A missing store file opens as an empty chain using
    ``settings.algorithm`` or the default digest.

    Raises:
        ChainStoreError: If the store is malformed or uses another algorithm
        ChainIntegrityError: If the stored chain does not verify
    """
    return load_chain(settings.path, algorithm=settings.algorithm)


def publish_to_store(settings: StoreSettings, definition: ChatbotDefinition) -> Record:
    """Load the store, append a definition, and persist the new record."""
    chain = open_store(settings)
    record = publish_definition(chain, definition)
    append_record(settings.path, record, algorithm=chain.algorithm)
    return record


def verify_store(
    path: Union[str, os.PathLike, Path],
    algorithm: Optional[str] = None,
) -> IntegrityReport:
    """Verify a store file and return the report instead of raising.

    Args:
        path: Store file path
        algorithm: Expected digest algorithm; None accepts the header's

    Raises:
        ChainStoreError: If the file cannot be parsed at all or uses another algorithm
    """
    store_path = _normalize_path(path)
    try:
        chain = load_chain(store_path, algorithm=algorithm)
    except ChainIntegrityError as e:
        return e.report
    return chain.verify()
