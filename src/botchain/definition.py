"""Chatbot definition payloads.

Typed models for the document stored in each chain record, plus the
payload encoding (canonical JSON bytes) and strict decoding. The chain
kernel never imports this module; it only ever sees payload bytes.
"""

import json
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from botchain._internal.canonical_json import canonical_bytes, canonical_dumps
from botchain.errors import DefinitionDecodeError


class Intent(BaseModel):
    """A user intent with example utterances."""
    name: str = Field(min_length=1)
    description: str
    examples: List[str]

    model_config = ConfigDict(extra="forbid")


class Response(BaseModel):
    """A response template; ``type`` usually names the intent it answers."""
    text: str
    type: str

    model_config = ConfigDict(extra="forbid")


class ChatbotDefinition(BaseModel):
    """A complete chatbot definition (one version per chain record).

    Every field is required. A payload missing ``description`` is an error,
    not an empty description.
    """
    name: str = Field(min_length=1)
    description: str
    intents: List[Intent]
    responses: List[Response]

    model_config = ConfigDict(extra="forbid")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        """Canonical JSON text of this definition."""
        return canonical_dumps(self.to_dict())

    def to_payload(self) -> bytes:
        """Canonical JSON bytes; equal definitions always give equal payloads."""
        return canonical_bytes(self.to_dict())

    @classmethod
    def from_dict(cls, data: Any) -> "ChatbotDefinition":
        """Validate a decoded JSON object.

        Raises:
            DefinitionDecodeError: If any field is missing, unknown or mistyped
        """
        if not isinstance(data, dict):
            raise DefinitionDecodeError(
                f"Chatbot definition must be a JSON object, got {type(data).__name__}"
            )
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            )
            raise DefinitionDecodeError(f"Invalid chatbot definition: {problems}") from e

    @classmethod
    def from_payload(cls, payload: bytes) -> "ChatbotDefinition":
        """Decode record payload bytes.

        Raises:
            DefinitionDecodeError: On invalid UTF-8, invalid JSON, or invalid fields
        """
        try:
            text = bytes(payload).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DefinitionDecodeError(f"Payload is not valid UTF-8: {e.reason}") from e
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DefinitionDecodeError(f"Payload is not valid JSON: {e.msg} (line {e.lineno})") from e
        return cls.from_dict(data)
