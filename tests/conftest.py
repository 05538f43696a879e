"""Pytest configuration for tests.

No sys.path hacks - tests should import from installed botchain package.
"""

import pytest

from botchain.definition import ChatbotDefinition
from botchain.kernel.chain import Chain


def _definition_dict(name: str = "MyChatbot") -> dict:
    return {
        "name": name,
        "description": "A decentralized chatbot",
        "intents": [
            {"name": "greeting", "description": "Greeting intent", "examples": ["hello", "hi"]},
            {"name": "goodbye", "description": "Goodbye intent", "examples": ["bye", "see you later"]},
        ],
        "responses": [
            {"text": "Hello! How can I assist you today?", "type": "greeting"},
            {"text": "Goodbye! It was nice chatting with you.", "type": "goodbye"},
        ],
    }


@pytest.fixture
def definition_dict():
    """Raw chatbot definition as decoded JSON."""
    return _definition_dict()


@pytest.fixture
def definition(definition_dict):
    """Validated chatbot definition."""
    return ChatbotDefinition.from_dict(definition_dict)


@pytest.fixture
def make_chain():
    """Factory: chain with ``n`` appended payloads b"payload-0" .. b"payload-{n-1}"."""
    def _make(n: int, algorithm: str = "sha256") -> Chain:
        chain = Chain(algorithm=algorithm)
        for i in range(n):
            chain.append(f"payload-{i}".encode("utf-8"))
        return chain
    return _make
