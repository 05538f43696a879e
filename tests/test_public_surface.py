"""Test public API surface - ensure imports work correctly and no side effects.

This test verifies:
- botchain root exports the chain kernel and result types
- botchain.api exposes the definition helpers
- The kernel does not depend on the definition layer or on logging
"""

import ast
from pathlib import Path


def test_root_exports():
    import botchain

    for name in ("Chain", "Record", "make_record", "GENESIS_HASH", "IntegrityReport", "ChatbotDefinition"):
        assert name in botchain.__all__
        assert hasattr(botchain, name)


def test_api_exports_core_functions():
    from botchain.api import publish_definition, load_definition, verify_store

    assert callable(publish_definition)
    assert callable(load_definition)
    assert callable(verify_store)


def _kernel_imports():
    here = Path(__file__).resolve().parent
    kernel_dir = here.parent / "src" / "botchain" / "kernel"
    imported = set()
    for path in kernel_dir.glob("*.py"):
        tree = ast.parse(path.read_text(encoding="utf-8"))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                imported.update(alias.name for alias in node.names)
            elif isinstance(node, ast.ImportFrom) and node.module:
                imported.add(node.module)
    return imported


def test_kernel_is_payload_agnostic():
    """The kernel must never import the definition layer, api or cli."""
    imported = _kernel_imports()
    assert imported, "kernel sources not found"
    for forbidden in ("botchain.definition", "botchain.api", "botchain.cli", "botchain._internal.io.chain_store"):
        assert forbidden not in imported


def test_kernel_does_not_log():
    imported = _kernel_imports()
    assert "logging" not in imported
