"""Shared pytest configuration for wren examples.

``example_app`` executes the ``app.py`` next to the requesting test in a
fresh module namespace, so every test gets its own account store and
token service.
"""

import importlib.util
from pathlib import Path

import pytest


@pytest.fixture
def example_app(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch):
    """Load a fresh App from the sibling app.py next to the test file."""
    monkeypatch.setenv("WREN_SECRET_KEY", "example-test-secret")
    app_path = Path(request.path).parent / "app.py"
    spec = importlib.util.spec_from_file_location(f"example_{app_path.parent.name}", app_path)
    assert spec is not None
    assert spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.app
