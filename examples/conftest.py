"""Fixtures for the sprig examples.

Each example directory holds an ``app.py`` exposing ``app`` and a
``test_app.py`` beside it. ``example_app`` executes that ``app.py``
afresh for every test, so module-level state (in-memory stores,
counters) never leaks between tests.
"""

import importlib.util
from pathlib import Path

import pytest

from sprig.app import App
from sprig.testing import TestClient


def _load_app(directory: Path) -> App:
    spec = importlib.util.spec_from_file_location(f"example_{directory.name}", directory / "app.py")
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.app


@pytest.fixture
def example_app(request: pytest.FixtureRequest) -> App:
    """A fresh App from the app.py next to the requesting test."""
    return _load_app(Path(request.path).parent)


@pytest.fixture
def client(example_app: App) -> TestClient:
    return TestClient(example_app)
