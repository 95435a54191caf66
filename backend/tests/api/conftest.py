"""API test fixtures: the app wired to an isolated in-memory facade."""

import pytest
from fastapi.testclient import TestClient

from qa_matrix.dependencies import get_facade
from qa_matrix.main import app


@pytest.fixture
def client(facade):
    """FastAPI test client sharing the ``facade`` fixture's ledger."""
    app.dependency_overrides[get_facade] = lambda: facade
    yield TestClient(app)
    app.dependency_overrides.clear()
