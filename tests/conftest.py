from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.metadata.document import FetchTarget


@pytest.fixture
def client():
    """TestClient for the full app; outbound HTTP must be mocked per test."""
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def target() -> FetchTarget:
    return FetchTarget.from_input("example.com")
