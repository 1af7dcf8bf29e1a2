import pytest
from fastapi.testclient import TestClient

from apps.api.app.main import app


@pytest.fixture
def client():
    """Client with startup run: a fresh, empty service per test."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def seeded_client(client, shared_item_ratings):
    response = client.post("/v1/ratings", json=shared_item_ratings)
    assert response.status_code == 200
    return client
