"""
Pytest configuration for API integration tests.

These tests hit real FastAPI endpoints with TestClient. Registry traffic is
served by FakeRegistryClient (see tests/conftest.py) and minikube by a mock
service, so nothing leaves the process.
"""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client(reset_registry_store):
    """TestClient with a clean registry config and no dependency overrides"""
    from main import app

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def configured_registry(client):
    """Point the app at the fake registry used by FakeRegistryClient"""
    response = client.post("/api/config/registry", json={
        "url": "registry.test:5000",
        "username": "admin",
        "password": "s3cret",
        "isSecure": False,
    })
    assert response.status_code == 200
    return response.json()["config"]
