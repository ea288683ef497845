"""Tests for health endpoints."""

from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from src.storage.service import StorageUnavailableError


def test_liveness(client: TestClient) -> None:
    """Test the liveness endpoint."""
    response = client.get("/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "alive"}


def test_readiness(client: TestClient) -> None:
    """Test the readiness endpoint."""
    response = client.get("/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["storage"] == "memory"
    assert "environment" in data


def test_readiness_reports_unavailable_storage(client: TestClient) -> None:
    """Readiness fails when the blob store cannot be listed."""
    store = client.app.state.blob_store
    store._list = AsyncMock(side_effect=StorageUnavailableError())

    response = client.get("/health/ready")

    assert response.status_code == 503
    assert response.json()["status"] == "unavailable"


def test_health(client: TestClient) -> None:
    """Test the general health endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["app_name"] == "termfolio"
    assert "version" in data
    assert "environment" in data


def test_root(client: TestClient) -> None:
    """Test the root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "comments" in data["message"]
    assert "version" in data
