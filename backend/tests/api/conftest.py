"""
Pytest fixtures for API integration tests.

Provides a FastAPI test client bound to the in-memory test database and
an export service writing under tmp_path.
"""
import pytest
from fastapi.testclient import TestClient

from revenue.api.files import get_export_service
from revenue.core.database import get_db
from revenue.main import app
from revenue.services.export_service import ExportService


@pytest.fixture(scope="function")
def client(db_session, tmp_path):
    """
    FastAPI test client with database and export directory overrides.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_export_service] = lambda: ExportService(tmp_path / "exports")

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def owner_headers():
    return {"X-User-Id": "u1", "X-User-Name": "Somchai"}


@pytest.fixture
def batch(client, owner_headers):
    """A batch created through the API by u1."""
    response = client.post("/api/v1/batches", json={"batch_name": "January"}, headers=owner_headers)
    return response.json()


@pytest.fixture
def adp_upload():
    return {
        "filename": "ADP6701.DBF",
        "size": 1024,
        "fields": [
            {"name": "HN", "type": "C", "length": 9},
            {"name": "DATEOPD", "type": "D", "length": 8},
            {"name": "CODE", "type": "C", "length": 11},
            {"name": "QTY", "type": "N", "length": 4},
            {"name": "RATE", "type": "N", "length": 12, "decimal_places": 2},
            {"name": "ADP", "type": "C", "length": 2},
        ],
        "records": [
            {"HN": "000012345", "DATEOPD": "20240115", "CODE": "TMLT001", "QTY": "2", "RATE": "150.00", "ADP": "3"},
            {"HN": "000067890", "DATEOPD": "20240116", "CODE": "TMLT002", "QTY": "x", "RATE": "80.50", "ADP": "15"},
        ],
    }
