# =====================================================
# test/api/conftest.py - FastAPI TestClient fixtures
# =====================================================
import pytest
from fastapi.testclient import TestClient

from metrocal.database.connection import get_db
from metrocal.main import app


@pytest.fixture
def client(test_db):
    """TestClient con la sessione di test al posto del database reale"""
    def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
