# backend/tests/routes/conftest.py
import pytest
from fastapi.testclient import TestClient

from fieldops.main import create_app


@pytest.fixture
def client(session_factory, dispatcher, technician_locks, seed):
    app = create_app(session_factory, dispatcher=dispatcher, technician_locks=technician_locks)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def csr_headers(seed):
    return {"X-Actor-Id": seed.csr_id, "X-Actor-Role": "CSR"}


@pytest.fixture
def tech_headers(seed):
    return {"X-Actor-Id": seed.tech_a_id, "X-Actor-Role": "TECHNICIAN"}
