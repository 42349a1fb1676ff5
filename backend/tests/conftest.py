"""Shared fixtures.

Settings are read from the environment at import time, so the database and
data directory are pointed at a temporary location before any
``fleet_portal`` module is imported. Every test starts from an empty schema.
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path

_TMP_ROOT = Path(tempfile.mkdtemp(prefix="fleet_portal_tests_"))
os.environ["DATA_DIR"] = str(_TMP_ROOT)
os.environ["RECEIPTS_DIR"] = str(_TMP_ROOT / "receipts")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_ROOT / 'test.db'}"

import pytest
from fastapi.testclient import TestClient

from fleet_portal.config import settings
from fleet_portal.database import drop_db
from fleet_portal.main import app
from fleet_portal.utils.auth import clear_sessions

ADMIN_EMAIL = settings.DEFAULT_ADMIN_EMAIL
ADMIN_PASSWORD = settings.DEFAULT_ADMIN_PASSWORD


@pytest.fixture()
def client():
    """Unauthenticated client against a freshly created database."""
    asyncio.run(drop_db())
    clear_sessions()
    with TestClient(app) as test_client:
        yield test_client


def login(test_client: TestClient, email: str, password: str) -> TestClient:
    resp = test_client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    assert resp.json()["success"] is True, resp.json()
    return test_client


@pytest.fixture()
def admin(client: TestClient) -> TestClient:
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


def make_user(admin_client: TestClient, email: str, role: str, password: str = "secret1") -> dict:
    resp = admin_client.post(
        "/api/admin/users",
        json={"email": email, "password": password, "role": role,
              "first_name": role.title(), "last_name": "User"},
    )
    body = resp.json()
    assert body["success"] is True, body
    return body["data"]


@pytest.fixture()
def employee(admin: TestClient) -> TestClient:
    """A second client signed in as an employee. The admin client stays usable."""
    make_user(admin, "staff@fleet.local", "employee")
    return login(TestClient(app), "staff@fleet.local", "secret1")


def create_client(admin_client: TestClient, first_name: str = "Ada", last_name: str = "Owner") -> dict:
    resp = admin_client.post(
        "/api/clients",
        json={"first_name": first_name, "last_name": last_name,
              "email": f"{first_name.lower()}.{last_name.lower()}@example.com"},
    )
    body = resp.json()
    assert body["success"] is True, body
    return body["data"]


def create_car(admin_client: TestClient, client_id: int | None = None, **fields) -> dict:
    payload = {"make": "Toyota", "model": "Corolla", "year": 2021, "license_plate": "ABC123"}
    payload.update(fields)
    if client_id is not None:
        payload["client_id"] = client_id
    body = admin_client.post("/api/cars", json=payload).json()
    assert body["success"] is True, body
    return body["data"]


@pytest.fixture()
def car(admin: TestClient) -> dict:
    owner = create_client(admin)
    return create_car(admin, owner["id"], vin="VIN0001")
