from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import login, make_user
from fleet_portal.config import settings
from fleet_portal.main import app
from fleet_portal.models.user import User, UserRole
from fleet_portal.utils.auth import (
    create_session,
    destroy_session,
    destroy_user_sessions,
    validate_session,
)


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_login_sets_session_and_me_returns_user(admin):
    body = admin.get("/api/auth/me").json()
    assert body["data"]["email"] == "admin@fleet.local"
    assert body["data"]["is_admin"] is True


def test_login_is_case_insensitive_on_email(client):
    body = client.post(
        "/api/auth/login", json={"email": "ADMIN@fleet.local", "password": "admin"}
    ).json()
    assert body["success"] is True


def test_bad_password(client):
    body = client.post(
        "/api/auth/login", json={"email": "admin@fleet.local", "password": "wrong"}
    ).json()
    assert body["success"] is False
    assert body["error"] == "Invalid email or password"


@pytest.mark.parametrize(
    "path",
    ["/api/auth/me", "/api/navigation", "/api/cars", "/api/notifications", "/api/quick-links"],
)
def test_routes_require_session(client, path):
    assert client.get(path).status_code == 401


def test_logout_ends_session(admin):
    admin.post("/api/auth/logout")
    assert admin.get("/api/auth/me").status_code == 401


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("get", "/api/admin/users"),
        ("get", "/api/clients"),
        ("get", "/api/turo-trips"),
        ("post", "/api/payments/search"),
        ("get", "/api/forms"),
    ],
)
def test_admin_routes_forbid_employees(employee, method, path):
    kwargs = {"json": {}} if method == "post" else {}
    assert getattr(employee, method)(path, **kwargs).status_code == 403


def test_deactivated_user_is_signed_out(admin):
    user = make_user(admin, "temp@fleet.local", "employee")
    staff = login(TestClient(app), "temp@fleet.local", "secret1")

    admin.put(f"/api/admin/users/{user['id']}", json={"is_active": False})

    assert staff.get("/api/auth/me").status_code == 401
    relogin = staff.post(
        "/api/auth/login", json={"email": "temp@fleet.local", "password": "secret1"}
    ).json()
    assert relogin["success"] is False


def test_admin_cannot_demote_self(admin):
    me = admin.get("/api/auth/me").json()["data"]
    body = admin.put(f"/api/admin/users/{me['id']}", json={"role": "employee"}).json()
    assert body["success"] is False


def test_duplicate_user_email(admin):
    make_user(admin, "dup@fleet.local", "client")
    body = admin.post(
        "/api/admin/users", json={"email": "DUP@fleet.local", "password": "secret1"}
    ).json()
    assert body["success"] is False


def test_session_carries_role_and_name_until_it_expires():
    user = User(id=7, email="sam@fleet.local", first_name="Sam", last_name="Lee", role=UserRole.EMPLOYEE)
    token = create_session(user)
    try:
        session = validate_session(token)
        assert session.name == "Sam Lee"
        assert session.role is UserRole.EMPLOYEE
        assert session.is_admin is False

        session.created_at -= settings.SESSION_MAX_AGE + 1
        assert validate_session(token) is None
        assert validate_session(token) is None
    finally:
        destroy_session(token)


def test_destroy_user_sessions_only_drops_that_user():
    sam = User(id=7, email="sam@fleet.local", first_name="Sam", last_name="Lee", role=UserRole.EMPLOYEE)
    ada = User(id=8, email="ada@fleet.local", first_name="Ada", last_name="Admin", role=UserRole.ADMIN)
    first, second, other = create_session(sam), create_session(sam), create_session(ada)
    try:
        assert destroy_user_sessions(7) == 2
        assert validate_session(first) is None
        assert validate_session(second) is None
        assert validate_session(other).is_admin is True
    finally:
        destroy_session(other)
