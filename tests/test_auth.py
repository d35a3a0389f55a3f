# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Auth endpoint tests."""

from httpx import AsyncClient

from shiftbid_server.auth import create_access_token
from tests.conftest import PASSWORD


async def test_login_invalid_credentials(client: AsyncClient, employee):
    """Login with wrong password returns 401."""
    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "eve@example.com", "password": "wrong-password"},
    )
    assert r.status_code == 401
    assert "detail" in r.json()


async def test_login_unknown_email(client: AsyncClient):
    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "nobody@example.com", "password": PASSWORD},
    )
    assert r.status_code == 401


async def test_login_returns_user_and_token(client: AsyncClient, employee):
    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "eve@example.com", "password": PASSWORD},
    )
    assert r.status_code == 200
    data = r.json()
    assert data["user"]["email"] == "eve@example.com"
    assert data["user"]["contractPercent"] == 50
    assert data["user"]["role"] == "USER"
    assert "passwordHash" not in data["user"]

    me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.status_code == 200
    assert me.json()["id"] == employee.id


async def test_login_missing_field_is_400(client: AsyncClient):
    r = await client.post("/api/v1/auth/login", json={"email": "eve@example.com"})
    assert r.status_code == 400
    assert {"field": "body.password", "code": "missing"} in r.json()["errors"]


async def test_me_requires_auth(client: AsyncClient):
    """GET /auth/me without token returns 401."""
    r = await client.get("/api/v1/auth/me")
    assert r.status_code == 401
    assert r.headers["www-authenticate"] == "Bearer"


async def test_me_rejects_invalid_token(client: AsyncClient):
    r = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


async def test_me_rejects_token_for_missing_user(client: AsyncClient):
    token = create_access_token({"sub": "999999"})
    r = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


async def test_admin_route_forbidden_for_user(client: AsyncClient, employee_headers):
    r = await client.get("/api/v1/users", headers=employee_headers)
    assert r.status_code == 403


async def test_login_rate_limited(client: AsyncClient):
    body = {"email": "nobody@example.com", "password": "wrong"}
    statuses = [(await client.post("/api/v1/auth/login", json=body)).status_code for _ in range(11)]
    assert statuses[:10] == [401] * 10
    assert statuses[10] == 429


async def test_health(client: AsyncClient):
    r = await client.get("/api/v1/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
