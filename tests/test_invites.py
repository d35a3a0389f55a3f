# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Invite creation and single-use redemption."""

from httpx import AsyncClient
from sqlalchemy import func, select, update

from shiftbid_server.database import async_session_maker
from shiftbid_server.models import InviteToken, User
from shiftbid_server.routers import invite as invite_router


async def _create_invite(client: AsyncClient, headers: dict, **overrides) -> dict:
    body = {"email": "new@example.com", "contractPercent": 80, "role": "USER", **overrides}
    r = await client.post("/api/v1/invites", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


async def _count_users(email: str) -> int:
    async with async_session_maker() as session:
        return await session.scalar(select(func.count()).select_from(User).where(User.email == email))


async def test_create_invite_returns_url(client: AsyncClient, admin_headers):
    data = await _create_invite(client, admin_headers)
    invite = data["invite"]
    assert invite["email"] == "new@example.com"
    assert invite["contractPercent"] == 80
    assert invite["used"] is False
    assert data["inviteUrl"].endswith(f"/invite/{invite['token']}")


async def test_create_invite_requires_admin(client: AsyncClient, employee_headers):
    r = await client.post(
        "/api/v1/invites",
        json={"email": "new@example.com", "contractPercent": 80, "role": "USER"},
        headers=employee_headers,
    )
    assert r.status_code == 403


async def test_create_invite_requires_auth(client: AsyncClient):
    r = await client.get("/api/v1/invites")
    assert r.status_code == 401


async def test_create_invite_rejects_bad_input(client: AsyncClient, admin_headers):
    r = await client.post(
        "/api/v1/invites",
        json={"email": "new@example.com", "contractPercent": 120, "role": "USER"},
        headers=admin_headers,
    )
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "body.contractPercent"

    r = await client.post(
        "/api/v1/invites",
        json={"email": "new@example.com", "contractPercent": 50, "role": "MANAGER"},
        headers=admin_headers,
    )
    assert r.status_code == 400

    r = await client.post(
        "/api/v1/invites",
        json={"email": "not-an-email", "contractPercent": 50, "role": "USER"},
        headers=admin_headers,
    )
    assert r.status_code == 400


async def test_duplicate_unused_invite_conflicts(client: AsyncClient, admin_headers):
    await _create_invite(client, admin_headers)
    r = await client.post(
        "/api/v1/invites",
        json={"email": "new@example.com", "contractPercent": 60, "role": "USER"},
        headers=admin_headers,
    )
    assert r.status_code == 409


async def test_invite_for_existing_user_conflicts(client: AsyncClient, admin_headers, employee):
    r = await client.post(
        "/api/v1/invites",
        json={"email": employee.email, "contractPercent": 60, "role": "USER"},
        headers=admin_headers,
    )
    assert r.status_code == 409


async def test_get_invite_by_token(client: AsyncClient, admin_headers):
    token = (await _create_invite(client, admin_headers))["invite"]["token"]
    r = await client.get(f"/api/v1/invites/{token}")
    assert r.status_code == 200
    assert r.json()["email"] == "new@example.com"

    missing = await client.get("/api/v1/invites/does-not-exist")
    assert missing.status_code == 404


async def test_signup_redeems_invite_once(client: AsyncClient, admin_headers):
    token = (await _create_invite(client, admin_headers, role="ADMIN", contractPercent=60))["invite"]["token"]

    r = await client.post(
        "/api/v1/invites/signup",
        json={"token": token, "name": "New Person", "password": "hunter22"},
    )
    assert r.status_code == 201, r.text
    data = r.json()
    assert data["user"]["email"] == "new@example.com"
    assert data["user"]["role"] == "ADMIN"
    assert data["user"]["contractPercent"] == 60
    assert data["token"]

    again = await client.post(
        "/api/v1/invites/signup",
        json={"token": token, "name": "Someone Else", "password": "hunter22"},
    )
    assert again.status_code == 410
    assert await _count_users("new@example.com") == 1

    lookup = await client.get(f"/api/v1/invites/{token}")
    assert lookup.status_code == 410

    invites = await client.get("/api/v1/invites", headers=admin_headers)
    assert invites.json()[0]["used"] is True
    assert invites.json()[0]["usedAt"] is not None


async def test_signup_new_user_can_log_in(client: AsyncClient, admin_headers):
    token = (await _create_invite(client, admin_headers))["invite"]["token"]
    await client.post(
        "/api/v1/invites/signup",
        json={"token": token, "name": "New Person", "password": "hunter22"},
    )
    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "new@example.com", "password": "hunter22"},
    )
    assert r.status_code == 200


async def test_signup_rejects_short_password(client: AsyncClient, admin_headers):
    token = (await _create_invite(client, admin_headers))["invite"]["token"]
    r = await client.post(
        "/api/v1/invites/signup",
        json={"token": token, "name": "New Person", "password": "123"},
    )
    assert r.status_code == 400
    assert await _count_users("new@example.com") == 0


async def test_signup_unknown_token(client: AsyncClient):
    r = await client.post(
        "/api/v1/invites/signup",
        json={"token": "nope", "name": "New Person", "password": "hunter22"},
    )
    assert r.status_code == 404


async def test_list_invites_newest_first(client: AsyncClient, admin_headers):
    await _create_invite(client, admin_headers, email="first@example.com")
    await _create_invite(client, admin_headers, email="second@example.com")
    r = await client.get("/api/v1/invites", headers=admin_headers)
    assert r.status_code == 200
    assert [i["email"] for i in r.json()] == ["second@example.com", "first@example.com"]


async def test_signup_loses_race_for_invite(client: AsyncClient, admin_headers, monkeypatch):
    token = (await _create_invite(client, admin_headers))["invite"]["token"]
    lookup = invite_router.get_unused_invite

    async def consumed_after_lookup(token: str, db):
        inv = await lookup(token, db)
        # A concurrent signup redeems the token between lookup and update.
        async with async_session_maker() as other:
            await other.execute(update(InviteToken).where(InviteToken.id == inv.id).values(used=True))
            await other.commit()
        return inv

    monkeypatch.setattr(invite_router, "get_unused_invite", consumed_after_lookup)
    r = await client.post(
        "/api/v1/invites/signup",
        json={"token": token, "name": "Late Person", "password": "hunter22"},
    )
    assert r.status_code == 410
    assert await _count_users("new@example.com") == 0


async def test_signup_rejects_blank_name(client: AsyncClient, admin_headers):
    token = (await _create_invite(client, admin_headers))["invite"]["token"]
    r = await client.post(
        "/api/v1/invites/signup",
        json={"token": token, "name": "   ", "password": "hunter22"},
    )
    assert r.status_code == 400
    assert await _count_users("new@example.com") == 0
