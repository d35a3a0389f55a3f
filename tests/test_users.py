# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""User administration endpoint tests."""

from httpx import AsyncClient


async def test_create_user_defaults(client: AsyncClient, admin_headers):
    r = await client.post(
        "/api/v1/users",
        json={"name": "Sam", "email": "Sam@Example.com", "password": "secret1"},
        headers=admin_headers,
    )
    assert r.status_code == 201, r.text
    data = r.json()
    assert data["email"] == "sam@example.com"
    assert data["contractPercent"] == 100
    assert data["role"] == "USER"


async def test_create_user_duplicate_email(client: AsyncClient, admin_headers, employee):
    r = await client.post(
        "/api/v1/users",
        json={"name": "Eve Again", "email": employee.email, "password": "secret1"},
        headers=admin_headers,
    )
    assert r.status_code == 409


async def test_create_user_validates_contract_percent(client: AsyncClient, admin_headers):
    r = await client.post(
        "/api/v1/users",
        json={"name": "Sam", "email": "sam@example.com", "password": "secret1", "contractPercent": -1},
        headers=admin_headers,
    )
    assert r.status_code == 400
    assert r.json()["errors"][0]["code"] == "greater_than_equal"


async def test_list_users(client: AsyncClient, admin_headers, employee):
    r = await client.get("/api/v1/users", headers=admin_headers)
    assert r.status_code == 200
    assert {u["email"] for u in r.json()} == {"admin@example.com", "eve@example.com"}


async def test_update_user_role_and_contract(client: AsyncClient, admin_headers, employee):
    r = await client.patch(
        f"/api/v1/users/{employee.id}",
        json={"contractPercent": 75, "role": "ADMIN"},
        headers=admin_headers,
    )
    assert r.status_code == 200
    assert r.json()["contractPercent"] == 75
    assert r.json()["role"] == "ADMIN"


async def test_update_user_requires_a_field(client: AsyncClient, admin_headers, employee):
    r = await client.patch(f"/api/v1/users/{employee.id}", json={}, headers=admin_headers)
    assert r.status_code == 400


async def test_update_user_rejects_out_of_range(client: AsyncClient, admin_headers, employee):
    r = await client.patch(
        f"/api/v1/users/{employee.id}",
        json={"contractPercent": 101},
        headers=admin_headers,
    )
    assert r.status_code == 400


async def test_update_missing_user(client: AsyncClient, admin_headers):
    r = await client.patch("/api/v1/users/999999", json={"role": "USER"}, headers=admin_headers)
    assert r.status_code == 404


async def test_create_user_rejects_blank_name(client: AsyncClient, admin_headers):
    r = await client.post(
        "/api/v1/users",
        json={"name": "  ", "email": "blank@example.com", "password": "secret1"},
        headers=admin_headers,
    )
    assert r.status_code == 400
