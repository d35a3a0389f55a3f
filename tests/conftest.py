# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pytest fixtures. Tests run against a throwaway SQLite database (TEST_DATABASE_URL to override)."""

import os
import tempfile
from datetime import date
from functools import lru_cache

_default_url = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.gettempdir(), f"shiftbid_test_{os.getpid()}.db"
)
os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL", _default_url)

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from shiftbid_server.auth import create_user_token, hash_password  # noqa: E402
from shiftbid_server.database import async_session_maker, drop_db, init_db  # noqa: E402
from shiftbid_server.main import app  # noqa: E402
from shiftbid_server.models import Pin, Shift, ShiftType, ShiftWindow, User, UserRole  # noqa: E402
from shiftbid_server.rate_limit import reset_rate_limits  # noqa: E402

PASSWORD = "secret123"


@lru_cache
def _password_hash() -> str:
    return hash_password(PASSWORD)


@pytest.fixture
async def db():
    """Fresh schema for one test."""
    reset_rate_limits()
    await init_db()
    yield
    await drop_db()


@pytest.fixture
async def client(db):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def make_user(
    name: str,
    email: str,
    role: UserRole = UserRole.USER,
    contract_percent: int = 100,
) -> User:
    async with async_session_maker() as session:
        user = User(
            name=name,
            email=email,
            password_hash=_password_hash(),
            role=role,
            contract_percent=contract_percent,
        )
        session.add(user)
        await session.commit()
        return user


async def make_window(name: str, start: date, end: date) -> ShiftWindow:
    async with async_session_maker() as session:
        window = ShiftWindow(name=name, start_date=start, end_date=end)
        session.add(window)
        await session.commit()
        return window


async def make_shift(window: ShiftWindow, day: date, shift_type: ShiftType, weight: float | None = 1.0) -> Shift:
    async with async_session_maker() as session:
        shift = Shift(shift_window_id=window.id, date=day, type=shift_type, weight=weight)
        session.add(shift)
        await session.commit()
        return shift


async def make_pin(user: User, shift: Shift) -> Pin:
    async with async_session_maker() as session:
        pin = Pin(user_id=user.id, shift_id=shift.id)
        session.add(pin)
        await session.commit()
        return pin


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_user_token(user)}"}


@pytest.fixture
async def admin(db) -> User:
    return await make_user("Ada Admin", "admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
async def employee(db) -> User:
    return await make_user("Eve Employee", "eve@example.com", contract_percent=50)


@pytest.fixture
def admin_headers(admin: User) -> dict[str, str]:
    return auth_headers(admin)


@pytest.fixture
def employee_headers(employee: User) -> dict[str, str]:
    return auth_headers(employee)


@pytest.fixture
async def week(db) -> ShiftWindow:
    """Window 2024-01-01..2024-01-07."""
    return await make_window("Week 1", date(2024, 1, 1), date(2024, 1, 7))
