#!/usr/bin/env python3
# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Create admin user. Run: python -m shiftbid_server.scripts.create_admin"""

import asyncio
import getpass
import sys

from sqlalchemy import select

from shiftbid_server.auth import hash_password
from shiftbid_server.database import async_session_maker, init_db
from shiftbid_server.models import User, UserRole


async def main():
    await init_db()
    name = input("Admin name: ").strip()
    email = input("Admin email: ").strip().lower()
    password = getpass.getpass("Password: ")
    if not name or not email or not password:
        print("All fields required")
        sys.exit(1)
    if len(password) < 6:
        print("Password must be at least 6 characters long")
        sys.exit(1)

    async with async_session_maker() as session:
        result = await session.execute(select(User).where(User.email == email))
        if result.scalar_one_or_none():
            print("User already exists")
            sys.exit(1)
        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=UserRole.ADMIN,
            contract_percent=100,
        )
        session.add(user)
        await session.commit()
        print("Admin user created.")


if __name__ == "__main__":
    asyncio.run(main())
