#!/usr/bin/env python3
# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Seed a fresh database. Run: python -m shiftbid_server.scripts.seed

Promotes the oldest user to admin when no admin exists, and creates
"Current Week" and "Next Week" windows with early and late shifts on
weekdays when no windows exist yet.
"""

import asyncio
import logging
from datetime import date, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbid_server.database import async_session_maker, init_db
from shiftbid_server.models import Shift, ShiftType, ShiftWindow, User, UserRole
from shiftbid_server.models.shift import default_weight

logger = logging.getLogger(__name__)

WORKDAYS = 5


async def promote_first_user(session: AsyncSession) -> User | None:
    """Make the oldest account an admin if there is no admin yet."""
    admins = await session.scalar(
        select(func.count()).select_from(User).where(User.role == UserRole.ADMIN)
    )
    if admins:
        logger.info("Admin users already exist (%d found)", admins)
        return None
    result = await session.execute(select(User).order_by(User.created_at, User.id).limit(1))
    user = result.scalar_one_or_none()
    if user is None:
        logger.info("No users found to promote to admin")
        return None
    user.role = UserRole.ADMIN
    logger.info("Promoted user %s to admin", user.email)
    return user


async def create_sample_windows(session: AsyncSession, today: date | None = None) -> list[ShiftWindow]:
    """Create this week's and next week's windows (Mon-Sun) with weekday shifts."""
    existing = await session.scalar(select(func.count()).select_from(ShiftWindow))
    if existing:
        logger.info("Shift windows already exist (%d found)", existing)
        return []
    today = today or date.today()
    monday = today - timedelta(days=today.weekday())
    windows = []
    for name, start in (("Current Week", monday), ("Next Week", monday + timedelta(days=7))):
        window = ShiftWindow(name=name, start_date=start, end_date=start + timedelta(days=6))
        session.add(window)
        await session.flush()
        for offset in range(WORKDAYS):
            for shift_type in ShiftType:
                session.add(
                    Shift(
                        shift_window_id=window.id,
                        date=start + timedelta(days=offset),
                        type=shift_type,
                        weight=default_weight(shift_type),
                    )
                )
        windows.append(window)
        logger.info("Created shift window %s", name)
    await session.flush()
    return windows


async def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    await init_db()
    async with async_session_maker() as session:
        await promote_first_user(session)
        await create_sample_windows(session)
        await session.commit()


if __name__ == "__main__":
    asyncio.run(main())
