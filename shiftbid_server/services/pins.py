# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pin rules: who may pin which shift, and when.

A pin is admitted only if, in this order, the user exists, the shift
exists, the shift's date lies inside its window's live bounds and the
user has not pinned the shift yet. Each check has its own status code so
clients can tell the failures apart. Pin counts are never stored; they
are derived from the pin rows on every read.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass

from fastapi import HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from shiftbid_server.api.schemas import (
    PinResponse,
    PinShiftSummary,
    ShiftWindowSummary,
    UserPinEntry,
    UserPinsResponse,
    UserSummary,
    WindowPins,
)
from shiftbid_server.models import Pin, Shift, ShiftWindow, User
from shiftbid_server.services.shifts import window_brief

logger = logging.getLogger(__name__)


@dataclass
class CreatedPin:
    pin: Pin
    user: User
    shift: Shift

    def to_response(self) -> PinResponse:
        window = self.shift.shift_window
        return PinResponse(
            id=self.pin.id,
            user_id=self.pin.user_id,
            shift_id=self.pin.shift_id,
            created_at=self.pin.created_at,
            user=UserSummary(id=self.user.id, name=self.user.name, email=self.user.email),
            shift=PinShiftSummary(
                id=self.shift.id,
                date=self.shift.date,
                type=self.shift.type,
                shift_window=ShiftWindowSummary(id=window.id, name=window.name),
            ),
        )


async def get_user_or_404(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


async def _pin_exists(db: AsyncSession, user_id: int, shift_id: int) -> bool:
    result = await db.execute(
        select(Pin.id).where(Pin.user_id == user_id, Pin.shift_id == shift_id)
    )
    return result.scalar_one_or_none() is not None


async def create_pin(db: AsyncSession, user_id: int, shift_id: int) -> CreatedPin:
    """Validate and insert a single pin. Nothing else is written."""
    user = await get_user_or_404(db, user_id)

    result = await db.execute(
        select(Shift).options(joinedload(Shift.shift_window)).where(Shift.id == shift_id)
    )
    shift = result.scalar_one_or_none()
    if not shift:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shift not found")

    # Checked against the window as it is now; windows can be edited after shifts exist.
    if not shift.shift_window.contains(shift.date):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot pin shifts outside the shift window timeframe",
        )

    if await _pin_exists(db, user_id, shift_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User has already pinned this shift",
        )

    pin = Pin(user_id=user_id, shift_id=shift_id)
    db.add(pin)
    try:
        await db.flush()
    except IntegrityError:
        # A concurrent request pinned the same shift first.
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User has already pinned this shift",
        )
    logger.info("User %s pinned shift %s", user_id, shift_id)
    return CreatedPin(pin=pin, user=user, shift=shift)


async def delete_pin(db: AsyncSession, user_id: int, shift_id: int) -> None:
    """Unpin. A pin that does not exist is reported as 404, not ignored."""
    result = await db.execute(
        delete(Pin).where(Pin.user_id == user_id, Pin.shift_id == shift_id)
    )
    if result.rowcount == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pin not found")
    logger.info("User %s unpinned shift %s", user_id, shift_id)


async def list_user_pins(db: AsyncSession, user_id: int) -> UserPinsResponse:
    """User's pins grouped by shift window, ordered by shift date then type."""
    user = await get_user_or_404(db, user_id)
    result = await db.execute(
        select(Pin, Shift, ShiftWindow)
        .join(Shift, Pin.shift_id == Shift.id)
        .join(ShiftWindow, Shift.shift_window_id == ShiftWindow.id)
        .where(Pin.user_id == user_id)
        .order_by(Shift.date, Shift.type)
    )
    rows = result.all()

    windows: dict[int, ShiftWindow] = {}
    grouped: defaultdict[int, list[UserPinEntry]] = defaultdict(list)
    for pin, shift, window in rows:
        windows.setdefault(window.id, window)
        grouped[window.id].append(
            UserPinEntry(
                shift_id=shift.id,
                date=shift.date,
                type=shift.type,
                created_at=pin.created_at,
            )
        )
    return UserPinsResponse(
        user=UserSummary(id=user.id, name=user.name, email=user.email),
        data=[
            WindowPins(window=window_brief(windows[wid]), pins=entries)
            for wid, entries in grouped.items()
        ],
        total_pins=len(rows),
    )
