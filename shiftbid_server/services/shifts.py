# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Shift queries shared by the shift, pin and statistics endpoints."""

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager

from shiftbid_server.api.schemas import ShiftResponse, ShiftWindowBrief
from shiftbid_server.models import Pin, Shift, ShiftWindow


def pin_counts_subquery():
    """(shift_id, pin_count) for every shift that has at least one pin."""
    return (
        select(Pin.shift_id, func.count(Pin.id).label("pin_count"))
        .group_by(Pin.shift_id)
        .subquery()
    )


def shifts_with_pin_counts() -> Select:
    """Select (Shift, pin_count) with the owning window loaded.

    Ordered by window start (newest first), then date, then type.
    """
    counts = pin_counts_subquery()
    return (
        select(Shift, func.coalesce(counts.c.pin_count, 0).label("pin_count"))
        .join(Shift.shift_window)
        .outerjoin(counts, counts.c.shift_id == Shift.id)
        .options(contains_eager(Shift.shift_window))
        .order_by(ShiftWindow.start_date.desc(), ShiftWindow.id, Shift.date, Shift.type)
    )


async def get_shift_with_pin_count(db: AsyncSession, shift_id: int) -> tuple[Shift, int] | None:
    result = await db.execute(
        shifts_with_pin_counts()
        .where(Shift.id == shift_id)
        .execution_options(populate_existing=True)
    )
    row = result.first()
    if row is None:
        return None
    return row[0], row[1]


async def count_pins_for_shift(db: AsyncSession, shift_id: int) -> int:
    return await db.scalar(
        select(func.count()).select_from(Pin).where(Pin.shift_id == shift_id)
    ) or 0


def window_brief(window: ShiftWindow) -> ShiftWindowBrief:
    return ShiftWindowBrief(
        id=window.id,
        name=window.name,
        start_date=window.start_date,
        end_date=window.end_date,
    )


def shift_response(
    shift: Shift,
    pin_count: int = 0,
    window: ShiftWindow | None = None,
) -> ShiftResponse:
    """Build the API shape for a shift. Pass window to embed its summary."""
    return ShiftResponse(
        id=shift.id,
        date=shift.date,
        type=shift.type,
        weight=shift.weight,
        shift_window_id=shift.shift_window_id,
        pin_count=pin_count,
        shift_window=window_brief(window) if window is not None else None,
        created_at=shift.created_at,
        updated_at=shift.updated_at,
    )
