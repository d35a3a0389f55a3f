# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Shift window API routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbid_server.api.schemas import (
    ShiftWindowCreate,
    ShiftWindowDeleted,
    ShiftWindowResponse,
    ShiftWindowUpdate,
)
from shiftbid_server.auth import get_current_user, require_admin
from shiftbid_server.database import get_db
from shiftbid_server.models import Pin, Shift, ShiftWindow, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shift-windows", tags=["shift-windows"])


def _window_response(window: ShiftWindow, shift_count: int = 0) -> ShiftWindowResponse:
    return ShiftWindowResponse(
        id=window.id,
        name=window.name,
        start_date=window.start_date,
        end_date=window.end_date,
        created_at=window.created_at,
        updated_at=window.updated_at,
        shift_count=shift_count,
    )


async def get_window_or_404(db: AsyncSession, window_id: int) -> ShiftWindow:
    result = await db.execute(select(ShiftWindow).where(ShiftWindow.id == window_id))
    window = result.scalar_one_or_none()
    if not window:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shift window not found")
    return window


@router.post("", response_model=ShiftWindowResponse, status_code=status.HTTP_201_CREATED)
async def create_shift_window(
    data: ShiftWindowCreate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ShiftWindowResponse:
    """Create a bidding period. Start must be before end."""
    window = ShiftWindow(name=data.name, start_date=data.start_date, end_date=data.end_date)
    db.add(window)
    await db.flush()
    await db.commit()
    logger.info("Shift window %s created: %s..%s", window.id, window.start_date, window.end_date)
    return _window_response(window)


@router.get("", response_model=list[ShiftWindowResponse])
async def list_shift_windows(
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[ShiftWindowResponse]:
    """List windows, latest start first, with their shift counts."""
    counts = (
        select(Shift.shift_window_id, func.count(Shift.id).label("shift_count"))
        .group_by(Shift.shift_window_id)
        .subquery()
    )
    result = await db.execute(
        select(ShiftWindow, func.coalesce(counts.c.shift_count, 0))
        .outerjoin(counts, counts.c.shift_window_id == ShiftWindow.id)
        .order_by(ShiftWindow.start_date.desc(), ShiftWindow.id.desc())
    )
    return [_window_response(w, c) for w, c in result.all()]


@router.patch("/{window_id}", response_model=ShiftWindowResponse)
async def update_shift_window(
    window_id: int,
    data: ShiftWindowUpdate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ShiftWindowResponse:
    """Partial update. The resulting range must still have start before end."""
    window = await get_window_or_404(db, window_id)
    start = data.start_date if data.start_date is not None else window.start_date
    end = data.end_date if data.end_date is not None else window.end_date
    if start >= end:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Start date must be before end date")
    if data.name is not None:
        window.name = data.name
    window.start_date = start
    window.end_date = end
    await db.flush()
    shift_count = await db.scalar(
        select(func.count()).select_from(Shift).where(Shift.shift_window_id == window.id)
    ) or 0
    await db.commit()
    return _window_response(window, shift_count)


@router.delete("/{window_id}", response_model=ShiftWindowDeleted)
async def delete_shift_window(
    window_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ShiftWindowDeleted:
    """Delete a window with its shifts and their pins, children first."""
    window = await get_window_or_404(db, window_id)
    shift_ids = select(Shift.id).where(Shift.shift_window_id == window.id)
    pins = await db.execute(
        delete(Pin).where(Pin.shift_id.in_(shift_ids)).execution_options(synchronize_session=False)
    )
    shifts = await db.execute(
        delete(Shift).where(Shift.shift_window_id == window.id).execution_options(synchronize_session=False)
    )
    await db.execute(delete(ShiftWindow).where(ShiftWindow.id == window.id))
    await db.commit()
    logger.info(
        "Shift window %s deleted with %s shifts and %s pins", window_id, shifts.rowcount, pins.rowcount
    )
    return ShiftWindowDeleted(id=window_id, deleted_shifts=shifts.rowcount, deleted_pins=pins.rowcount)
