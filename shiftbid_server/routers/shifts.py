# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Shift API routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from shiftbid_server.api.schemas import (
    BulkShiftResult,
    ShiftBulkCreate,
    ShiftCreate,
    ShiftListResponse,
    ShiftResponse,
    ShiftStatsResponse,
    ShiftWeightUpdate,
    ShiftWeightUpdated,
)
from shiftbid_server.auth import get_current_user, require_admin
from shiftbid_server.database import get_db
from shiftbid_server.models import Shift, ShiftWindow, User
from shiftbid_server.models.shift import default_weight
from shiftbid_server.routers.shift_windows import get_window_or_404
from shiftbid_server.services.shifts import (
    count_pins_for_shift,
    get_shift_with_pin_count,
    shift_response,
    shifts_with_pin_counts,
    window_brief,
)
from shiftbid_server.services.stats import get_shift_stats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shifts", tags=["shifts"])

DUPLICATE_SHIFT = "A shift with this date and type already exists in this window"


async def _shift_exists(db: AsyncSession, data: ShiftCreate) -> bool:
    result = await db.execute(
        select(Shift.id).where(
            Shift.date == data.date,
            Shift.type == data.type,
            Shift.shift_window_id == data.shift_window_id,
        )
    )
    return result.scalar_one_or_none() is not None


def _weight_for(data: ShiftCreate) -> float:
    return data.weight if data.weight is not None else default_weight(data.type)


def _new_shift(data: ShiftCreate) -> Shift:
    return Shift(
        date=data.date,
        type=data.type,
        shift_window_id=data.shift_window_id,
        weight=_weight_for(data),
    )


def _dialect_insert(db: AsyncSession):
    """insert() for the session's backend; both support ON CONFLICT DO NOTHING."""
    if db.bind.dialect.name == "sqlite":
        return sqlite_insert
    return pg_insert


@router.get("", response_model=ShiftListResponse)
async def list_shifts(
    window_id: int = Query(..., alias="windowId", description="Shift window to list"),
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ShiftListResponse:
    """All shifts in a window with their pin counts, by date then type."""
    window = await get_window_or_404(db, window_id)
    result = await db.execute(shifts_with_pin_counts().where(Shift.shift_window_id == window_id))
    shifts = [shift_response(s, c, window) for s, c in result.all()]
    return ShiftListResponse(shift_window=window_brief(window), shifts=shifts, count=len(shifts))


@router.get("/shift-stats", response_model=ShiftStatsResponse)
async def shift_stats(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ShiftStatsResponse:
    """Every shift with its pin count, grouped by window. Admin only."""
    return await get_shift_stats(db)


@router.get("/{shift_id}", response_model=ShiftResponse)
async def get_shift(
    shift_id: int,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ShiftResponse:
    found = await get_shift_with_pin_count(db, shift_id)
    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shift not found")
    shift, pin_count = found
    return shift_response(shift, pin_count, shift.shift_window)


@router.post("", response_model=ShiftResponse, status_code=status.HTTP_201_CREATED)
async def create_shift(
    data: ShiftCreate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ShiftResponse:
    """Create one shift inside its window's date range."""
    window = await get_window_or_404(db, data.shift_window_id)
    if not window.contains(data.date):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Shift date must be within the shift window date range",
        )
    if await _shift_exists(db, data):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_SHIFT)
    shift = _new_shift(data)
    db.add(shift)
    try:
        await db.flush()
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_SHIFT)
    await db.commit()
    logger.info("Shift %s created: %s %s in window %s", shift.id, shift.date, shift.type.value, window.id)
    return shift_response(shift, 0, window)


@router.post("/bulk", response_model=BulkShiftResult, status_code=status.HTTP_201_CREATED)
async def create_bulk_shifts(
    data: ShiftBulkCreate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> BulkShiftResult:
    """Create many shifts in one transaction.

    Shifts that already exist (or repeat earlier in the batch) are skipped.
    An unknown window or an out-of-range date aborts the whole batch.
    """
    windows: dict[int, ShiftWindow] = {}
    for index, item in enumerate(data.shifts):
        window = windows.get(item.shift_window_id)
        if window is None:
            window = await db.get(ShiftWindow, item.shift_window_id)
            if window is None:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"Shift at index {index}: shift window not found: {item.shift_window_id}",
                )
            windows[window.id] = window
        if not window.contains(item.date):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Shift at index {index}: date must be within the shift window date range",
            )

    insert = _dialect_insert(db)
    seen: set[tuple] = set()
    created_ids: list[int] = []
    for item in data.shifts:
        key = (item.date, item.type, item.shift_window_id)
        if key in seen:
            continue
        seen.add(key)
        # Rows already in the store (including ones a concurrent request just
        # inserted) hit the unique constraint and are skipped, not raised.
        result = await db.execute(
            insert(Shift)
            .values(
                date=item.date,
                type=item.type,
                shift_window_id=item.shift_window_id,
                weight=_weight_for(item),
            )
            .on_conflict_do_nothing(index_elements=["date", "type", "shift_window_id"])
            .returning(Shift.id)
        )
        shift_id = result.scalar_one_or_none()
        if shift_id is not None:
            created_ids.append(shift_id)

    created: list[Shift] = []
    if created_ids:
        result = await db.execute(select(Shift).where(Shift.id.in_(created_ids)))
        by_id = {s.id: s for s in result.scalars().all()}
        created = [by_id[i] for i in created_ids]
    await db.commit()
    skipped = len(data.shifts) - len(created)
    logger.info("Bulk shift create: %d created, %d skipped", len(created), skipped)
    return BulkShiftResult(
        shifts=[shift_response(s, 0, windows[s.shift_window_id]) for s in created],
        created=len(created),
        skipped=skipped,
    )


@router.patch("/{shift_id}/weight", response_model=ShiftWeightUpdated)
async def update_shift_weight(
    shift_id: int,
    data: ShiftWeightUpdate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ShiftWeightUpdated:
    """Set a shift's desirability weight."""
    result = await db.execute(
        select(Shift).options(joinedload(Shift.shift_window)).where(Shift.id == shift_id)
    )
    shift = result.scalar_one_or_none()
    if not shift:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shift not found")
    previous = shift.weight
    shift.weight = data.weight
    await db.flush()
    pin_count = await count_pins_for_shift(db, shift.id)
    await db.commit()
    logger.info("Shift %s weight %s -> %s", shift.id, previous, shift.weight)
    return ShiftWeightUpdated(
        shift=shift_response(shift, pin_count, shift.shift_window),
        previous_weight=previous,
    )
