# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pin API routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbid_server.api.schemas import PinCreate, PinResponse, UserPinsResponse
from shiftbid_server.auth import ensure_self_or_admin, get_current_user
from shiftbid_server.database import get_db
from shiftbid_server.models import User
from shiftbid_server.services import pins as pin_service

router = APIRouter(prefix="/pins", tags=["pins"])


@router.post("", response_model=PinResponse, status_code=status.HTTP_201_CREATED)
async def create_pin(
    data: PinCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PinResponse:
    """Pin a shift for a user."""
    ensure_self_or_admin(user, data.user_id)
    created = await pin_service.create_pin(db, data.user_id, data.shift_id)
    await db.commit()
    return created.to_response()


@router.get("/{user_id}", response_model=UserPinsResponse)
async def list_user_pins(
    user_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserPinsResponse:
    """A user's pins grouped by shift window."""
    ensure_self_or_admin(user, user_id)
    return await pin_service.list_user_pins(db, user_id)


@router.delete("/{user_id}/{shift_id}")
async def delete_pin(
    user_id: int,
    shift_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Unpin a shift. Returns 404 when the pin does not exist."""
    ensure_self_or_admin(user, user_id)
    await pin_service.delete_pin(db, user_id, shift_id)
    await db.commit()
    return {"status": "ok"}
