# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""User administration API. Admin only."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbid_server.api.schemas import UserCreate, UserResponse, UserUpdate
from shiftbid_server.auth import hash_password, require_admin
from shiftbid_server.database import get_db
from shiftbid_server.models import User
from shiftbid_server.services.pins import get_user_or_404

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Create an account directly, without an invite."""
    email = data.email.strip().lower()
    result = await db.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User with this email already exists")
    user = User(
        name=data.name,
        email=email,
        password_hash=hash_password(data.password),
        contract_percent=data.contract_percent,
        role=data.role,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User with this email already exists")
    await db.commit()
    logger.info("User %s created (%s, %s)", user.id, email, user.role.value)
    return UserResponse.model_validate(user)


@router.get("", response_model=list[UserResponse])
async def list_users(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[UserResponse]:
    """List all users, newest first."""
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return [UserResponse.model_validate(u) for u in result.scalars().all()]


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    data: UserUpdate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Change a user's role and/or contract percent."""
    user = await get_user_or_404(db, user_id)
    if data.contract_percent is not None:
        user.contract_percent = data.contract_percent
    if data.role is not None:
        user.role = data.role
    await db.flush()
    await db.commit()
    logger.info("User %s updated: role=%s contract=%s", user.id, user.role.value, user.contract_percent)
    return UserResponse.model_validate(user)
