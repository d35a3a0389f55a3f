# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Authentication API routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbid_server.api.schemas import AuthResponse, UserLogin, UserResponse
from shiftbid_server.auth import create_user_token, get_current_user, verify_password
from shiftbid_server.database import get_db
from shiftbid_server.models import User
from shiftbid_server.rate_limit import rate_limit_auth_dep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=AuthResponse, dependencies=[Depends(rate_limit_auth_dep)])
async def login(
    data: UserLogin,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """Authenticate by email and password; return the user and a JWT."""
    result = await db.execute(select(User).where(User.email == data.email.lower()))
    user = result.scalar_one_or_none()
    if not user or not verify_password(data.password, user.password_hash):
        logger.info("Failed login for %s", data.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    return AuthResponse(user=UserResponse.model_validate(user), token=create_user_token(user))


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)) -> UserResponse:
    """Get current user profile."""
    return UserResponse.model_validate(user)
