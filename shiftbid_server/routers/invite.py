# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Invite API - admins pre-authorize accounts; invitees redeem the token once."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbid_server.api.schemas import (
    AuthResponse,
    InviteCreate,
    InviteCreated,
    InviteResponse,
    InviteSignup,
    UserResponse,
)
from shiftbid_server.auth import create_user_token, hash_password, require_admin
from shiftbid_server.config import settings
from shiftbid_server.database import get_db
from shiftbid_server.models import InviteToken, User
from shiftbid_server.rate_limit import rate_limit_auth_dep
from shiftbid_server.services.email import invite_email_body, send_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invites", tags=["invites"])


def invite_url(token: str) -> str:
    return f"{settings.app_base_url.rstrip('/')}/invite/{token}"


async def get_unused_invite(token: str, db: AsyncSession) -> InviteToken:
    """Load invite by token; 404 if unknown, 410 if already used."""
    result = await db.execute(select(InviteToken).where(InviteToken.token == token))
    inv = result.scalar_one_or_none()
    if not inv:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invite token not found")
    if inv.used:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail="Invite token has already been used")
    return inv


@router.post("", response_model=InviteCreated, status_code=status.HTTP_201_CREATED)
async def create_invite(
    body: InviteCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> InviteCreated:
    """Create an invite and mail its link. Admin only."""
    email = body.email.strip().lower()
    existing = await db.execute(select(User.id).where(User.email == email))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User with this email already exists")
    pending = await db.execute(
        select(InviteToken.id).where(InviteToken.email == email, InviteToken.used == False)
    )
    if pending.first() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An unused invite for this email already exists",
        )

    inv = InviteToken(
        email=email,
        contract_percent=body.contract_percent,
        role=body.role,
        used=False,
        created_by_id=admin.id,
    )
    db.add(inv)
    await db.flush()
    url = invite_url(inv.token)
    await db.commit()
    logger.info("Invite %s created for %s by admin %s", inv.id, email, admin.id)
    await send_email(
        email,
        "You're invited to ShiftBid",
        invite_email_body(url, inv.contract_percent, inv.role.value),
    )
    return InviteCreated(invite=InviteResponse.model_validate(inv), invite_url=url)


@router.get("", response_model=list[InviteResponse])
async def list_invites(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[InviteResponse]:
    """List all invites, newest first. Admin only."""
    result = await db.execute(
        select(InviteToken).order_by(InviteToken.created_at.desc(), InviteToken.id.desc())
    )
    return [InviteResponse.model_validate(inv) for inv in result.scalars().all()]


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit_auth_dep)],
)
async def signup_via_invite(
    body: InviteSignup,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """Redeem an invite: create the account and consume the token in one transaction."""
    inv = await get_unused_invite(body.token, db)
    existing = await db.execute(select(User.id).where(User.email == inv.email))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User with this email already exists")

    user = User(
        name=body.name,
        email=inv.email,
        password_hash=hash_password(body.password),
        role=inv.role,
        contract_percent=inv.contract_percent,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User with this email already exists")

    # Only one redemption can flip used from false to true.
    consumed = await db.execute(
        update(InviteToken)
        .where(InviteToken.id == inv.id, InviteToken.used == False)
        .values(used=True, used_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    if consumed.rowcount != 1:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail="Invite token has already been used")
    await db.commit()
    logger.info("Invite %s redeemed by user %s", inv.id, user.id)
    return AuthResponse(user=UserResponse.model_validate(user), token=create_user_token(user))


@router.get("/{token}", response_model=InviteResponse)
async def get_invite(
    token: str,
    db: AsyncSession = Depends(get_db),
) -> InviteResponse:
    """Public invite lookup for the signup page."""
    inv = await get_unused_invite(token, db)
    return InviteResponse.model_validate(inv)
