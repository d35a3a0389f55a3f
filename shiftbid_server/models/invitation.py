# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Invite token model - admin pre-authorizes one account by email."""

import secrets
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Enum as SAEnum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from shiftbid_server.models.base import Base
from shiftbid_server.models.timestamp import TimestampMixin
from shiftbid_server.models.user import UserRole


def generate_invite_token() -> str:
    return secrets.token_urlsafe(32)


class InviteToken(Base, TimestampMixin):
    """Single-use invite. Once used it is never redeemed again."""

    __tablename__ = "invite_tokens"
    __table_args__ = (
        CheckConstraint(
            "contract_percent >= 0 AND contract_percent <= 100",
            name="invite_tokens_contract_percent_range",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    token: Mapped[str] = mapped_column(
        String(64), unique=True, nullable=False, index=True, default=generate_invite_token
    )
    contract_percent: Mapped[int] = mapped_column(Integer, nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SAEnum(UserRole, name="user_role"), default=UserRole.USER, nullable=False
    )
    used: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
