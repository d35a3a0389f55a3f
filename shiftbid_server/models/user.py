# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""User model."""

import enum

from sqlalchemy import CheckConstraint, Enum as SAEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiftbid_server.models.base import Base
from shiftbid_server.models.timestamp import UpdatedAtMixin


class UserRole(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class User(Base, UpdatedAtMixin):
    """Employee or administrator account."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "contract_percent >= 0 AND contract_percent <= 100",
            name="users_contract_percent_range",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SAEnum(UserRole, name="user_role"), default=UserRole.USER, nullable=False
    )
    contract_percent: Mapped[int] = mapped_column(Integer, default=100, nullable=False)

    pins: Mapped[list["Pin"]] = relationship(
        "Pin", back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
