# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Shift window model - a dated bidding period."""

from datetime import date

from sqlalchemy import CheckConstraint, Date, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiftbid_server.models.base import Base
from shiftbid_server.models.timestamp import UpdatedAtMixin


class ShiftWindow(Base, UpdatedAtMixin):
    """Named period whose shifts are open for bidding."""

    __tablename__ = "shift_windows"
    __table_args__ = (
        CheckConstraint("start_date < end_date", name="shift_windows_start_before_end"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    shifts: Mapped[list["Shift"]] = relationship(
        "Shift",
        back_populates="shift_window",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Shift.date, Shift.type",
    )

    def contains(self, day: date) -> bool:
        """True when day lies in [start_date, end_date]."""
        return self.start_date <= day <= self.end_date
