# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Shift model."""

import enum
import datetime as dt

from sqlalchemy import CheckConstraint, Date, Enum as SAEnum, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiftbid_server.models.base import Base
from shiftbid_server.models.timestamp import UpdatedAtMixin


class ShiftType(str, enum.Enum):
    EARLY = "EARLY"
    LATE = "LATE"


# Early shifts are less desirable, so they carry more weight by default.
DEFAULT_SHIFT_WEIGHTS = {
    ShiftType.EARLY: 1.2,
    ShiftType.LATE: 1.0,
}


def default_weight(shift_type: ShiftType) -> float:
    return DEFAULT_SHIFT_WEIGHTS[ShiftType(shift_type)]


class Shift(Base, UpdatedAtMixin):
    """Single early/late slot on one date inside one shift window."""

    __tablename__ = "shifts"
    __table_args__ = (
        UniqueConstraint("date", "type", "shift_window_id", name="shifts_date_type_window_key"),
        CheckConstraint("weight >= 0", name="shifts_weight_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    shift_window_id: Mapped[int] = mapped_column(
        ForeignKey("shift_windows.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    type: Mapped[ShiftType] = mapped_column(SAEnum(ShiftType, name="shift_type"), nullable=False)
    # Null for shifts without a weight; writers pass default_weight(type).
    weight: Mapped[float | None] = mapped_column(Float, nullable=True)

    shift_window: Mapped["ShiftWindow"] = relationship("ShiftWindow", back_populates="shifts")
    pins: Mapped[list["Pin"]] = relationship(
        "Pin", back_populates="shift", cascade="all, delete-orphan", passive_deletes=True
    )
