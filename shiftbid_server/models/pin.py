# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pin model - a user's bid on a shift."""

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiftbid_server.models.base import Base
from shiftbid_server.models.timestamp import TimestampMixin


class Pin(Base, TimestampMixin):
    """User wants to work this shift. Immutable; removed by unpinning."""

    __tablename__ = "pins"
    __table_args__ = (UniqueConstraint("user_id", "shift_id", name="pins_user_shift_key"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    shift_id: Mapped[int] = mapped_column(
        ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False, index=True
    )

    user: Mapped["User"] = relationship("User", back_populates="pins")
    shift: Mapped["Shift"] = relationship("Shift", back_populates="pins")
