# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Database models."""

from shiftbid_server.models.base import Base
from shiftbid_server.models.user import User, UserRole
from shiftbid_server.models.invitation import InviteToken
from shiftbid_server.models.shift_window import ShiftWindow
from shiftbid_server.models.shift import DEFAULT_SHIFT_WEIGHTS, Shift, ShiftType
from shiftbid_server.models.pin import Pin

__all__ = [
    "Base",
    "User",
    "UserRole",
    "InviteToken",
    "ShiftWindow",
    "Shift",
    "ShiftType",
    "DEFAULT_SHIFT_WEIGHTS",
    "Pin",
]
