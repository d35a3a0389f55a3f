# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pydantic schemas for API request/response. JSON field names are camelCase."""

import datetime as dt
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, model_validator
from pydantic.alias_generators import to_camel

from shiftbid_server.models import ShiftType, UserRole

Popularity = Literal["none", "low", "medium", "high"]
QuotaStatus = Literal["met", "under"]
Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Auth / users
class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserResponse(CamelModel):
    id: int
    name: str
    email: str
    role: UserRole
    contract_percent: int
    created_at: dt.datetime
    updated_at: dt.datetime


class UserSummary(CamelModel):
    id: int
    name: str
    email: str


class AuthResponse(CamelModel):
    user: UserResponse
    token: str
    token_type: str = "bearer"


class UserCreate(CamelModel):
    name: Name
    email: EmailStr
    password: str = Field(min_length=6)
    contract_percent: int = Field(100, ge=0, le=100)
    role: UserRole = UserRole.USER


class UserUpdate(CamelModel):
    contract_percent: int | None = Field(None, ge=0, le=100)
    role: UserRole | None = None

    @model_validator(mode="after")
    def _require_a_field(self) -> "UserUpdate":
        if self.contract_percent is None and self.role is None:
            raise ValueError("At least one field (contractPercent or role) must be provided")
        return self


# Invites
class InviteCreate(CamelModel):
    email: EmailStr
    contract_percent: int = Field(ge=0, le=100)
    role: UserRole


class InviteResponse(CamelModel):
    id: int
    email: str
    token: str
    contract_percent: int
    role: UserRole
    used: bool
    created_at: dt.datetime
    used_at: dt.datetime | None = None


class InviteCreated(CamelModel):
    invite: InviteResponse
    invite_url: str


class InviteSignup(CamelModel):
    token: str = Field(min_length=1)
    name: Name
    password: str = Field(min_length=6)


# Shift windows
class ShiftWindowCreate(CamelModel):
    name: Name
    start_date: dt.date
    end_date: dt.date

    @model_validator(mode="after")
    def _start_before_end(self) -> "ShiftWindowCreate":
        if self.start_date >= self.end_date:
            raise ValueError("Start date must be before end date")
        return self


class ShiftWindowUpdate(CamelModel):
    name: Name | None = None
    start_date: dt.date | None = None
    end_date: dt.date | None = None


class ShiftWindowSummary(CamelModel):
    id: int
    name: str


class ShiftWindowBrief(ShiftWindowSummary):
    start_date: dt.date
    end_date: dt.date


class ShiftWindowResponse(ShiftWindowBrief):
    created_at: dt.datetime
    updated_at: dt.datetime
    shift_count: int = 0


class ShiftWindowDeleted(CamelModel):
    id: int
    deleted_shifts: int
    deleted_pins: int


# Shifts
class ShiftCreate(CamelModel):
    date: dt.date
    type: ShiftType
    shift_window_id: int
    weight: float | None = Field(None, ge=0)


class ShiftBulkCreate(CamelModel):
    shifts: list[ShiftCreate] = Field(min_length=1)


class ShiftWeightUpdate(CamelModel):
    weight: float = Field(ge=0)


class ShiftResponse(CamelModel):
    id: int
    date: dt.date
    type: ShiftType
    weight: float | None = None
    shift_window_id: int
    pin_count: int = 0
    shift_window: ShiftWindowBrief | None = None
    created_at: dt.datetime
    updated_at: dt.datetime


class ShiftListResponse(CamelModel):
    shift_window: ShiftWindowBrief
    shifts: list[ShiftResponse]
    count: int


class BulkShiftResult(CamelModel):
    shifts: list[ShiftResponse]
    created: int
    skipped: int


class ShiftWeightUpdated(CamelModel):
    shift: ShiftResponse
    previous_weight: float | None = None


class WindowShifts(CamelModel):
    window: ShiftWindowBrief
    shifts: list[ShiftResponse]


class ShiftStatsResponse(CamelModel):
    data: list[WindowShifts]
    total_shifts: int
    total_pins: int


# Pins
class PinCreate(CamelModel):
    user_id: int
    shift_id: int


class PinShiftSummary(CamelModel):
    id: int
    date: dt.date
    type: ShiftType
    shift_window: ShiftWindowSummary


class PinResponse(CamelModel):
    id: int
    user_id: int
    shift_id: int
    created_at: dt.datetime
    user: UserSummary
    shift: PinShiftSummary


class UserPinEntry(CamelModel):
    shift_id: int
    date: dt.date
    type: ShiftType
    created_at: dt.datetime


class WindowPins(CamelModel):
    window: ShiftWindowBrief
    pins: list[UserPinEntry]


class UserPinsResponse(CamelModel):
    user: UserSummary
    data: list[WindowPins]
    total_pins: int


# Statistics
class QuotaSimulation(CamelModel):
    contract_percent: int
    expected_shifts: int
    current_pins: int
    quota_status: QuotaStatus
    remaining_needed: int
    over_quota: int


class WindowPinStats(CamelModel):
    window_id: int
    window_name: str
    pins: int
    total_weight: float
    average_weight: float


class UserStatistics(CamelModel):
    total_pins: int
    average_shift_weight: float | None
    quota_simulation: QuotaSimulation
    pins_by_window: list[WindowPinStats]


class UserStatsUser(UserSummary):
    contract_percent: int


class UserStatsResponse(CamelModel):
    user: UserStatsUser
    statistics: UserStatistics


class HeatmapShift(CamelModel):
    id: int
    date: dt.date
    type: ShiftType
    weight: float | None = None
    pin_count: int
    shift_window: ShiftWindowBrief
    popularity: Popularity


class MostPopularShift(CamelModel):
    id: int
    date: dt.date
    type: ShiftType
    pin_count: int


class WindowStatistics(CamelModel):
    window: ShiftWindowBrief
    total_shifts: int
    total_pins: int
    average_pins_per_shift: float
    shifts_with_no_pins: int
    most_popular_shift: MostPopularShift | None = None
    max_pins: int


class TopUser(CamelModel):
    id: int
    name: str
    email: str
    contract_percent: int
    pin_count: int


class DashboardSummary(CamelModel):
    total_shifts: int
    total_pins: int
    total_users: int
    average_pins_per_user: float
    shifts_with_zero_pins: int


class AdminDashboard(CamelModel):
    summary: DashboardSummary
    shift_popularity_heatmap: list[HeatmapShift]
    shifts_with_zero_pins: list[HeatmapShift]
    window_statistics: list[WindowStatistics]
    top_users: list[TopUser]
