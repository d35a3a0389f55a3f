# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later
#
# Statistics: per-user quota simulation and the admin dashboard.
# Nothing here is cached; every call recomputes from the current pin and
# shift rows so counts always reflect the latest pins.

import logging
import math
from collections.abc import Iterable, Sequence

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from shiftbid_server.api.schemas import (
    AdminDashboard,
    DashboardSummary,
    HeatmapShift,
    MostPopularShift,
    QuotaSimulation,
    ShiftStatsResponse,
    TopUser,
    UserStatistics,
    UserStatsResponse,
    UserStatsUser,
    WindowPinStats,
    WindowShifts,
    WindowStatistics,
)
from shiftbid_server.config import settings
from shiftbid_server.models import Pin, Shift, User
from shiftbid_server.services.pins import get_user_or_404
from shiftbid_server.services.shifts import (
    shift_response,
    shifts_with_pin_counts,
    window_brief,
)

logger = logging.getLogger(__name__)

TOP_USERS_LIMIT = 10


def _round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def expected_shifts(contract_percent: int, full_time_shifts: int) -> int:
    """Shifts a user on contract_percent is expected to pin in one period."""
    return int(_round_half_up(contract_percent / 100 * full_time_shifts))


def simulate_quota(contract_percent: int, total_pins: int, full_time_shifts: int) -> QuotaSimulation:
    expected = expected_shifts(contract_percent, full_time_shifts)
    return QuotaSimulation(
        contract_percent=contract_percent,
        expected_shifts=expected,
        current_pins=total_pins,
        quota_status="met" if total_pins >= expected else "under",
        remaining_needed=max(0, expected - total_pins),
        over_quota=max(0, total_pins - expected),
    )


def average_weight(weights: Iterable[float | None]) -> float | None:
    """Mean of the non-null weights, or None when there are none."""
    present = [w for w in weights if w is not None]
    if not present:
        return None
    return sum(present) / len(present)


def classify_popularity(pin_count: int) -> str:
    if pin_count == 0:
        return "none"
    if pin_count <= 2:
        return "low"
    if pin_count <= 5:
        return "medium"
    return "high"


def build_user_statistics(
    contract_percent: int,
    pinned_shifts: Sequence[Shift],
    full_time_shifts: int,
) -> UserStatistics:
    """Aggregate one user's pins. Each shift must have shift_window loaded."""
    total_pins = len(pinned_shifts)

    by_window: dict[int, dict] = {}
    for shift in pinned_shifts:
        window = shift.shift_window
        entry = by_window.setdefault(
            window.id,
            {"window_name": window.name, "pins": 0, "weights": []},
        )
        entry["pins"] += 1
        if shift.weight is not None:
            entry["weights"].append(shift.weight)

    pins_by_window = [
        WindowPinStats(
            window_id=window_id,
            window_name=entry["window_name"],
            pins=entry["pins"],
            total_weight=sum(entry["weights"]),
            average_weight=average_weight(entry["weights"]) or 0.0,
        )
        for window_id, entry in by_window.items()
    ]
    return UserStatistics(
        total_pins=total_pins,
        average_shift_weight=average_weight(s.weight for s in pinned_shifts),
        quota_simulation=simulate_quota(contract_percent, total_pins, full_time_shifts),
        pins_by_window=pins_by_window,
    )


def build_window_statistics(shift_counts: Sequence[tuple[Shift, int]]) -> list[WindowStatistics]:
    """Per-window rollup. The most popular shift is the first to reach the maximum."""
    stats: dict[int, WindowStatistics] = {}
    for shift, pin_count in shift_counts:
        window = shift.shift_window
        ws = stats.get(window.id)
        if ws is None:
            ws = stats[window.id] = WindowStatistics(
                window=window_brief(window),
                total_shifts=0,
                total_pins=0,
                average_pins_per_shift=0.0,
                shifts_with_no_pins=0,
                max_pins=0,
            )
        ws.total_shifts += 1
        ws.total_pins += pin_count
        if pin_count == 0:
            ws.shifts_with_no_pins += 1
        if pin_count > ws.max_pins:
            ws.max_pins = pin_count
            ws.most_popular_shift = MostPopularShift(
                id=shift.id, date=shift.date, type=shift.type, pin_count=pin_count
            )
        ws.average_pins_per_shift = ws.total_pins / ws.total_shifts
    return list(stats.values())


def build_admin_dashboard(
    shift_counts: Sequence[tuple[Shift, int]],
    total_users: int,
    total_pins: int,
    top_users: Sequence[tuple[User, int]],
) -> AdminDashboard:
    heatmap = [
        HeatmapShift(
            id=shift.id,
            date=shift.date,
            type=shift.type,
            weight=shift.weight,
            pin_count=pin_count,
            shift_window=window_brief(shift.shift_window),
            popularity=classify_popularity(pin_count),
        )
        for shift, pin_count in shift_counts
    ]
    zero_pins = [row for row in heatmap if row.pin_count == 0]
    average_per_user = total_pins / total_users if total_users > 0 else 0
    return AdminDashboard(
        summary=DashboardSummary(
            total_shifts=len(heatmap),
            total_pins=total_pins,
            total_users=total_users,
            average_pins_per_user=_round_half_up(average_per_user, 2),
            shifts_with_zero_pins=len(zero_pins),
        ),
        shift_popularity_heatmap=heatmap,
        shifts_with_zero_pins=zero_pins,
        window_statistics=build_window_statistics(shift_counts),
        top_users=[
            TopUser(
                id=user.id,
                name=user.name,
                email=user.email,
                contract_percent=user.contract_percent,
                pin_count=pin_count,
            )
            for user, pin_count in top_users[:TOP_USERS_LIMIT]
        ],
    )


async def get_user_statistics(db: AsyncSession, user_id: int) -> UserStatsResponse:
    user = await get_user_or_404(db, user_id)
    result = await db.execute(
        select(Shift)
        .join(Pin, Pin.shift_id == Shift.id)
        .options(joinedload(Shift.shift_window))
        .where(Pin.user_id == user_id)
        .order_by(Shift.date, Shift.type)
    )
    pinned_shifts = result.scalars().all()
    return UserStatsResponse(
        user=UserStatsUser(
            id=user.id,
            name=user.name,
            email=user.email,
            contract_percent=user.contract_percent,
        ),
        statistics=build_user_statistics(
            user.contract_percent, pinned_shifts, settings.full_time_shifts
        ),
    )


async def _load_shift_counts(db: AsyncSession) -> list[tuple[Shift, int]]:
    result = await db.execute(shifts_with_pin_counts())
    return [(shift, pin_count) for shift, pin_count in result.all()]


async def get_admin_dashboard(db: AsyncSession) -> AdminDashboard:
    shift_counts = await _load_shift_counts(db)
    total_users = await db.scalar(select(func.count()).select_from(User)) or 0
    total_pins = await db.scalar(select(func.count()).select_from(Pin)) or 0

    per_user = (
        select(Pin.user_id, func.count(Pin.id).label("pin_count"))
        .group_by(Pin.user_id)
        .subquery()
    )
    pin_count = func.coalesce(per_user.c.pin_count, 0).label("pin_count")
    top = await db.execute(
        select(User, pin_count)
        .outerjoin(per_user, per_user.c.user_id == User.id)
        .order_by(desc(pin_count), User.id)
        .limit(TOP_USERS_LIMIT)
    )
    logger.debug("Dashboard: %d shifts, %d pins, %d users", len(shift_counts), total_pins, total_users)
    return build_admin_dashboard(
        shift_counts, total_users, total_pins, [(u, c) for u, c in top.all()]
    )


async def get_shift_stats(db: AsyncSession) -> ShiftStatsResponse:
    """All shifts with pin counts, grouped by window."""
    shift_counts = await _load_shift_counts(db)
    grouped: dict[int, WindowShifts] = {}
    for shift, pin_count in shift_counts:
        window = shift.shift_window
        group = grouped.setdefault(window.id, WindowShifts(window=window_brief(window), shifts=[]))
        group.shifts.append(shift_response(shift, pin_count))
    return ShiftStatsResponse(
        data=list(grouped.values()),
        total_shifts=len(shift_counts),
        total_pins=sum(c for _, c in shift_counts),
    )
