# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Statistics API routes: per-user quota and admin dashboard."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbid_server.api.schemas import AdminDashboard, UserStatsResponse
from shiftbid_server.auth import ensure_self_or_admin, get_current_user, require_admin
from shiftbid_server.database import get_db
from shiftbid_server.models import User
from shiftbid_server.services.stats import get_admin_dashboard, get_user_statistics

router = APIRouter(tags=["stats"])


@router.get("/user-stats/{user_id}", response_model=UserStatsResponse)
async def user_stats(
    user_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserStatsResponse:
    """Pin totals, average weight and quota simulation for one user."""
    ensure_self_or_admin(user, user_id)
    return await get_user_statistics(db, user_id)


@router.get("/admin/dashboard", response_model=AdminDashboard)
async def admin_dashboard(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> AdminDashboard:
    """Shift popularity heatmap, window rollups and top users. Admin only."""
    return await get_admin_dashboard(db)
