# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later
"""Add index on shifts.date for calendar and statistics ordering.

Revision ID: 0001_shifts_date_idx
Revises:
Create Date: 2024-06-03

"""
from typing import Sequence, Union

from alembic import op

revision: str = "0001_shifts_date_idx"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_index(
        "ix_shifts_date",
        "shifts",
        ["date"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_shifts_date", table_name="shifts")
