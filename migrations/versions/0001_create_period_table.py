"""create period table

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

One row per logged day. `logdate` is the primary key, which is what makes
"at most one entry per date" hold at the database level.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "period",
        sa.Column("logdate", sa.Date(), nullable=False),
        sa.Column("flow", sa.SmallInteger(), nullable=False),
        sa.PrimaryKeyConstraint("logdate"),
    )


def downgrade() -> None:
    op.drop_table("period")
