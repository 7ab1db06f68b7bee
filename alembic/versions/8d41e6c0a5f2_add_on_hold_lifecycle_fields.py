"""add on-hold lifecycle fields

Revision ID: 8d41e6c0a5f2
Revises: 1f3c9a7b2e10
Create Date: 2026-10-06 21:37:45.902113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8d41e6c0a5f2'
down_revision: Union[str, Sequence[str], None] = '1f3c9a7b2e10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _columns(table: str) -> set[str]:
    return {c["name"] for c in sa.inspect(op.get_bind()).get_columns(table)}


def upgrade() -> None:
    """Upgrade schema."""
    course_cols = _columns("courses")
    if "suspension_period_days" not in course_cols:
        op.add_column("courses", sa.Column("suspension_period_days", sa.Integer(), nullable=True))

    enrollment_cols = _columns("enrollments")
    if "on_hold" not in enrollment_cols:
        op.add_column(
            "enrollments",
            sa.Column("on_hold", sa.Boolean(), nullable=False, server_default=sa.false()),
        )
    if "suspended" not in enrollment_cols:
        op.add_column(
            "enrollments",
            sa.Column("suspended", sa.Boolean(), nullable=False, server_default=sa.false()),
        )


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table("enrollments", recreate="always") as batch_op:
        batch_op.drop_column("suspended")
        batch_op.drop_column("on_hold")
    with op.batch_alter_table("courses", recreate="always") as batch_op:
        batch_op.drop_column("suspension_period_days")
