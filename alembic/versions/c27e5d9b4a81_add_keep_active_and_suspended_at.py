"""add keep-active flag and suspension date

Revision ID: c27e5d9b4a81
Revises: 8d41e6c0a5f2
Create Date: 2026-10-19 10:12:03.514920

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'c27e5d9b4a81'
down_revision: Union[str, Sequence[str], None] = '8d41e6c0a5f2'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    cols = {c["name"] for c in sa.inspect(op.get_bind()).get_columns("enrollments")}
    if "keep_active" not in cols:
        op.add_column(
            "enrollments",
            sa.Column("keep_active", sa.Boolean(), nullable=False, server_default=sa.false()),
        )
    if "suspended_at" not in cols:
        op.add_column(
            "enrollments",
            sa.Column("suspended_at", sa.DateTime(timezone=True), nullable=True),
        )


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table("enrollments", recreate="always") as batch_op:
        batch_op.drop_column("suspended_at")
        batch_op.drop_column("keep_active")
