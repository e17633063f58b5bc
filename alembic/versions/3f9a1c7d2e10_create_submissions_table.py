"""create submissions table

Revision ID: 3f9a1c7d2e10
Revises:
Create Date: 2026-10-17 09:00:00.000000

One row per principal. Token counts are NUMERIC(39, 0) so the exact value
survives storage and sorts numerically.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "3f9a1c7d2e10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TABLE = "submissions"


def upgrade() -> None:
    op.create_table(
        TABLE,
        sa.Column("id", sa.Text(), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("tokens", sa.Numeric(39, 0), nullable=False, server_default="0"),
        sa.Column("agents", sa.Integer(), nullable=True),
        sa.Column("tabs", sa.Integer(), nullable=True),
        sa.Column("streak", sa.Integer(), nullable=True),
        sa.Column("usage_percentile", sa.Text(), nullable=True),
        sa.Column("top_models", sa.JSON(), nullable=True),
        sa.Column("joined_days_ago", sa.Integer(), nullable=True),
        sa.Column("screenshot_url", sa.Text(), nullable=True),
        sa.Column("social_link", sa.Text(), nullable=True),
        sa.Column("social_handle", sa.Text(), nullable=True),
        sa.Column("social_provider", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_submissions"),
        sa.UniqueConstraint("user_id", name="uq_submissions_user_id"),
        sa.CheckConstraint("tokens >= 0", name="ck_submissions_tokens_non_negative"),
    )
    op.create_index("idx_submissions_tokens", TABLE, ["tokens"])


def downgrade() -> None:
    op.drop_index("idx_submissions_tokens", table_name=TABLE)
    op.drop_table(TABLE)
