"""create users table

Revision ID: 0001
Revises:
Create Date: 2026-02-23

One row per Good Day participant: Slack id, the GitHub repository holding
their survey CSV, their time zone and the local time of the daily prompt.
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("slackid", sa.String(64), nullable=False),
        sa.Column("ghuser", sa.String(128), nullable=True),
        sa.Column("ghrepo", sa.String(128), nullable=True),
        sa.Column("timezone", sa.String(64), nullable=False, server_default="UTC"),
        sa.Column("prompt_time", sa.String(5), nullable=False, server_default="16:00"),
        sa.Column(
            "is_unsubscribed",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_slackid", "users", ["slackid"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_users_slackid", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
