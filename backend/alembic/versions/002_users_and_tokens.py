"""Add user and accesstoken tables

Revision ID: 002_users_and_tokens
Revises: 001_initial
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "002_users_and_tokens"
down_revision = "001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_username", "user", ["username"], unique=True)

    op.create_table(
        "accesstoken",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("token_hash", sa.String(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_accesstoken_user_id", "accesstoken", ["user_id"])
    op.create_index("ix_accesstoken_token_hash", "accesstoken", ["token_hash"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_accesstoken_token_hash", table_name="accesstoken")
    op.drop_index("ix_accesstoken_user_id", table_name="accesstoken")
    op.drop_table("accesstoken")
    op.drop_index("ix_user_username", table_name="user")
    op.drop_table("user")
