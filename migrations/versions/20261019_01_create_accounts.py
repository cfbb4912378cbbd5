"""create accounts table

Revision ID: 3f9c1a7d2b10
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f9c1a7d2b10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=254), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="User"),
        sa.Column("reset_token_hash", sa.String(length=64)),
        sa.Column("reset_token_expires_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(
            "role IN ('User', 'SuperAdmin', 'AdmissionsAdmin', 'ContentAdmin', 'AudienceAdmin')",
            name="ck_accounts_role",
        ),
        sa.CheckConstraint(
            "(reset_token_hash IS NULL) = (reset_token_expires_at IS NULL)",
            name="ck_accounts_reset_token_pair",
        ),
    )
    op.create_index("ix_accounts_username", "accounts", ["username"], unique=True)
    op.create_index("ix_accounts_email", "accounts", ["email"], unique=True)
    op.create_index("ix_accounts_reset_token_hash", "accounts", ["reset_token_hash"])


def downgrade() -> None:
    op.drop_index("ix_accounts_reset_token_hash", table_name="accounts")
    op.drop_index("ix_accounts_email", table_name="accounts")
    op.drop_index("ix_accounts_username", table_name="accounts")
    op.drop_table("accounts")
