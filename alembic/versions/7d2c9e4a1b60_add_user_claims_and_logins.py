"""add user claims and external logins

Revision ID: 7d2c9e4a1b60
Revises: 3b8e1f0a2c5d
Create Date: 2026-10-02
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "7d2c9e4a1b60"
down_revision = "3b8e1f0a2c5d"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "site_user_claims",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("site_id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("claim_type", sa.String(length=255), nullable=False),
        sa.Column("claim_value", sa.String(length=1024), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["site_users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_site_user_claims_site_id"), "site_user_claims", ["site_id"], unique=False)
    op.create_index(op.f("ix_site_user_claims_user_id"), "site_user_claims", ["user_id"], unique=False)

    op.create_table(
        "site_user_logins",
        sa.Column("site_id", sa.String(length=64), nullable=False),
        sa.Column("login_provider", sa.String(length=128), nullable=False),
        sa.Column("provider_key", sa.String(length=128), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("provider_display_name", sa.String(length=100), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["site_users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("site_id", "login_provider", "provider_key"),
    )
    op.create_index(op.f("ix_site_user_logins_user_id"), "site_user_logins", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_site_user_logins_user_id"), table_name="site_user_logins")
    op.drop_table("site_user_logins")
    op.drop_index(op.f("ix_site_user_claims_user_id"), table_name="site_user_claims")
    op.drop_index(op.f("ix_site_user_claims_site_id"), table_name="site_user_claims")
    op.drop_table("site_user_claims")
