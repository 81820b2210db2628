"""create sites, users and roles

Revision ID: 3b8e1f0a2c5d
Revises:
Create Date: 2026-09-28
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3b8e1f0a2c5d"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "sites",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("really_delete_users", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "site_users",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("site_id", sa.String(length=64), nullable=False),
        sa.Column("user_name", sa.String(length=255), nullable=False),
        sa.Column("normalized_user_name", sa.String(length=255), nullable=True),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("normalized_email", sa.String(length=255), nullable=True),
        sa.Column("email_confirmed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("last_password_changed_utc", sa.DateTime(), nullable=True),
        sa.Column("security_stamp", sa.String(length=64), nullable=True),
        sa.Column("phone_number", sa.String(length=50), nullable=True),
        sa.Column("phone_number_confirmed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("two_factor_enabled", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("lockout_end_utc", sa.DateTime(), nullable=True),
        sa.Column("access_failed_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_utc", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("site_id", "user_name", name="uq_site_users_site_user_name"),
    )
    op.create_index(op.f("ix_site_users_site_id"), "site_users", ["site_id"], unique=False)
    op.create_index(op.f("ix_site_users_normalized_user_name"), "site_users", ["normalized_user_name"], unique=False)
    op.create_index(op.f("ix_site_users_normalized_email"), "site_users", ["normalized_email"], unique=False)

    op.create_table(
        "site_roles",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("site_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("normalized_name", sa.String(length=50), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("site_id", "normalized_name", name="uq_site_roles_site_name"),
    )
    op.create_index(op.f("ix_site_roles_site_id"), "site_roles", ["site_id"], unique=False)

    op.create_table(
        "site_user_roles",
        sa.Column("role_id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.ForeignKeyConstraint(["role_id"], ["site_roles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["site_users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("role_id", "user_id"),
    )


def downgrade() -> None:
    op.drop_table("site_user_roles")
    op.drop_index(op.f("ix_site_roles_site_id"), table_name="site_roles")
    op.drop_table("site_roles")
    op.drop_index(op.f("ix_site_users_normalized_email"), table_name="site_users")
    op.drop_index(op.f("ix_site_users_normalized_user_name"), table_name="site_users")
    op.drop_index(op.f("ix_site_users_site_id"), table_name="site_users")
    op.drop_table("site_users")
    op.drop_table("sites")
