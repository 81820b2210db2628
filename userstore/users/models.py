from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from userstore.db.base import Base


class User(Base):
    __tablename__ = "site_users"
    __table_args__ = (
        UniqueConstraint("site_id", "user_name", name="uq_site_users_site_user_name"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)               # e.g. u_3f9a...
    site_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
    normalized_user_name: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    normalized_email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    email_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_password_changed_utc: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    security_stamp: Mapped[str | None] = mapped_column(String(64), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    phone_number_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    two_factor_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    lockout_end_utc: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    access_failed_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_utc: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class Role(Base):
    __tablename__ = "site_roles"
    __table_args__ = (
        UniqueConstraint("site_id", "normalized_name", name="uq_site_roles_site_name"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    site_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    normalized_name: Mapped[str] = mapped_column(String(50), nullable=False)


class UserRole(Base):
    __tablename__ = "site_user_roles"

    role_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("site_roles.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("site_users.id", ondelete="CASCADE"), primary_key=True
    )


class UserClaim(Base):
    __tablename__ = "site_user_claims"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    site_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("site_users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    claim_type: Mapped[str] = mapped_column(String(255), nullable=False)
    claim_value: Mapped[str | None] = mapped_column(String(1024), nullable=True)


class UserLogin(Base):
    __tablename__ = "site_user_logins"

    site_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    login_provider: Mapped[str] = mapped_column(String(128), primary_key=True)
    provider_key: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("site_users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    provider_display_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
