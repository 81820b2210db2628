import secrets

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from userstore.users.models import User, UserClaim, UserLogin, UserRole
from userstore.users.schemas import Claim, SiteUser, UserLoginRecord

# columns written by update(); access_failed_count has its own command
_UPDATABLE_FIELDS = (
    "site_id",
    "user_name",
    "normalized_user_name",
    "display_name",
    "email",
    "normalized_email",
    "email_confirmed",
    "password_hash",
    "last_password_changed_utc",
    "security_stamp",
    "phone_number",
    "phone_number_confirmed",
    "two_factor_enabled",
    "lockout_end_utc",
)


def new_user_id() -> str:
    return f"u_{secrets.token_hex(12)}"


class SqlUserCommands:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user: SiteUser) -> None:
        if not user.id:
            user.id = new_user_id()

        row = User(
            id=user.id,
            access_failed_count=user.access_failed_count,
            is_deleted=False,
            **{field: getattr(user, field) for field in _UPDATABLE_FIELDS},
        )
        self.db.add(row)
        await self.db.commit()

    async def update(self, user: SiteUser) -> None:
        values = {field: getattr(user, field) for field in _UPDATABLE_FIELDS}
        await self.db.execute(update(User).where(User.id == user.id).values(**values))
        await self.db.commit()

    async def delete(self, site_id: str, user_id: str) -> None:
        await self.db.execute(
            delete(UserLogin).where(UserLogin.site_id == site_id, UserLogin.user_id == user_id)
        )
        await self.db.execute(
            delete(UserClaim).where(UserClaim.site_id == site_id, UserClaim.user_id == user_id)
        )
        await self.db.execute(delete(UserRole).where(UserRole.user_id == user_id))
        await self.db.execute(delete(User).where(User.site_id == site_id, User.id == user_id))
        await self.db.commit()

    async def flag_as_deleted(self, user_id: str) -> None:
        await self.db.execute(update(User).where(User.id == user_id).values(is_deleted=True))
        await self.db.commit()

    async def add_user_to_role(self, role_id: str, user_id: str) -> None:
        existing = await self.db.scalar(
            select(UserRole).where(UserRole.role_id == role_id, UserRole.user_id == user_id)
        )
        if existing:
            return
        self.db.add(UserRole(role_id=role_id, user_id=user_id))
        await self.db.commit()

    async def remove_user_from_role(self, role_id: str, user_id: str) -> None:
        await self.db.execute(
            delete(UserRole).where(UserRole.role_id == role_id, UserRole.user_id == user_id)
        )
        await self.db.commit()

    async def create_claim(self, site_id: str, user_id: str, claim: Claim) -> None:
        self.db.add(
            UserClaim(
                site_id=site_id,
                user_id=user_id,
                claim_type=claim.type,
                claim_value=claim.value,
            )
        )
        await self.db.commit()

    async def delete_claims_by_user(self, site_id: str, user_id: str, claim_type: str) -> None:
        await self.db.execute(
            delete(UserClaim).where(
                UserClaim.site_id == site_id,
                UserClaim.user_id == user_id,
                UserClaim.claim_type == claim_type,
            )
        )
        await self.db.commit()

    async def create_login(self, login: UserLoginRecord) -> None:
        self.db.add(
            UserLogin(
                site_id=login.site_id,
                user_id=login.user_id,
                login_provider=login.login_provider,
                provider_key=login.provider_key,
                provider_display_name=login.provider_display_name,
            )
        )
        await self.db.commit()

    async def delete_login(
        self, site_id: str, user_id: str, login_provider: str, provider_key: str
    ) -> None:
        await self.db.execute(
            delete(UserLogin).where(
                UserLogin.site_id == site_id,
                UserLogin.user_id == user_id,
                UserLogin.login_provider == login_provider,
                UserLogin.provider_key == provider_key,
            )
        )
        await self.db.commit()

    async def update_failed_password_attempt_count(self, user_id: str, count: int) -> None:
        await self.db.execute(
            update(User).where(User.id == user_id).values(access_failed_count=count)
        )
        await self.db.commit()
