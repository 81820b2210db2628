from sqlalchemy import exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from userstore.users.models import Role, User, UserClaim, UserLogin, UserRole
from userstore.users.schemas import Claim, SiteRole, SiteUser, UserLoginRecord


def _active_users(site_id: str):
    return select(User).where(User.site_id == site_id, User.is_deleted.is_(False))


class SqlUserQueries:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _one(self, stmt) -> SiteUser | None:
        row = await self.db.scalar(stmt.limit(1))
        if not row:
            return None
        return SiteUser.model_validate(row)

    async def _many(self, stmt) -> list[SiteUser]:
        rows = (await self.db.execute(stmt)).scalars().all()
        return [SiteUser.model_validate(row) for row in rows]

    async def fetch(self, site_id: str, user_id: str) -> SiteUser | None:
        return await self._one(_active_users(site_id).where(User.id == user_id))

    async def fetch_by_email(self, site_id: str, normalized_email: str) -> SiteUser | None:
        return await self._one(
            _active_users(site_id).where(User.normalized_email == normalized_email)
        )

    async def fetch_by_login_name(
        self, site_id: str, login_name: str, allow_email_fallback: bool = False
    ) -> SiteUser | None:
        match = User.normalized_user_name == login_name
        if allow_email_fallback:
            match = or_(match, User.normalized_email == login_name)
        return await self._one(
            _active_users(site_id).where(match).order_by(User.normalized_user_name != login_name)
        )

    async def fetch_role(self, site_id: str, role_name: str) -> SiteRole | None:
        row = await self.db.scalar(
            select(Role)
            .where(
                Role.site_id == site_id,
                Role.normalized_name == (role_name or "").strip().upper(),
            )
            .limit(1)
        )
        if not row:
            return None
        return SiteRole.model_validate(row)

    async def get_user_roles(self, site_id: str, user_id: str) -> list[str]:
        rows = await self.db.execute(
            select(Role.name)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(Role.site_id == site_id, UserRole.user_id == user_id)
            .order_by(Role.name)
        )
        return list(rows.scalars().all())

    async def get_claims_by_user(self, site_id: str, user_id: str) -> list[Claim]:
        rows = await self.db.execute(
            select(UserClaim)
            .where(UserClaim.site_id == site_id, UserClaim.user_id == user_id)
            .order_by(UserClaim.id)
        )
        return [Claim(type=c.claim_type, value=c.claim_value) for c in rows.scalars().all()]

    async def get_users_for_claim(
        self, site_id: str, claim_type: str, claim_value: str | None
    ) -> list[SiteUser]:
        has_claim = exists().where(
            UserClaim.user_id == User.id,
            UserClaim.site_id == site_id,
            UserClaim.claim_type == claim_type,
            UserClaim.claim_value == claim_value,
        )
        return await self._many(_active_users(site_id).where(has_claim).order_by(User.user_name))

    async def find_login(
        self, site_id: str, login_provider: str, provider_key: str
    ) -> UserLoginRecord | None:
        row = await self.db.scalar(
            select(UserLogin)
            .where(
                UserLogin.site_id == site_id,
                UserLogin.login_provider == login_provider,
                UserLogin.provider_key == provider_key,
            )
            .limit(1)
        )
        if not row:
            return None
        return UserLoginRecord.model_validate(row)

    async def get_logins_by_user(self, site_id: str, user_id: str) -> list[UserLoginRecord]:
        rows = await self.db.execute(
            select(UserLogin)
            .where(UserLogin.site_id == site_id, UserLogin.user_id == user_id)
            .order_by(UserLogin.login_provider)
        )
        return [UserLoginRecord.model_validate(row) for row in rows.scalars().all()]

    async def get_users_in_role(self, site_id: str, role_name: str) -> list[SiteUser]:
        in_role = (
            select(UserRole.user_id)
            .join(Role, Role.id == UserRole.role_id)
            .where(Role.site_id == site_id, Role.normalized_name == (role_name or "").strip().upper())
        )
        return await self._many(
            _active_users(site_id).where(User.id.in_(in_role)).order_by(User.user_name)
        )

    async def login_exists(self, site_id: str, login_name: str) -> bool:
        found = await self.db.scalar(
            select(User.id)
            .where(User.site_id == site_id, func.lower(User.user_name) == login_name.lower())
            .limit(1)
        )
        return found is not None
