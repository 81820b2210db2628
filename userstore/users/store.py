"""Site user store.

Adapts per-site user, role, claim and external login storage to the
operation set an identity layer expects. Every tenant scoped lookup or write
goes through ``TenantResolver`` first, so in related sites mode all sites
share one user pool.

Each capability group lives in its own mixin; ``UserStore`` composes them.
"""
import logging
from datetime import datetime, timezone
from typing import Iterable

from userstore.core.cancellation import CancellationToken, raise_if_cancelled
from userstore.core.config import MultiTenantOptions, settings
from userstore.core.errors import StoreClosedError
from userstore.sites.schemas import SiteSettings
from userstore.users.contracts import UserCommands, UserQueries
from userstore.users.default_roles import DefaultRoleAssigner
from userstore.users.login_names import LoginNameSuggester
from userstore.users.schemas import (
    Claim,
    IdentityResult,
    LoginInfo,
    SiteUser,
    UserLoginRecord,
)
from userstore.users.tenancy import TenantResolver

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _require_user(user: SiteUser | None) -> SiteUser:
    if user is None:
        raise ValueError("user is required")
    return user


class _StoreBase:
    def __init__(
        self,
        commands: UserCommands,
        queries: UserQueries,
        options: MultiTenantOptions | None = None,
        *,
        debug: bool | None = None,
    ):
        if commands is None:
            raise ValueError("commands is required")
        if queries is None:
            raise ValueError("queries is required")

        self.commands = commands
        self.queries = queries
        self.options = options or settings.multi_tenant_options()
        self.resolver = TenantResolver(self.options)
        self.login_names = LoginNameSuggester(queries)
        self.default_roles = DefaultRoleAssigner(commands, queries)
        self.debug = settings.USER_STORE_DEBUG if debug is None else debug
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    async def __aenter__(self):
        self._begin("open", None)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _begin(self, operation: str, cancel: CancellationToken | None) -> None:
        if self._closed:
            raise StoreClosedError(f"{type(self).__name__} is closed")
        raise_if_cancelled(cancel)
        if self.debug:
            logger.debug("%s", operation)

    def _scope(self, site: SiteSettings) -> str | None:
        if site is None:
            raise ValueError("site is required")
        return self.resolver.resolve(site.id)

    async def _persist(self, user: SiteUser, cancel: CancellationToken | None) -> None:
        # users that were never created are saved by create()
        if not user.id:
            return
        await self.commands.update(user)
        raise_if_cancelled(cancel)


class UserLifecycleMixin(_StoreBase):
    async def create(
        self, site: SiteSettings, user: SiteUser, cancel: CancellationToken | None = None
    ) -> IdentityResult:
        self._begin("create", cancel)
        _require_user(user)
        if site is None:
            raise ValueError("site is required")

        # in related sites mode every user lives in the shared pool
        user.site_id = self.resolver.resolve(user.site_id or site.id)

        if not user.user_name or not user.display_name:
            suggested = await self.login_names.suggest(user.site_id, user.email, cancel)
            if not user.user_name:
                user.user_name = suggested
            if not user.display_name:
                user.display_name = suggested

        raise_if_cancelled(cancel)
        await self.commands.create(user)
        raise_if_cancelled(cancel)

        await self.default_roles.assign_defaults(
            user.site_id,
            user.id,
            self.options.default_new_user_roles,
            cancel,
        )
        return IdentityResult.success()

    async def update(self, user: SiteUser, cancel: CancellationToken | None = None) -> IdentityResult:
        self._begin("update", cancel)
        _require_user(user)

        await self.commands.update(user)
        raise_if_cancelled(cancel)
        return IdentityResult.success()

    async def delete(
        self, site: SiteSettings, user: SiteUser, cancel: CancellationToken | None = None
    ) -> IdentityResult:
        self._begin("delete", cancel)
        _require_user(user)
        if site is None:
            raise ValueError("site is required")

        if site.really_delete_users:
            await self.commands.delete(user.site_id, user.id)
        else:
            await self.commands.flag_as_deleted(user.id)
        raise_if_cancelled(cancel)
        return IdentityResult.success()

    async def find_by_id(
        self, site: SiteSettings, user_id: str, cancel: CancellationToken | None = None
    ) -> SiteUser | None:
        self._begin("find_by_id", cancel)

        user = await self.queries.fetch(self._scope(site), user_id)
        raise_if_cancelled(cancel)
        return user

    async def find_by_name(
        self, site: SiteSettings, normalized_user_name: str, cancel: CancellationToken | None = None
    ) -> SiteUser | None:
        self._begin("find_by_name", cancel)

        user = await self.queries.fetch_by_login_name(
            self._scope(site), normalized_user_name, allow_email_fallback=True
        )
        raise_if_cancelled(cancel)
        return user

    async def suggest_login_name_from_email(
        self, site_id: str, email: str, cancel: CancellationToken | None = None
    ) -> str:
        self._begin("suggest_login_name_from_email", cancel)
        return await self.login_names.suggest(self.resolver.resolve(site_id), email, cancel)


class UserNameMixin(_StoreBase):
    async def get_user_id(self, user: SiteUser, cancel: CancellationToken | None = None) -> str | None:
        self._begin("get_user_id", cancel)
        return _require_user(user).id

    async def get_user_name(self, user: SiteUser, cancel: CancellationToken | None = None) -> str:
        self._begin("get_user_name", cancel)
        return _require_user(user).user_name

    async def set_user_name(
        self, site: SiteSettings, user: SiteUser, user_name: str, cancel: CancellationToken | None = None
    ) -> None:
        self._begin("set_user_name", cancel)
        _require_user(user)
        if not user.site_id and site is not None:
            user.site_id = self._scope(site)

        user.user_name = user_name
        await self._persist(user, cancel)

    async def get_normalized_user_name(
        self, user: SiteUser, cancel: CancellationToken | None = None
    ) -> str | None:
        self._begin("get_normalized_user_name", cancel)
        return _require_user(user).normalized_user_name

    async def set_normalized_user_name(
        self,
        site: SiteSettings,
        user: SiteUser,
        normalized_user_name: str | None,
        cancel: CancellationToken | None = None,
    ) -> None:
        self._begin("set_normalized_user_name", cancel)
        _require_user(user)
        if not user.site_id and site is not None:
            user.site_id = self._scope(site)

        user.normalized_user_name = normalized_user_name
        await self._persist(user, cancel)


class SecurityStampMixin(_StoreBase):
    async def get_security_stamp(self, user: SiteUser, cancel: CancellationToken | None = None) -> str | None:
        self._begin("get_security_stamp", cancel)
        return _require_user(user).security_stamp

    async def set_security_stamp(
        self, user: SiteUser, stamp: str | None, cancel: CancellationToken | None = None
    ) -> None:
        self._begin("set_security_stamp", cancel)
        _require_user(user).security_stamp = stamp
        await self._persist(user, cancel)


class EmailMixin(_StoreBase):
    async def find_by_email(
        self, site: SiteSettings, normalized_email: str, cancel: CancellationToken | None = None
    ) -> SiteUser | None:
        self._begin("find_by_email", cancel)

        user = await self.queries.fetch_by_email(self._scope(site), normalized_email)
        raise_if_cancelled(cancel)
        return user

    async def get_email(self, user: SiteUser, cancel: CancellationToken | None = None) -> str:
        self._begin("get_email", cancel)
        return _require_user(user).email

    async def set_email(
        self, site: SiteSettings, user: SiteUser, email: str, cancel: CancellationToken | None = None
    ) -> None:
        self._begin("set_email", cancel)
        _require_user(user)
        if not user.site_id and site is not None:
            user.site_id = self._scope(site)

        user.email = email
        await self._persist(user, cancel)

    async def get_normalized_email(self, user: SiteUser, cancel: CancellationToken | None = None) -> str | None:
        self._begin("get_normalized_email", cancel)
        return _require_user(user).normalized_email

    async def set_normalized_email(
        self,
        site: SiteSettings,
        user: SiteUser,
        normalized_email: str | None,
        cancel: CancellationToken | None = None,
    ) -> None:
        self._begin("set_normalized_email", cancel)
        _require_user(user)
        if not user.site_id and site is not None:
            user.site_id = self._scope(site)

        user.normalized_email = normalized_email
        await self._persist(user, cancel)

    async def get_email_confirmed(self, user: SiteUser, cancel: CancellationToken | None = None) -> bool:
        self._begin("get_email_confirmed", cancel)
        return _require_user(user).email_confirmed

    async def set_email_confirmed(
        self, site: SiteSettings, user: SiteUser, confirmed: bool, cancel: CancellationToken | None = None
    ) -> None:
        self._begin("set_email_confirmed", cancel)
        _require_user(user)
        if not user.site_id and site is not None:
            user.site_id = self._scope(site)

        user.email_confirmed = confirmed
        await self._persist(user, cancel)


class PasswordMixin(_StoreBase):
    async def get_password_hash(self, user: SiteUser, cancel: CancellationToken | None = None) -> str | None:
        self._begin("get_password_hash", cancel)
        return _require_user(user).password_hash

    async def has_password(self, user: SiteUser, cancel: CancellationToken | None = None) -> bool:
        self._begin("has_password", cancel)
        return bool(_require_user(user).password_hash)

    async def set_password_hash(
        self, user: SiteUser, password_hash: str | None, cancel: CancellationToken | None = None
    ) -> None:
        self._begin("set_password_hash", cancel)
        _require_user(user)

        user.password_hash = password_hash
        user.last_password_changed_utc = _utcnow()
        await self._persist(user, cancel)


class LockoutMixin(_StoreBase):
    async def get_lockout_enabled(self, user: SiteUser, cancel: CancellationToken | None = None) -> bool:
        self._begin("get_lockout_enabled", cancel)
        _require_user(user)
        # every user can be locked out
        return True

    async def set_lockout_enabled(
        self, user: SiteUser, enabled: bool, cancel: CancellationToken | None = None
    ) -> None:
        self._begin("set_lockout_enabled", cancel)
        _require_user(user)
        logger.warning("set_lockout_enabled(%s) ignored for user %s, lockout is always enabled", enabled, user.id)

    async def get_lockout_end_date(
        self, user: SiteUser, cancel: CancellationToken | None = None
    ) -> datetime | None:
        self._begin("get_lockout_end_date", cancel)
        end = _require_user(user).lockout_end_utc
        if end is None:
            return None
        # datetime.min is what some stores write for "no value"
        if end.replace(tzinfo=None) == datetime.min:
            return None
        return _as_utc(end)

    async def set_lockout_end_date(
        self, user: SiteUser, lockout_end: datetime | None, cancel: CancellationToken | None = None
    ) -> None:
        self._begin("set_lockout_end_date", cancel)
        _require_user(user)

        if lockout_end is not None and lockout_end.tzinfo is not None:
            lockout_end = lockout_end.astimezone(timezone.utc).replace(tzinfo=None)
        user.lockout_end_utc = lockout_end
        await self._persist(user, cancel)

    async def is_locked_out(
        self, user: SiteUser, now: datetime | None = None, cancel: CancellationToken | None = None
    ) -> bool:
        end = await self.get_lockout_end_date(user, cancel)
        if end is None:
            return False
        now = _as_utc(now) if now is not None else datetime.now(timezone.utc)
        return end > now

    async def get_access_failed_count(self, user: SiteUser, cancel: CancellationToken | None = None) -> int:
        self._begin("get_access_failed_count", cancel)
        return _require_user(user).access_failed_count

    async def increment_access_failed_count(
        self, user: SiteUser, cancel: CancellationToken | None = None
    ) -> int:
        self._begin("increment_access_failed_count", cancel)
        _require_user(user)

        user.access_failed_count += 1
        # update() does not write this column
        await self.commands.update_failed_password_attempt_count(user.id, user.access_failed_count)
        raise_if_cancelled(cancel)
        return user.access_failed_count

    async def reset_access_failed_count(self, user: SiteUser, cancel: CancellationToken | None = None) -> None:
        self._begin("reset_access_failed_count", cancel)
        _require_user(user)

        user.access_failed_count = 0
        await self.commands.update_failed_password_attempt_count(user.id, 0)
        raise_if_cancelled(cancel)


class ClaimMixin(_StoreBase):
    async def add_claims(
        self, site: SiteSettings, user: SiteUser, claims: Iterable[Claim], cancel: CancellationToken | None = None
    ) -> None:
        self._begin("add_claims", cancel)
        _require_user(user)
        if claims is None:
            raise ValueError("claims is required")
        site_id = self._scope(site)

        for claim in claims:
            await self.commands.create_claim(site_id, user.id, claim)
            raise_if_cancelled(cancel)

    async def remove_claims(
        self, site: SiteSettings, user: SiteUser, claims: Iterable[Claim], cancel: CancellationToken | None = None
    ) -> None:
        self._begin("remove_claims", cancel)
        _require_user(user)
        if claims is None:
            raise ValueError("claims is required")
        site_id = self._scope(site)

        for claim in claims:
            await self.commands.delete_claims_by_user(site_id, user.id, claim.type)
            raise_if_cancelled(cancel)

    async def replace_claim(
        self,
        site: SiteSettings,
        user: SiteUser,
        claim: Claim,
        new_claim: Claim,
        cancel: CancellationToken | None = None,
    ) -> None:
        self._begin("replace_claim", cancel)
        _require_user(user)
        if claim is None or new_claim is None:
            raise ValueError("claim and new_claim are required")
        site_id = self._scope(site)

        await self.commands.delete_claims_by_user(site_id, user.id, claim.type)
        raise_if_cancelled(cancel)
        await self.commands.create_claim(site_id, user.id, new_claim)
        raise_if_cancelled(cancel)

    async def get_claims(
        self, site: SiteSettings, user: SiteUser, cancel: CancellationToken | None = None
    ) -> list[Claim]:
        self._begin("get_claims", cancel)
        _require_user(user)

        claims = await self.queries.get_claims_by_user(self._scope(site), user.id)
        raise_if_cancelled(cancel)
        return list(claims)

    async def get_users_for_claim(
        self, site: SiteSettings, claim: Claim, cancel: CancellationToken | None = None
    ) -> list[SiteUser]:
        self._begin("get_users_for_claim", cancel)
        if claim is None:
            raise ValueError("claim is required")

        users = await self.queries.get_users_for_claim(self._scope(site), claim.type, claim.value)
        raise_if_cancelled(cancel)
        return list(users)


class LoginMixin(_StoreBase):
    async def add_login(
        self, site: SiteSettings, user: SiteUser, login: LoginInfo, cancel: CancellationToken | None = None
    ) -> None:
        self._begin("add_login", cancel)
        _require_user(user)
        if login is None:
            raise ValueError("login is required")

        record = UserLoginRecord(
            site_id=self._scope(site),
            user_id=user.id,
            login_provider=login.login_provider,
            provider_key=login.provider_key,
            provider_display_name=login.provider_display_name,
        )
        await self.commands.create_login(record)
        raise_if_cancelled(cancel)

    async def find_by_login(
        self,
        site: SiteSettings,
        login_provider: str,
        provider_key: str,
        cancel: CancellationToken | None = None,
    ) -> SiteUser | None:
        self._begin("find_by_login", cancel)
        logger.info("find_by_login called for %s with provider key %s", login_provider, provider_key)
        site_id = self._scope(site)

        login = await self.queries.find_login(site_id, login_provider, provider_key)
        raise_if_cancelled(cancel)
        if not login or not login.user_id:
            logger.info("No login found for %s with provider key %s", login_provider, provider_key)
            return None

        user = await self.queries.fetch(site_id, login.user_id)
        raise_if_cancelled(cancel)
        if user is None:
            logger.warning(
                "Login for %s with provider key %s points at missing user %s",
                login_provider,
                provider_key,
                login.user_id,
            )
        return user

    async def get_logins(
        self, site: SiteSettings, user: SiteUser, cancel: CancellationToken | None = None
    ) -> list[LoginInfo]:
        self._begin("get_logins", cancel)
        _require_user(user)

        records = await self.queries.get_logins_by_user(self._scope(site), user.id)
        raise_if_cancelled(cancel)
        return [
            LoginInfo(
                login_provider=r.login_provider,
                provider_key=r.provider_key,
                provider_display_name=r.provider_display_name,
            )
            for r in records
        ]

    async def remove_login(
        self,
        site: SiteSettings,
        user: SiteUser,
        login_provider: str,
        provider_key: str,
        cancel: CancellationToken | None = None,
    ) -> None:
        self._begin("remove_login", cancel)
        _require_user(user)

        await self.commands.delete_login(self._scope(site), user.id, login_provider, provider_key)
        raise_if_cancelled(cancel)


class RoleMixin(_StoreBase):
    async def add_to_role(
        self, site: SiteSettings, user: SiteUser, role_name: str, cancel: CancellationToken | None = None
    ) -> None:
        self._begin("add_to_role", cancel)
        _require_user(user)

        role = await self.queries.fetch_role(self._scope(site), role_name)
        raise_if_cancelled(cancel)
        if role and role.id:
            await self.commands.add_user_to_role(role.id, user.id)
            raise_if_cancelled(cancel)

    async def remove_from_role(
        self, site: SiteSettings, user: SiteUser, role_name: str, cancel: CancellationToken | None = None
    ) -> None:
        self._begin("remove_from_role", cancel)
        _require_user(user)

        role = await self.queries.fetch_role(self._scope(site), role_name)
        raise_if_cancelled(cancel)
        if role and role.id:
            await self.commands.remove_user_from_role(role.id, user.id)
            raise_if_cancelled(cancel)

    async def get_roles(
        self, site: SiteSettings, user: SiteUser, cancel: CancellationToken | None = None
    ) -> list[str]:
        self._begin("get_roles", cancel)
        _require_user(user)

        roles = await self.queries.get_user_roles(self._scope(site), user.id)
        raise_if_cancelled(cancel)
        return list(roles)

    async def is_in_role(
        self, site: SiteSettings, user: SiteUser, role_name: str, cancel: CancellationToken | None = None
    ) -> bool:
        self._begin("is_in_role", cancel)
        _require_user(user)

        roles = await self.queries.get_user_roles(self._scope(site), user.id)
        raise_if_cancelled(cancel)
        wanted = (role_name or "").casefold()
        return any(r.casefold() == wanted for r in roles)

    async def get_users_in_role(
        self, site: SiteSettings, role_name: str, cancel: CancellationToken | None = None
    ) -> list[SiteUser]:
        self._begin("get_users_in_role", cancel)

        users = await self.queries.get_users_in_role(self._scope(site), role_name)
        raise_if_cancelled(cancel)
        return list(users)


class PhoneNumberMixin(_StoreBase):
    async def get_phone_number(self, user: SiteUser, cancel: CancellationToken | None = None) -> str | None:
        self._begin("get_phone_number", cancel)
        return _require_user(user).phone_number

    async def set_phone_number(
        self, user: SiteUser, phone_number: str | None, cancel: CancellationToken | None = None
    ) -> None:
        self._begin("set_phone_number", cancel)
        _require_user(user).phone_number = phone_number
        await self._persist(user, cancel)

    async def get_phone_number_confirmed(self, user: SiteUser, cancel: CancellationToken | None = None) -> bool:
        self._begin("get_phone_number_confirmed", cancel)
        return _require_user(user).phone_number_confirmed

    async def set_phone_number_confirmed(
        self, user: SiteUser, confirmed: bool, cancel: CancellationToken | None = None
    ) -> None:
        self._begin("set_phone_number_confirmed", cancel)
        _require_user(user).phone_number_confirmed = confirmed
        await self._persist(user, cancel)


class TwoFactorMixin(_StoreBase):
    async def get_two_factor_enabled(self, user: SiteUser, cancel: CancellationToken | None = None) -> bool:
        self._begin("get_two_factor_enabled", cancel)
        return _require_user(user).two_factor_enabled

    async def set_two_factor_enabled(
        self, user: SiteUser, enabled: bool, cancel: CancellationToken | None = None
    ) -> None:
        self._begin("set_two_factor_enabled", cancel)
        _require_user(user).two_factor_enabled = enabled
        await self._persist(user, cancel)


class UserStore(
    UserLifecycleMixin,
    UserNameMixin,
    SecurityStampMixin,
    EmailMixin,
    PasswordMixin,
    LockoutMixin,
    ClaimMixin,
    LoginMixin,
    RoleMixin,
    PhoneNumberMixin,
    TwoFactorMixin,
):
    """All user store capabilities over one commands/queries pair."""
