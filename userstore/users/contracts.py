"""Collaborator and capability contracts for the site user store.

``UserCommands`` and ``UserQueries`` are the persistence seam: the store only
ever talks to storage through them, keyed by site id. The capability
protocols describe the operation groups an identity layer expects; the
concrete ``UserStore`` satisfies all of them at once.
"""
from datetime import datetime
from typing import Iterable, Protocol, runtime_checkable

from userstore.core.cancellation import CancellationToken
from userstore.sites.schemas import SiteSettings
from userstore.users.schemas import (
    Claim,
    IdentityResult,
    LoginInfo,
    SiteRole,
    SiteUser,
    UserLoginRecord,
)


@runtime_checkable
class UserCommands(Protocol):
    async def create(self, user: SiteUser) -> None: ...

    async def update(self, user: SiteUser) -> None: ...

    async def delete(self, site_id: str, user_id: str) -> None: ...

    async def flag_as_deleted(self, user_id: str) -> None: ...

    async def add_user_to_role(self, role_id: str, user_id: str) -> None: ...

    async def remove_user_from_role(self, role_id: str, user_id: str) -> None: ...

    async def create_claim(self, site_id: str, user_id: str, claim: Claim) -> None: ...

    async def delete_claims_by_user(self, site_id: str, user_id: str, claim_type: str) -> None: ...

    async def create_login(self, login: UserLoginRecord) -> None: ...

    async def delete_login(
        self, site_id: str, user_id: str, login_provider: str, provider_key: str
    ) -> None: ...

    async def update_failed_password_attempt_count(self, user_id: str, count: int) -> None: ...


@runtime_checkable
class UserQueries(Protocol):
    async def fetch(self, site_id: str, user_id: str) -> SiteUser | None: ...

    async def fetch_by_email(self, site_id: str, normalized_email: str) -> SiteUser | None: ...

    async def fetch_by_login_name(
        self, site_id: str, login_name: str, allow_email_fallback: bool = False
    ) -> SiteUser | None: ...

    async def fetch_role(self, site_id: str, role_name: str) -> SiteRole | None: ...

    async def get_user_roles(self, site_id: str, user_id: str) -> list[str]: ...

    async def get_claims_by_user(self, site_id: str, user_id: str) -> list[Claim]: ...

    async def get_users_for_claim(
        self, site_id: str, claim_type: str, claim_value: str | None
    ) -> list[SiteUser]: ...

    async def find_login(
        self, site_id: str, login_provider: str, provider_key: str
    ) -> UserLoginRecord | None: ...

    async def get_logins_by_user(self, site_id: str, user_id: str) -> list[UserLoginRecord]: ...

    async def get_users_in_role(self, site_id: str, role_name: str) -> list[SiteUser]: ...

    async def login_exists(self, site_id: str, login_name: str) -> bool: ...


# capability groups


@runtime_checkable
class UserNameStore(Protocol):
    async def create(
        self, site: SiteSettings, user: SiteUser, cancel: CancellationToken | None = None
    ) -> IdentityResult: ...

    async def update(self, user: SiteUser, cancel: CancellationToken | None = None) -> IdentityResult: ...

    async def delete(
        self, site: SiteSettings, user: SiteUser, cancel: CancellationToken | None = None
    ) -> IdentityResult: ...

    async def find_by_id(
        self, site: SiteSettings, user_id: str, cancel: CancellationToken | None = None
    ) -> SiteUser | None: ...

    async def find_by_name(
        self, site: SiteSettings, normalized_user_name: str, cancel: CancellationToken | None = None
    ) -> SiteUser | None: ...

    async def get_user_id(self, user: SiteUser, cancel: CancellationToken | None = None) -> str | None: ...

    async def get_user_name(self, user: SiteUser, cancel: CancellationToken | None = None) -> str: ...

    async def set_user_name(
        self, site: SiteSettings, user: SiteUser, user_name: str, cancel: CancellationToken | None = None
    ) -> None: ...

    async def get_normalized_user_name(
        self, user: SiteUser, cancel: CancellationToken | None = None
    ) -> str | None: ...

    async def set_normalized_user_name(
        self,
        site: SiteSettings,
        user: SiteUser,
        normalized_user_name: str | None,
        cancel: CancellationToken | None = None,
    ) -> None: ...


@runtime_checkable
class SecurityStampStore(Protocol):
    async def get_security_stamp(
        self, user: SiteUser, cancel: CancellationToken | None = None
    ) -> str | None: ...

    async def set_security_stamp(
        self, user: SiteUser, stamp: str | None, cancel: CancellationToken | None = None
    ) -> None: ...


@runtime_checkable
class EmailStore(Protocol):
    async def find_by_email(
        self, site: SiteSettings, normalized_email: str, cancel: CancellationToken | None = None
    ) -> SiteUser | None: ...

    async def get_email(self, user: SiteUser, cancel: CancellationToken | None = None) -> str: ...

    async def set_email(
        self, site: SiteSettings, user: SiteUser, email: str, cancel: CancellationToken | None = None
    ) -> None: ...

    async def get_normalized_email(
        self, user: SiteUser, cancel: CancellationToken | None = None
    ) -> str | None: ...

    async def set_normalized_email(
        self,
        site: SiteSettings,
        user: SiteUser,
        normalized_email: str | None,
        cancel: CancellationToken | None = None,
    ) -> None: ...

    async def get_email_confirmed(self, user: SiteUser, cancel: CancellationToken | None = None) -> bool: ...

    async def set_email_confirmed(
        self, site: SiteSettings, user: SiteUser, confirmed: bool, cancel: CancellationToken | None = None
    ) -> None: ...


@runtime_checkable
class PasswordStore(Protocol):
    async def get_password_hash(
        self, user: SiteUser, cancel: CancellationToken | None = None
    ) -> str | None: ...

    async def has_password(self, user: SiteUser, cancel: CancellationToken | None = None) -> bool: ...

    async def set_password_hash(
        self, user: SiteUser, password_hash: str | None, cancel: CancellationToken | None = None
    ) -> None: ...


@runtime_checkable
class LockoutStore(Protocol):
    async def get_lockout_enabled(self, user: SiteUser, cancel: CancellationToken | None = None) -> bool: ...

    async def set_lockout_enabled(
        self, user: SiteUser, enabled: bool, cancel: CancellationToken | None = None
    ) -> None: ...

    async def get_lockout_end_date(
        self, user: SiteUser, cancel: CancellationToken | None = None
    ) -> datetime | None: ...

    async def set_lockout_end_date(
        self, user: SiteUser, lockout_end: datetime | None, cancel: CancellationToken | None = None
    ) -> None: ...

    async def is_locked_out(
        self, user: SiteUser, now: datetime | None = None, cancel: CancellationToken | None = None
    ) -> bool: ...

    async def get_access_failed_count(self, user: SiteUser, cancel: CancellationToken | None = None) -> int: ...

    async def increment_access_failed_count(
        self, user: SiteUser, cancel: CancellationToken | None = None
    ) -> int: ...

    async def reset_access_failed_count(self, user: SiteUser, cancel: CancellationToken | None = None) -> None: ...


@runtime_checkable
class ClaimStore(Protocol):
    async def add_claims(
        self, site: SiteSettings, user: SiteUser, claims: Iterable[Claim], cancel: CancellationToken | None = None
    ) -> None: ...

    async def remove_claims(
        self, site: SiteSettings, user: SiteUser, claims: Iterable[Claim], cancel: CancellationToken | None = None
    ) -> None: ...

    async def replace_claim(
        self,
        site: SiteSettings,
        user: SiteUser,
        claim: Claim,
        new_claim: Claim,
        cancel: CancellationToken | None = None,
    ) -> None: ...

    async def get_claims(
        self, site: SiteSettings, user: SiteUser, cancel: CancellationToken | None = None
    ) -> list[Claim]: ...

    async def get_users_for_claim(
        self, site: SiteSettings, claim: Claim, cancel: CancellationToken | None = None
    ) -> list[SiteUser]: ...


@runtime_checkable
class LoginStore(Protocol):
    async def add_login(
        self, site: SiteSettings, user: SiteUser, login: LoginInfo, cancel: CancellationToken | None = None
    ) -> None: ...

    async def find_by_login(
        self,
        site: SiteSettings,
        login_provider: str,
        provider_key: str,
        cancel: CancellationToken | None = None,
    ) -> SiteUser | None: ...

    async def get_logins(
        self, site: SiteSettings, user: SiteUser, cancel: CancellationToken | None = None
    ) -> list[LoginInfo]: ...

    async def remove_login(
        self,
        site: SiteSettings,
        user: SiteUser,
        login_provider: str,
        provider_key: str,
        cancel: CancellationToken | None = None,
    ) -> None: ...


@runtime_checkable
class RoleStore(Protocol):
    async def add_to_role(
        self, site: SiteSettings, user: SiteUser, role_name: str, cancel: CancellationToken | None = None
    ) -> None: ...

    async def remove_from_role(
        self, site: SiteSettings, user: SiteUser, role_name: str, cancel: CancellationToken | None = None
    ) -> None: ...

    async def get_roles(
        self, site: SiteSettings, user: SiteUser, cancel: CancellationToken | None = None
    ) -> list[str]: ...

    async def is_in_role(
        self, site: SiteSettings, user: SiteUser, role_name: str, cancel: CancellationToken | None = None
    ) -> bool: ...

    async def get_users_in_role(
        self, site: SiteSettings, role_name: str, cancel: CancellationToken | None = None
    ) -> list[SiteUser]: ...


@runtime_checkable
class PhoneNumberStore(Protocol):
    async def get_phone_number(self, user: SiteUser, cancel: CancellationToken | None = None) -> str | None: ...

    async def set_phone_number(
        self, user: SiteUser, phone_number: str | None, cancel: CancellationToken | None = None
    ) -> None: ...

    async def get_phone_number_confirmed(
        self, user: SiteUser, cancel: CancellationToken | None = None
    ) -> bool: ...

    async def set_phone_number_confirmed(
        self, user: SiteUser, confirmed: bool, cancel: CancellationToken | None = None
    ) -> None: ...


@runtime_checkable
class TwoFactorStore(Protocol):
    async def get_two_factor_enabled(self, user: SiteUser, cancel: CancellationToken | None = None) -> bool: ...

    async def set_two_factor_enabled(
        self, user: SiteUser, enabled: bool, cancel: CancellationToken | None = None
    ) -> None: ...
