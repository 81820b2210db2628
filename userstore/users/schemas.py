from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SiteUser(BaseModel):
    model_config = ConfigDict(from_attributes=True, validate_assignment=True)

    id: str | None = None
    site_id: str | None = None
    user_name: str = ""
    normalized_user_name: str | None = None
    display_name: str = ""
    email: str = ""
    normalized_email: str | None = None
    email_confirmed: bool = False
    password_hash: str | None = None
    last_password_changed_utc: datetime | None = None
    security_stamp: str | None = None
    phone_number: str | None = None
    phone_number_confirmed: bool = False
    two_factor_enabled: bool = False
    lockout_end_utc: datetime | None = None
    access_failed_count: int = Field(default=0, ge=0)
    is_deleted: bool = False


class SiteRole(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str | None = None
    site_id: str
    name: str
    normalized_name: str | None = None


class Claim(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str = Field(min_length=1)
    value: str | None = None


class LoginInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    login_provider: str = Field(min_length=1)
    provider_key: str = Field(min_length=1)
    provider_display_name: str | None = None


class UserLoginRecord(LoginInfo):
    site_id: str
    user_id: str | None = None


class IdentityResult(BaseModel):
    succeeded: bool
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def success(cls) -> "IdentityResult":
        return cls(succeeded=True)
