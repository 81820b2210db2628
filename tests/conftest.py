import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from userstore.core.config import MultiTenantOptions
from userstore.db.init_db import init_db
from userstore.sites.schemas import SiteSettings
from userstore.users.schemas import Claim, SiteRole, SiteUser, UserLoginRecord
from userstore.users.store import UserStore


class RecordingCommands:
    """Records every write as a (name, *args) tuple in a shared call log."""

    def __init__(self, calls: list):
        self.calls = calls
        self._next_id = 0

    async def create(self, user: SiteUser) -> None:
        self.calls.append(("create", user.site_id, user.user_name, user.display_name))
        if not user.id:
            self._next_id += 1
            user.id = f"u_{self._next_id}"

    async def update(self, user: SiteUser) -> None:
        self.calls.append(("update", user.id))

    async def delete(self, site_id, user_id) -> None:
        self.calls.append(("delete", site_id, user_id))

    async def flag_as_deleted(self, user_id) -> None:
        self.calls.append(("flag_as_deleted", user_id))

    async def add_user_to_role(self, role_id, user_id) -> None:
        self.calls.append(("add_user_to_role", role_id, user_id))

    async def remove_user_from_role(self, role_id, user_id) -> None:
        self.calls.append(("remove_user_from_role", role_id, user_id))

    async def create_claim(self, site_id, user_id, claim: Claim) -> None:
        self.calls.append(("create_claim", site_id, user_id, claim.type, claim.value))

    async def delete_claims_by_user(self, site_id, user_id, claim_type) -> None:
        self.calls.append(("delete_claims_by_user", site_id, user_id, claim_type))

    async def create_login(self, login: UserLoginRecord) -> None:
        self.calls.append(("create_login", login.site_id, login.user_id, login.login_provider, login.provider_key))

    async def delete_login(self, site_id, user_id, login_provider, provider_key) -> None:
        self.calls.append(("delete_login", site_id, user_id, login_provider, provider_key))

    async def update_failed_password_attempt_count(self, user_id, count) -> None:
        self.calls.append(("update_failed_password_attempt_count", user_id, count))


class FakeQueries:
    """In-memory lookups keyed by site id; every read is logged too."""

    def __init__(self, calls: list):
        self.calls = calls
        self.users: dict[tuple[str, str], SiteUser] = {}
        self.roles: dict[tuple[str, str], SiteRole] = {}
        self.taken_names: set[tuple[str, str]] = set()
        self.logins: dict[tuple[str, str, str], UserLoginRecord] = {}
        self.user_roles: dict[tuple[str, str], list[str]] = {}
        self.claims: dict[tuple[str, str], list[Claim]] = {}

    def add_role(self, site_id: str, name: str, role_id: str | None = None) -> None:
        if role_id is None:
            role_id = f"r_{name.lower()}"
        self.roles[(site_id, name)] = SiteRole(id=role_id, site_id=site_id, name=name)

    def add_user(self, user: SiteUser) -> None:
        self.users[(user.site_id, user.id)] = user

    async def fetch(self, site_id, user_id):
        self.calls.append(("fetch", site_id, user_id))
        return self.users.get((site_id, user_id))

    async def fetch_by_email(self, site_id, normalized_email):
        self.calls.append(("fetch_by_email", site_id, normalized_email))
        for (sid, _), user in self.users.items():
            if sid == site_id and user.normalized_email == normalized_email:
                return user
        return None

    async def fetch_by_login_name(self, site_id, login_name, allow_email_fallback=False):
        self.calls.append(("fetch_by_login_name", site_id, login_name, allow_email_fallback))
        for (sid, _), user in self.users.items():
            if sid == site_id and user.normalized_user_name == login_name:
                return user
        return None

    async def fetch_role(self, site_id, role_name):
        self.calls.append(("fetch_role", site_id, role_name))
        return self.roles.get((site_id, role_name))

    async def get_user_roles(self, site_id, user_id):
        self.calls.append(("get_user_roles", site_id, user_id))
        return list(self.user_roles.get((site_id, user_id), []))

    async def get_claims_by_user(self, site_id, user_id):
        self.calls.append(("get_claims_by_user", site_id, user_id))
        return list(self.claims.get((site_id, user_id), []))

    async def get_users_for_claim(self, site_id, claim_type, claim_value):
        self.calls.append(("get_users_for_claim", site_id, claim_type, claim_value))
        return [
            self.users[(sid, uid)]
            for (sid, uid), claims in self.claims.items()
            if sid == site_id and Claim(type=claim_type, value=claim_value) in claims
        ]

    async def find_login(self, site_id, login_provider, provider_key):
        self.calls.append(("find_login", site_id, login_provider, provider_key))
        return self.logins.get((site_id, login_provider, provider_key))

    async def get_logins_by_user(self, site_id, user_id):
        self.calls.append(("get_logins_by_user", site_id, user_id))
        return [
            login
            for (sid, _, _), login in self.logins.items()
            if sid == site_id and login.user_id == user_id
        ]

    async def get_users_in_role(self, site_id, role_name):
        self.calls.append(("get_users_in_role", site_id, role_name))
        return [
            self.users[(sid, uid)]
            for (sid, uid), names in self.user_roles.items()
            if sid == site_id and role_name in names
        ]

    async def login_exists(self, site_id, login_name):
        self.calls.append(("login_exists", site_id, login_name))
        return (site_id, login_name) in self.taken_names


@pytest.fixture()
def calls() -> list:
    return []


@pytest.fixture()
def commands(calls) -> RecordingCommands:
    return RecordingCommands(calls)


@pytest.fixture()
def queries(calls) -> FakeQueries:
    return FakeQueries(calls)


@pytest.fixture()
def site() -> SiteSettings:
    return SiteSettings(id="s_main", name="Main site", really_delete_users=True)


@pytest.fixture()
def make_store(commands, queries):
    def _make(**options) -> UserStore:
        return UserStore(commands, queries, MultiTenantOptions(**options), debug=True)

    return _make


@pytest.fixture()
def store(make_store) -> UserStore:
    return make_store()


@pytest.fixture()
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    yield async_sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture()
async def db(session_factory):
    async with session_factory() as session:
        yield session
