from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from userstore.core.config import MultiTenantOptions, settings
from userstore.db.session import SessionLocal
from userstore.users.commands import SqlUserCommands
from userstore.users.queries import SqlUserQueries
from userstore.users.store import UserStore


def build_user_store(db: AsyncSession, options: MultiTenantOptions | None = None) -> UserStore:
    return UserStore(
        SqlUserCommands(db),
        SqlUserQueries(db),
        options or settings.multi_tenant_options(),
    )


@asynccontextmanager
async def open_user_store(options: MultiTenantOptions | None = None, session_factory=None):
    factory = session_factory or SessionLocal
    async with factory() as db:
        async with build_user_store(db, options) as store:
            yield store
