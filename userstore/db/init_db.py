import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from userstore.core.logging import configure_logging
from userstore.db.base import Base
import userstore.db.models  # noqa

logger = logging.getLogger(__name__)


async def init_db(bind: AsyncEngine | None = None) -> None:
    if bind is None:
        from userstore.db.session import engine as bind

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Schema ready on %s", bind.url.render_as_string(hide_password=True))


if __name__ == "__main__":
    configure_logging()
    asyncio.run(init_db())
