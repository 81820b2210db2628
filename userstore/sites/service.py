from sqlalchemy.ext.asyncio import AsyncSession

from userstore.sites.models import Site
from userstore.sites.schemas import SiteSettings


async def get_site_settings(db: AsyncSession, site_id: str) -> SiteSettings | None:
    site = await db.get(Site, site_id)
    if not site:
        return None
    return SiteSettings.model_validate(site)
