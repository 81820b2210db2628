from userstore.core.config import MultiTenantOptions


class TenantResolver:
    """Maps the calling site to the site that owns its user pool."""

    def __init__(self, options: MultiTenantOptions):
        self.options = options

    def resolve(self, caller_site_id: str | None) -> str | None:
        if self.options.use_related_sites_mode:
            return self.options.related_site_id
        return caller_site_id
