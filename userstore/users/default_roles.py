import logging

from userstore.core.cancellation import CancellationToken, raise_if_cancelled
from userstore.users.contracts import UserCommands, UserQueries

logger = logging.getLogger(__name__)

ROLE_SEPARATOR = ";"


def parse_role_names(configured: str | None) -> list[str]:
    if not configured:
        return []
    if ROLE_SEPARATOR not in configured:
        name = configured.strip()
        return [name] if name else []
    return [name.strip() for name in configured.split(ROLE_SEPARATOR) if name.strip()]


class DefaultRoleAssigner:
    """Adds a newly created user to the site's configured default roles.

    Unknown role names are skipped: a misconfigured default role list must
    never block user creation.
    """

    def __init__(self, commands: UserCommands, queries: UserQueries):
        self.commands = commands
        self.queries = queries

    async def assign_defaults(
        self,
        site_id: str | None,
        user_id: str,
        configured_roles: str | None,
        cancel: CancellationToken | None = None,
    ) -> list[str]:
        raise_if_cancelled(cancel)
        assigned: list[str] = []

        for role_name in parse_role_names(configured_roles):
            role = await self.queries.fetch_role(site_id, role_name)
            raise_if_cancelled(cancel)
            if not role or not role.id:
                logger.debug("Default role %r not found in site %s, skipped", role_name, site_id)
                continue

            await self.commands.add_user_to_role(role.id, user_id)
            raise_if_cancelled(cancel)
            assigned.append(role_name)

        return assigned
