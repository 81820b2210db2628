import logging

from userstore.core.cancellation import CancellationToken, raise_if_cancelled
from userstore.core.errors import MalformedEmailError
from userstore.users.contracts import UserQueries

logger = logging.getLogger(__name__)

FIRST_SUFFIX = 2


def login_name_base(email: str | None) -> str:
    if not email or "@" not in email:
        raise MalformedEmailError(email)
    base = email[: email.index("@")]
    if not base:
        raise MalformedEmailError(email)
    return base


class LoginNameSuggester:
    def __init__(self, queries: UserQueries):
        self.queries = queries

    async def suggest(
        self,
        site_id: str | None,
        email: str | None,
        cancel: CancellationToken | None = None,
    ) -> str:
        base = login_name_base(email)
        raise_if_cancelled(cancel)

        candidate = base
        suffix = FIRST_SUFFIX
        # one lookup at a time, the store decides uniqueness
        while await self.queries.login_exists(site_id, candidate):
            raise_if_cancelled(cancel)
            candidate = f"{base}{suffix}"
            suffix += 1
        raise_if_cancelled(cancel)

        if candidate != base:
            logger.debug("Login name %r taken in site %s, suggesting %r", base, site_id, candidate)
        return candidate
