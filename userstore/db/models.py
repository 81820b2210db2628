from userstore.sites.models import Site  # noqa: F401
from userstore.users.models import Role, User, UserClaim, UserLogin, UserRole  # noqa: F401
