import asyncio


class UserStoreError(Exception):
    """Base class for errors raised by the user store itself."""


class StoreClosedError(UserStoreError):
    """Raised when a closed store is used again."""


class MalformedEmailError(UserStoreError, ValueError):
    """Raised when an email has no local part to derive a login name from."""

    def __init__(self, email: str | None):
        super().__init__(f"Cannot derive a login name from malformed email: {email!r}")
        self.email = email


class OperationCancelledError(asyncio.CancelledError):
    """Raised when a caller cancels an operation through its token."""
