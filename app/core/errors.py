"""Domain errors raised by services and rendered by the API exception handlers.

Each error carries the HTTP status and a client-safe message. Handlers never
return exception text from lower layers; storage errors are logged and replaced
with a generic message.
"""

from typing import ClassVar


class AuthError(Exception):
    """Base class for expected authentication and user-management outcomes."""

    status_code: ClassVar[int] = 400
    default_message: ClassVar[str] = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCredentialsError(AuthError):
    """Unknown username, wrong password or disabled account (deliberately indistinguishable)."""

    status_code = 401
    default_message = "Invalid credentials"


class UsernameTakenError(AuthError):
    status_code = 400
    default_message = "Username already exists"


class EmailTakenError(AuthError):
    status_code = 400
    default_message = "Email already exists"


class ValidationFailedError(AuthError):
    """Malformed input; errors maps field name to message."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: dict[str, str] | None = None, message: str | None = None) -> None:
        self.errors = errors or {}
        super().__init__(message)


class UnauthenticatedError(AuthError):
    """Missing, unknown, expired or revoked token, or the token owner is gone or disabled."""

    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(AuthError):
    status_code = 403
    default_message = "Access denied"


class StorageFaultError(AuthError):
    """Backing store unreachable or errored. Not retried here."""

    status_code = 500
    default_message = "Internal server error"
