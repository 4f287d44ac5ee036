# exceptions.py
from fastapi import status

from kos_market.core.errors import ServiceError
from kos_market.models.enums.error_kind import ErrorKind


class UserNotAuthenticated(ServiceError):
    """Raised when the request carries no verified identity."""

    kind = ErrorKind.UNAUTHORIZED
    status_code = status.HTTP_401_UNAUTHORIZED


class UserEmailNotFound(UserNotAuthenticated):
    """Raised when the email is not found in the token metadata."""

    pass


class UserNotFound(UserNotAuthenticated):
    """Raised when the verified identity has no user in the database."""

    pass


class InsufficientRole(ServiceError):
    """Raised when the user does not hold the role a route requires."""

    kind = ErrorKind.FORBIDDEN
    status_code = status.HTTP_403_FORBIDDEN
