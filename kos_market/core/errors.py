from fastapi import status

from kos_market.models.enums.error_kind import ErrorKind


class ServiceError(Exception):
    """Base for every error that is rendered as a failure envelope."""

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
