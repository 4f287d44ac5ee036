from fastapi import status

from kos_market.core.errors import ServiceError
from kos_market.models.enums.error_kind import ErrorKind


class LifecycleError(ServiceError):
    """Base class for lifecycle failures tied to one listing."""

    def __init__(self, message: str, listing_id: int | None = None) -> None:
        super().__init__(message)
        self.listing_id = listing_id


class ListingNotFound(LifecycleError):
    """Raised when the listing is absent or not in the required state."""

    kind = ErrorKind.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND


class InvalidListingInput(LifecycleError):
    """Raised for malformed or non-positive listing ids."""

    kind = ErrorKind.INVALID_INPUT
    status_code = status.HTTP_400_BAD_REQUEST


class PartialFailure(LifecycleError):
    """Raised when the listing half of a transition failed after the content
    half was committed. The pair is left mismatched and needs a manual fix."""

    kind = ErrorKind.PARTIAL_FAILURE
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, listing_id: int, content_id: int) -> None:
        super().__init__(message, listing_id)
        self.content_id = content_id


class RecordStoreError(LifecycleError):
    """Raised when the record store fails unexpectedly."""

    kind = ErrorKind.INTERNAL_ERROR
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
