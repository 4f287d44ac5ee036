import logging
from typing import Any, Iterable

import httpx

from kos_market.models.enums.error_kind import ErrorKind
from kos_market.schemas.lifecycle_schema import (
    BulkResult,
    FeaturedData,
    ListingLifecycleData,
)
from kos_market.schemas.listing_schema import AdminListingPage

logger = logging.getLogger(__name__)

ADMIN_LISTINGS = "/admin/listings"


class LifecycleClientError(Exception):
    """Raised when an admin listing call fails, either with a failure
    envelope from the server or at the transport level."""

    def __init__(
        self, kind: ErrorKind, message: str, status_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code


class LifecycleApiClient:
    """Thin async client for the admin listing lifecycle routes.

    The given httpx client must already carry the base url and the
    Authorization header.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def list_listings(
        self, archived: bool = False, limit: int = 10, offset: int = 0
    ) -> AdminListingPage:
        data = await self._request(
            "GET",
            ADMIN_LISTINGS,
            params={
                "archived": str(archived).lower(),
                "limit": limit,
                "offset": offset,
            },
        )
        return AdminListingPage.model_validate(data)

    async def archive(self, listing_id: int) -> ListingLifecycleData:
        data = await self._request("DELETE", f"{ADMIN_LISTINGS}/{listing_id}")
        return ListingLifecycleData.model_validate(data)

    async def restore(self, listing_id: int) -> ListingLifecycleData:
        data = await self._request("PATCH", f"{ADMIN_LISTINGS}/{listing_id}/restore")
        return ListingLifecycleData.model_validate(data)

    async def permanent_delete(self, listing_id: int) -> ListingLifecycleData:
        data = await self._request(
            "DELETE", f"{ADMIN_LISTINGS}/{listing_id}/permanent"
        )
        return ListingLifecycleData.model_validate(data)

    async def set_featured(self, listing_id: int, is_featured: bool) -> FeaturedData:
        data = await self._request(
            "PATCH",
            f"{ADMIN_LISTINGS}/{listing_id}/featured",
            json={"is_featured": is_featured},
        )
        return FeaturedData.model_validate(data)

    async def bulk_archive(self, listing_ids: Iterable[int]) -> BulkResult:
        data = await self._request(
            "POST",
            f"{ADMIN_LISTINGS}/bulk",
            json={"listing_ids": list(listing_ids)},
        )
        return BulkResult.model_validate(data)

    async def bulk_permanent_delete(self, listing_ids: Iterable[int]) -> BulkResult:
        # httpx.AsyncClient.delete() takes no body
        data = await self._request(
            "DELETE",
            f"{ADMIN_LISTINGS}/bulk",
            json={"listing_ids": list(listing_ids)},
        )
        return BulkResult.model_validate(data)

    async def cleanup_archive(self) -> BulkResult:
        data = await self._request("DELETE", f"{ADMIN_LISTINGS}/cleanup")
        return BulkResult.model_validate(data)

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise LifecycleClientError(ErrorKind.INTERNAL_ERROR, str(e)) from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error or not body.get("success", False):
            try:
                kind = ErrorKind(body.get("error"))
            except ValueError:
                kind = ErrorKind.INTERNAL_ERROR
            message = body.get("message") or f"Request failed ({response.status_code})"
            raise LifecycleClientError(kind, message, response.status_code)

        return body["data"]
