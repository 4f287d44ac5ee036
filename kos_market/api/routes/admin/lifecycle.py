from fastapi import APIRouter, Depends, Query, status

from kos_market.core.config import config
from kos_market.schemas.lifecycle_schema import (
    ApiSuccess,
    FeaturedData,
    FeaturedUpdate,
    ListingLifecycleData,
)
from kos_market.schemas.listing_schema import AdminListingPage
from kos_market.services.lifecycle.lifecycle_service import LifecycleService

router = APIRouter()


# active table or archive view of the admin panel
@router.get(
    "",
    response_model=ApiSuccess[AdminListingPage],
    summary="List listings by lifecycle state",
    description="Returns active listings, or archived ones when archived=true.",
)
async def get_admin_listings(
    *,
    archived: bool = False,
    limit: int = Query(default=config.admin_page_size, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    lifecycle_service: LifecycleService = Depends(LifecycleService.get_dependency),
):
    page = await lifecycle_service.list_listings(
        archived=archived, limit=limit, offset=offset
    )
    return ApiSuccess(message="Listings retrieved successfully", data=page)


@router.delete(
    "/{listing_id}",
    response_model=ApiSuccess[ListingLifecycleData],
    status_code=status.HTTP_200_OK,
    summary="Archive a listing",
    description="Soft-deletes the listing and its content. It can be restored later.",
)
async def archive_listing(
    *,
    listing_id: int,
    lifecycle_service: LifecycleService = Depends(LifecycleService.get_dependency),
):
    data = await lifecycle_service.archive(listing_id)
    return ApiSuccess(message="Listing moved to archive successfully", data=data)


@router.patch(
    "/{listing_id}/restore",
    response_model=ApiSuccess[ListingLifecycleData],
    summary="Restore an archived listing",
    description="Clears the archive marks on the listing and its content.",
)
async def restore_listing(
    *,
    listing_id: int,
    lifecycle_service: LifecycleService = Depends(LifecycleService.get_dependency),
):
    data = await lifecycle_service.restore(listing_id)
    return ApiSuccess(message="Listing restored from archive successfully", data=data)


@router.delete(
    "/{listing_id}/permanent",
    response_model=ApiSuccess[ListingLifecycleData],
    summary="Permanently delete an archived listing",
    description="Removes the content and the listing. Only archived listings can be deleted.",
)
async def permanent_delete_listing(
    *,
    listing_id: int,
    lifecycle_service: LifecycleService = Depends(LifecycleService.get_dependency),
):
    data = await lifecycle_service.permanent_delete(listing_id)
    return ApiSuccess(message="Listing permanently deleted successfully", data=data)


@router.patch(
    "/{listing_id}/featured",
    response_model=ApiSuccess[FeaturedData],
    summary="Set the featured flag",
    description="Adds the listing to, or removes it from, the featured list.",
)
async def set_listing_featured(
    *,
    listing_id: int,
    featured_update: FeaturedUpdate,
    lifecycle_service: LifecycleService = Depends(LifecycleService.get_dependency),
):
    data = await lifecycle_service.set_featured(listing_id, featured_update.is_featured)
    action = "added to" if data.is_featured else "removed from"
    return ApiSuccess(message=f"Listing {action} featured successfully", data=data)
