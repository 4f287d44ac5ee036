from fastapi import APIRouter, Depends

from kos_market.schemas.lifecycle_schema import (
    ApiSuccess,
    BulkListingRequest,
    BulkResult,
)
from kos_market.services.lifecycle.lifecycle_service import LifecycleService

router = APIRouter()


# per id failures are reported inside the result, the request itself succeeds
@router.post(
    "/bulk",
    response_model=ApiSuccess[BulkResult],
    summary="Archive several listings",
    description="Archives every listed ID independently and reports which ones failed.",
)
async def bulk_archive_listings(
    *,
    bulk_request: BulkListingRequest,
    lifecycle_service: LifecycleService = Depends(LifecycleService.get_dependency),
):
    result = await lifecycle_service.bulk_archive(bulk_request.listing_ids)
    return ApiSuccess(message=f"Archived {result.count} listings", data=result)


@router.delete(
    "/bulk",
    response_model=ApiSuccess[BulkResult],
    summary="Permanently delete several archived listings",
    description="Deletes every listed archived ID independently. Active listings are reported as failed.",
)
async def bulk_permanent_delete_listings(
    *,
    bulk_request: BulkListingRequest,
    lifecycle_service: LifecycleService = Depends(LifecycleService.get_dependency),
):
    result = await lifecycle_service.bulk_permanent_delete(bulk_request.listing_ids)
    return ApiSuccess(
        message=f"Permanently deleted {result.count} listings", data=result
    )


@router.delete(
    "/cleanup",
    response_model=ApiSuccess[BulkResult],
    summary="Empty the archive",
    description="Permanently deletes every archived listing.",
)
async def cleanup_archive(
    *,
    lifecycle_service: LifecycleService = Depends(LifecycleService.get_dependency),
):
    result = await lifecycle_service.cleanup_archive()
    if result.count == 0 and not result.failed:
        return ApiSuccess(message="No archived listings found to clean up", data=result)
    return ApiSuccess(
        message=f"Permanently deleted {result.count} archived listings", data=result
    )
