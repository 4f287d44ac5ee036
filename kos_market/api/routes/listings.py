from fastapi import APIRouter, Depends

from kos_market.schemas.lifecycle_schema import ApiSuccess, ViewCountData
from kos_market.services.lifecycle.lifecycle_service import LifecycleService

router = APIRouter(prefix="/listings", tags=["Listings"])


@router.post(
    "/{listing_id}/view",
    response_model=ApiSuccess[ViewCountData],
    summary="Count a listing view",
    description="Increments the view counter of an active listing.",
)
async def record_listing_view(
    *,
    listing_id: int,
    lifecycle_service: LifecycleService = Depends(LifecycleService.get_dependency),
):
    data = await lifecycle_service.record_view(listing_id)
    return ApiSuccess(message="View count updated successfully", data=data)
