from fastapi import APIRouter, Depends

from kos_market.api.dependencies import require_admin

from .bulk import router as bulk_router
from .lifecycle import router as lifecycle_router

router = APIRouter(
    tags=["Admin Listings"],
    dependencies=[Depends(require_admin)],
)
# bulk paths first, /bulk and /cleanup would otherwise match /{listing_id}
router.include_router(
    bulk_router,
    prefix="/admin/listings",
)
router.include_router(
    lifecycle_router,
    prefix="/admin/listings",
)
