from datetime import datetime
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, computed_field

from kos_market.models.enums.error_kind import ErrorKind
from kos_market.models.enums.listing_state import ListingState

DataT = TypeVar("DataT")


# Envelope returned by every lifecycle route on success
class ApiSuccess(BaseModel, Generic[DataT]):
    success: Literal[True] = True
    message: str
    data: DataT


# Envelope returned by every route on failure
class ApiFailure(BaseModel):
    success: Literal[False] = False
    error: ErrorKind
    message: str
    details: Any | None = None


class ListingLifecycleData(BaseModel):
    id: int
    content_id: int
    state: ListingState
    deleted_at: datetime | None = None
    deleted_by: int | None = None


class FeaturedData(BaseModel):
    id: int
    content_id: int
    is_featured: bool


class ViewCountData(BaseModel):
    id: int
    content_id: int
    view_count: int


class BulkFailure(BaseModel):
    id: int
    kind: ErrorKind
    message: str


class BulkResult(BaseModel):
    succeeded: list[int] = Field(default_factory=list)
    failed: list[BulkFailure] = Field(default_factory=list)

    @computed_field
    @property
    def count(self) -> int:
        return len(self.succeeded)


class BulkListingRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    # booleans and numeric strings reject the whole request, non-positive
    # ids are reported per item by the lifecycle service
    listing_ids: list[StrictInt]


class FeaturedUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")
    is_featured: StrictBool
