from datetime import datetime
from typing import Optional

from pydantic import ConfigDict
from pydantic_extra_types.coordinate import Latitude, Longitude
from sqlalchemy import TIMESTAMP
from sqlmodel import Field, SQLModel

from kos_market.models.enums.listing_state import ListingState


# Lifecycle fields shared by listings and contents
# deleted_at IS NULL -> active, deleted_at IS NOT NULL -> archived
class LifecycleFields(SQLModel):
    deleted_at: Optional[datetime] = Field(
        default=None, sa_type=TIMESTAMP(timezone=True), nullable=True
    )
    deleted_by: Optional[int] = Field(default=None, foreign_key="users.id")


# Basic schema for the publishable record (post)
class ContentBase(SQLModel):
    model_config = ConfigDict(extra="forbid")
    title: str = Field(max_length=255)
    description: str = Field(max_length=5000)
    price: int = Field(ge=0)
    is_featured: bool = Field(default=False)
    view_count: int = Field(default=0, ge=0)


# Basic schema for the rentable property (kos)
class ListingBase(SQLModel):
    model_config = ConfigDict(extra="forbid")
    name: str = Field(max_length=255)
    address: str = Field(max_length=500)
    city: str = Field(max_length=255)
    facilities: str | None = Field(default=None, max_length=2000)
    latitude: Latitude | None = None
    longitude: Longitude | None = None
    total_rooms: int = Field(default=0, ge=0)
    occupied_rooms: int = Field(default=0, ge=0)


class ListingOwner(SQLModel):
    model_config = ConfigDict(extra="forbid")
    id: int
    name: str
    username: str


# Schema for the rows of the admin table
# the ids of these rows are what the selection tracker works with
class AdminListingCard(ListingBase):
    id: int
    content_id: int
    title: str
    price: int
    is_featured: bool
    view_count: int
    owner: ListingOwner
    state: ListingState
    created_at: datetime
    deleted_at: datetime | None = None
    deleted_by: int | None = None


class AdminListingPage(SQLModel):
    model_config = ConfigDict(extra="forbid")
    items: list[AdminListingCard]
    total: int
    limit: int
    offset: int
    archived: bool
