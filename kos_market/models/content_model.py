from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import TIMESTAMP, Column, func
from sqlmodel import Field, Relationship

from kos_market.schemas.listing_schema import ContentBase, LifecycleFields

if TYPE_CHECKING:
    from .user_model import User


class Content(ContentBase, LifecycleFields, table=True):
    """Publishable record of a listing (original term: post).

    Owned by exactly one Listing for lifecycle purposes. There is deliberately
    no relationship back to the listing.
    """

    __tablename__ = "contents"
    id: int = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id")

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(TIMESTAMP(timezone=True), nullable=False),
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(
            TIMESTAMP(timezone=True),
            nullable=True,
            server_default=func.now(),
            onupdate=func.now(),
        ),
    )

    owner: "User" = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[Content.user_id]"},
    )
