from sqlmodel import Field, Relationship

from kos_market.models.enums.listing_state import ListingState
from kos_market.schemas.listing_schema import LifecycleFields, ListingBase

from .content_model import Content


class Listing(ListingBase, LifecycleFields, table=True):
    __tablename__ = "listings"
    id: int = Field(default=None, primary_key=True)

    # exclusive 1:1 ownership, deleting the content removes the listing too
    content_id: int = Field(
        foreign_key="contents.id", ondelete="CASCADE", unique=True
    )

    content: Content = Relationship()

    @property
    def state(self) -> ListingState:
        if self.deleted_at is None:
            return ListingState.ACTIVE
        return ListingState.ARCHIVED
