import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Iterable, Optional

from fastapi import Depends
from sqlalchemy import delete, func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import asc, desc, select

from kos_market.api.dependencies import get_async_session, get_current_actor
from kos_market.core.config import config
from kos_market.models.content_model import Content
from kos_market.models.enums.listing_state import ListingState
from kos_market.models.listing_model import Listing
from kos_market.schemas.lifecycle_schema import (
    BulkFailure,
    BulkResult,
    FeaturedData,
    ListingLifecycleData,
    ViewCountData,
)
from kos_market.schemas.listing_schema import (
    AdminListingCard,
    AdminListingPage,
    ListingBase,
    ListingOwner,
)
from kos_market.schemas.user_schema import Actor
from kos_market.services.lifecycle.exceptions import (
    InvalidListingInput,
    LifecycleError,
    ListingNotFound,
    PartialFailure,
    RecordStoreError,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
PairStep = Callable[[], Awaitable[None]]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LifecycleService:
    """State machine for a Listing and the Content it owns.

    Active -> Archived (archive), Archived -> Active (restore) and
    Archived -> Deleted (permanent_delete). Every transition reads the listing
    in the required state right before writing and applies the content half
    first, then the listing half.

    Roles are checked by the route dependencies, never here.
    """

    def __init__(
        self,
        session: AsyncSession,
        actor_id: Optional[int] = None,
        clock: Clock = utc_now,
        atomic_pair_writes: Optional[bool] = None,
    ) -> None:
        self.session = session
        self.actor_id = actor_id
        self.clock = clock
        if atomic_pair_writes is None:
            atomic_pair_writes = config.atomic_pair_writes
        self.atomic_pair_writes = atomic_pair_writes

    # reads

    async def get_listing(
        self, listing_id: int, state: Optional[ListingState] = None
    ) -> Listing | None:
        query = (
            select(Listing)
            .where(Listing.id == listing_id)
            .options(selectinload(Listing.content))
            # rows may have been changed by bulk statements in this session
            .execution_options(populate_existing=True)
        )
        if state == ListingState.ACTIVE:
            query = query.where(Listing.deleted_at.is_(None))
        elif state == ListingState.ARCHIVED:
            query = query.where(Listing.deleted_at.is_not(None))

        result = await self.session.execute(query)
        return result.scalars().one_or_none()

    async def get_archived_listing_ids(self) -> list[int]:
        """Ids of every archived listing, oldest archive first."""
        result = await self.session.execute(
            select(Listing.id)
            .where(Listing.deleted_at.is_not(None))
            .order_by(asc(Listing.deleted_at), asc(Listing.id))
        )
        return list(result.scalars().all())

    async def list_listings(
        self, archived: bool = False, limit: int = 10, offset: int = 0
    ) -> AdminListingPage:
        """
        Returns one page of listings in the requested lifecycle state,
        newest content first.

        :param archived: True for the archive view, False for active listings.
        :param limit: Page size.
        :param offset: Number of rows to skip.
        :raises InvalidListingInput: If limit or offset is out of range.
        """
        if limit <= 0 or offset < 0:
            raise InvalidListingInput("Limit must be positive and offset non-negative.")

        if archived:
            condition = Listing.deleted_at.is_not(None)
        else:
            condition = Listing.deleted_at.is_(None)

        try:
            total = await self.session.execute(
                select(func.count()).select_from(Listing).where(condition)
            )
            total = total.scalar_one()

            result = await self.session.execute(
                select(Listing)
                .join(Content, Listing.content_id == Content.id)
                .where(condition)
                .options(selectinload(Listing.content).selectinload(Content.owner))
                .order_by(desc(Content.created_at), desc(Listing.id))
                .limit(limit)
                .offset(offset)
                .execution_options(populate_existing=True)
            )
            listings: list[Listing] = result.scalars().all()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Failed to read admin listings (archived=%s)", archived)
            raise RecordStoreError("Failed to read listings.") from e

        items: list[AdminListingCard] = []
        for listing in listings:
            content = listing.content
            items.append(
                AdminListingCard(
                    **listing.model_dump(include=set(ListingBase.model_fields)),
                    id=listing.id,
                    content_id=listing.content_id,
                    title=content.title,
                    price=content.price,
                    is_featured=content.is_featured,
                    view_count=content.view_count,
                    owner=ListingOwner(
                        id=content.owner.id,
                        name=content.owner.name,
                        username=content.owner.username,
                    ),
                    state=listing.state,
                    created_at=content.created_at,
                    deleted_at=listing.deleted_at,
                    deleted_by=listing.deleted_by,
                )
            )

        return AdminListingPage(
            items=items, total=total, limit=limit, offset=offset, archived=archived
        )

    # single item transitions

    async def archive(self, listing_id: int) -> ListingLifecycleData:
        listing = await self._require_listing(
            listing_id,
            ListingState.ACTIVE,
            f"Listing with ID {listing_id} not found or already archived.",
        )
        now = self.clock()
        await self._write_pair(
            listing,
            lambda: self._mark(listing.content, now, self.actor_id),
            lambda: self._mark(listing, now, self.actor_id),
            "archive",
        )
        logger.info("Listing %s archived by user %s", listing_id, self.actor_id)
        return ListingLifecycleData(
            id=listing_id,
            content_id=listing.content_id,
            state=ListingState.ARCHIVED,
            deleted_at=now,
            deleted_by=self.actor_id,
        )

    async def restore(self, listing_id: int) -> ListingLifecycleData:
        listing = await self._require_listing(
            listing_id,
            ListingState.ARCHIVED,
            f"Listing with ID {listing_id} not found in archive.",
        )
        await self._write_pair(
            listing,
            lambda: self._mark(listing.content, None, None),
            lambda: self._mark(listing, None, None),
            "restore",
        )
        logger.info("Listing %s restored by user %s", listing_id, self.actor_id)
        return ListingLifecycleData(
            id=listing_id,
            content_id=listing.content_id,
            state=ListingState.ACTIVE,
        )

    async def permanent_delete(self, listing_id: int) -> ListingLifecycleData:
        # archive first is mandatory, active listings are never deleted outright
        listing = await self._require_listing(
            listing_id,
            ListingState.ARCHIVED,
            f"Listing with ID {listing_id} not found in archive or not archived yet.",
        )
        content_id = listing.content_id
        await self._write_pair(
            listing,
            lambda: self._delete_content(content_id),
            lambda: self._delete_listing(listing_id),
            "permanently delete",
        )
        for record in (listing.content, listing):
            if record in self.session:
                self.session.expunge(record)

        logger.info(
            "Listing %s and content %s permanently deleted by user %s",
            listing_id,
            content_id,
            self.actor_id,
        )
        return ListingLifecycleData(
            id=listing_id, content_id=content_id, state=ListingState.DELETED
        )

    async def set_featured(self, listing_id: int, is_featured: bool) -> FeaturedData:
        if not isinstance(is_featured, bool):
            raise InvalidListingInput("is_featured must be a boolean.", listing_id)

        listing = await self._require_listing(
            listing_id, None, f"Listing with ID {listing_id} not found."
        )
        content = listing.content
        content.is_featured = is_featured
        content.updated_at = self.clock()
        self.session.add(content)
        await self._commit(listing_id, "update featured flag of")

        logger.info("Listing %s featured=%s", listing_id, is_featured)
        return FeaturedData(
            id=listing_id, content_id=listing.content_id, is_featured=is_featured
        )

    async def record_view(self, listing_id: int) -> ViewCountData:
        listing = await self._require_listing(
            listing_id, ListingState.ACTIVE, f"Listing with ID {listing_id} not found."
        )
        content_id = listing.content_id
        try:
            # single statement so concurrent views are never lost
            result = await self.session.execute(
                update(Content)
                .where(Content.id == content_id)
                .values(view_count=Content.view_count + 1)
                .returning(Content.view_count)
            )
            view_count = result.scalar_one()
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Failed to count a view of listing %s", listing_id)
            raise RecordStoreError(
                f"Failed to update view count of listing with ID {listing_id}.",
                listing_id,
            ) from e

        return ViewCountData(id=listing_id, content_id=content_id, view_count=view_count)

    # bulk variants

    async def bulk_archive(self, listing_ids: Iterable[int]) -> BulkResult:
        return await self._run_bulk(listing_ids, self.archive, "archive")

    async def bulk_permanent_delete(self, listing_ids: Iterable[int]) -> BulkResult:
        return await self._run_bulk(
            listing_ids, self.permanent_delete, "permanent delete"
        )

    async def cleanup_archive(self) -> BulkResult:
        """Permanently deletes every archived listing."""
        try:
            archived_ids = await self.get_archived_listing_ids()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Failed to read archived listings")
            raise RecordStoreError("Failed to read archived listings.") from e

        if not archived_ids:
            logger.info("No archived listings found to clean up")
            return BulkResult()

        return await self._run_bulk(archived_ids, self.permanent_delete, "cleanup")

    async def _run_bulk(
        self,
        listing_ids: Iterable[int],
        operation: Callable[[int], Awaitable[object]],
        action: str,
    ) -> BulkResult:
        result = BulkResult()
        # caller order, first occurrence wins
        for listing_id in dict.fromkeys(listing_ids):
            try:
                await operation(listing_id)
            except LifecycleError as e:
                logger.warning(
                    "Bulk %s failed for listing %s: %s (%s)",
                    action,
                    listing_id,
                    e.message,
                    e.kind.value,
                )
                result.failed.append(
                    BulkFailure(id=listing_id, kind=e.kind, message=e.message)
                )
            else:
                result.succeeded.append(listing_id)

        logger.info(
            "Bulk %s finished: %d succeeded, %d failed",
            action,
            len(result.succeeded),
            len(result.failed),
        )
        return result

    # helpers

    @staticmethod
    def _validate_id(listing_id: int) -> None:
        if (
            isinstance(listing_id, bool)
            or not isinstance(listing_id, int)
            or listing_id <= 0
        ):
            raise InvalidListingInput(f"Invalid listing ID: {listing_id!r}.")

    async def _require_listing(
        self, listing_id: int, state: Optional[ListingState], missing_message: str
    ) -> Listing:
        self._validate_id(listing_id)
        try:
            listing = await self.get_listing(listing_id, state)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Failed to read listing %s", listing_id)
            raise RecordStoreError(
                f"Failed to read listing with ID {listing_id}.", listing_id
            ) from e

        if listing is None:
            raise ListingNotFound(missing_message, listing_id)
        return listing

    async def _mark(
        self,
        record: Listing | Content,
        deleted_at: Optional[datetime],
        deleted_by: Optional[int],
    ) -> None:
        record.deleted_at = deleted_at
        record.deleted_by = deleted_by
        self.session.add(record)
        await self.session.flush()

    async def _delete_content(self, content_id: int) -> None:
        await self.session.execute(delete(Content).where(Content.id == content_id))

    async def _delete_listing(self, listing_id: int) -> None:
        await self.session.execute(delete(Listing).where(Listing.id == listing_id))

    async def _commit(self, listing_id: int, action: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Failed to %s listing %s", action, listing_id)
            raise RecordStoreError(
                f"Failed to {action} listing with ID {listing_id}.", listing_id
            ) from e

    async def _write_pair(
        self,
        listing: Listing,
        content_step: PairStep,
        listing_step: PairStep,
        action: str,
    ) -> None:
        # plain values, the instances are expired by a rollback
        listing_id, content_id = listing.id, listing.content_id

        try:
            await content_step()
            if self.atomic_pair_writes:
                await self.session.flush()
            else:
                await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception(
                "Failed to %s content %s of listing %s", action, content_id, listing_id
            )
            raise RecordStoreError(
                f"Failed to {action} listing with ID {listing_id}.", listing_id
            ) from e

        try:
            await listing_step()
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            if self.atomic_pair_writes:
                logger.exception("Failed to %s listing %s", action, listing_id)
                raise RecordStoreError(
                    f"Failed to {action} listing with ID {listing_id}.", listing_id
                ) from e

            logger.error(
                "Could not %s listing %s after content %s was committed, "
                "the pair needs manual reconciliation",
                action,
                listing_id,
                content_id,
            )
            raise PartialFailure(
                f"Content {content_id} was updated but listing {listing_id} "
                f"could not be updated ({action}).",
                listing_id=listing_id,
                content_id=content_id,
            ) from e

    @classmethod
    async def get_dependency(
        cls,
        session: AsyncSession = Depends(get_async_session),
        actor: Actor = Depends(get_current_actor),
    ) -> "LifecycleService":
        return cls(session, actor_id=actor.id)
