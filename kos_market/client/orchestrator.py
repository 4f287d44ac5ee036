import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Optional, Protocol

import httpx

from kos_market.client.api_client import LifecycleClientError
from kos_market.schemas.lifecycle_schema import BulkResult

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Bulk action succeeded."
FAILURE_MESSAGE = "Bulk action failed."
CLEANUP_SUCCESS_MESSAGE = "Archive cleaned up."
CLEANUP_FAILURE_MESSAGE = "Failed to clean up the archive."

ConfirmCallback = Callable[[str], Awaitable[bool]]


class BulkLifecycleClient(Protocol):
    async def bulk_archive(self, listing_ids: Iterable[int]) -> BulkResult: ...

    async def bulk_permanent_delete(self, listing_ids: Iterable[int]) -> BulkResult: ...

    async def cleanup_archive(self) -> BulkResult: ...


class BulkOutcomeStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    DECLINED = "declined"
    NOTHING_SELECTED = "nothing_selected"
    BUSY = "busy"


@dataclass
class BulkOutcome:
    status: BulkOutcomeStatus
    result: Optional[BulkResult] = None
    error: Optional[str] = None


class BulkActionOrchestrator:
    """Runs the "remove selected" and "clean up archive" actions of the admin
    listing table.

    The same gesture maps to a different transition depending on the view:
    in the archive view selected listings are permanently deleted, in the
    active view they are archived. Nothing is sent before the user confirms,
    and nothing at all once the owner is closed. A call that changed at least
    one listing refreshes the view even when other ids failed. After a run
    exactly one of on_refresh / on_error fires, unless the owner closed first.
    """

    def __init__(
        self,
        client: BulkLifecycleClient,
        confirm: ConfirmCallback,
        on_refresh: Callable[[], Any],
        on_error: Callable[[str], Any],
        on_success: Optional[Callable[[str], Any]] = None,
        archived_view_active: bool = False,
    ) -> None:
        self.client = client
        self.confirm = confirm
        self.on_refresh = on_refresh
        self.on_error = on_error
        self.on_success = on_success
        self.archived_view_active = archived_view_active
        self._closed = False
        self._busy = False

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Detach from the owner. In-flight calls finish, callbacks are dropped."""
        self._closed = True

    def confirmation_message(self, count: int) -> str:
        if self.archived_view_active:
            return f"{count} selected listings will be PERMANENTLY deleted."
        return f"{count} selected listings will be moved to the archive."

    async def run_bulk(self, listing_ids: Iterable[int]) -> BulkOutcome:
        listing_ids = list(listing_ids)
        if not listing_ids:
            return BulkOutcome(BulkOutcomeStatus.NOTHING_SELECTED)

        # pinned before the prompt so a view switch cannot change the action
        permanent = self.archived_view_active
        if permanent:
            operation, action = self.client.bulk_permanent_delete, "permanent delete"
        else:
            operation, action = self.client.bulk_archive, "archive"

        return await self._run(
            self.confirmation_message(len(listing_ids)),
            lambda: operation(listing_ids),
            action,
            SUCCESS_MESSAGE,
            FAILURE_MESSAGE,
        )

    async def run_cleanup(self) -> BulkOutcome:
        return await self._run(
            "Permanently delete every archived listing?",
            self.client.cleanup_archive,
            "cleanup",
            CLEANUP_SUCCESS_MESSAGE,
            CLEANUP_FAILURE_MESSAGE,
        )

    async def _run(
        self,
        prompt: str,
        call: Callable[[], Awaitable[BulkResult]],
        action: str,
        success_message: str,
        failure_message: str,
    ) -> BulkOutcome:
        if self._busy:
            return BulkOutcome(BulkOutcomeStatus.BUSY)

        self._busy = True
        try:
            if not await self.confirm(prompt):
                logger.debug("Bulk %s declined", action)
                return BulkOutcome(BulkOutcomeStatus.DECLINED)
            if self._closed:
                logger.debug("Owner closed during confirmation, bulk %s dropped", action)
                return BulkOutcome(BulkOutcomeStatus.DECLINED)

            try:
                result = await call()
            except (LifecycleClientError, httpx.HTTPError) as e:
                logger.error("Bulk %s request failed: %s", action, e)
                await self._emit(self.on_error, failure_message)
                return BulkOutcome(BulkOutcomeStatus.FAILED, error=str(e))
        finally:
            self._busy = False

        for failure in result.failed:
            logger.warning(
                "Bulk %s: listing %s failed with %s: %s",
                action,
                failure.id,
                failure.kind.value,
                failure.message,
            )

        # nothing changed in the store, so there is nothing to refresh
        if result.failed and not result.succeeded:
            await self._emit(self.on_error, failure_message)
            return BulkOutcome(BulkOutcomeStatus.FAILED, result=result)

        logger.info("Bulk %s applied to %d listings", action, result.count)
        if self.on_success is not None:
            await self._emit(self.on_success, success_message)
        await self._emit(self.on_refresh)
        return BulkOutcome(BulkOutcomeStatus.SUCCEEDED, result=result)

    async def _emit(self, callback: Callable[..., Any], *args: Any) -> None:
        if self._closed:
            logger.debug("Owner closed, dropping %r", callback)
            return
        ret = callback(*args)
        if inspect.isawaitable(ret):
            await ret
