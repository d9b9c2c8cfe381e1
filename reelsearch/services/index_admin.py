"""Admin operations on the remote search index."""

from __future__ import annotations

from typing import Awaitable, Callable, Iterable, TypeVar

from reelsearch.domain.models import IndexEntry, SearchMetrics, SyncReport
from reelsearch.logging import logger
from reelsearch.services.exceptions import (
    IndexMaintenanceError,
    SearchNetworkError,
    SearchServiceError,
)
from reelsearch.services.ports import IndexBackend
from reelsearch.utils.retry import retry_async

T = TypeVar("T")
Invalidator = Callable[[], None]


class IndexMaintenanceService:
    """One-shot index calls; failures are raised to the caller.

    Successful mutations run every registered invalidator so that search
    controllers drop outcomes computed against the previous index.
    """

    def __init__(
        self,
        backend: IndexBackend,
        *,
        invalidators: Iterable[Invalidator] = (),
        max_attempts: int = 3,
        base_delay: float = 0.5,
    ) -> None:
        self._backend = backend
        self._invalidators: list[Invalidator] = list(invalidators)
        self._max_attempts = max_attempts
        self._base_delay = base_delay

    def add_invalidator(self, invalidator: Invalidator) -> None:
        self._invalidators.append(invalidator)

    async def update_index_entry(self, entry: IndexEntry) -> None:
        await self._call(
            "index_update",
            lambda: self._backend.update_index_entry(entry),
            video_id=entry.video_id,
        )
        self._invalidate()
        logger.info("index_entry_updated", video_id=entry.video_id)

    async def remove_index_entry(self, video_id: str) -> None:
        if not video_id:
            raise IndexMaintenanceError("video_id is required.")
        await self._call(
            "index_remove",
            lambda: self._backend.remove_index_entry(video_id),
            video_id=video_id,
        )
        self._invalidate()
        logger.info("index_entry_removed", video_id=video_id)

    async def bulk_sync(self, entries: Iterable[IndexEntry]) -> SyncReport:
        """Upsert every entry, counting failures instead of stopping on them."""

        synced = 0
        failed: list[str] = []
        for entry in entries:
            try:
                await self._call(
                    "index_update",
                    lambda entry=entry: self._backend.update_index_entry(entry),
                    video_id=entry.video_id,
                )
            except IndexMaintenanceError as exc:
                logger.warning("index_sync_entry_failed", video_id=entry.video_id, error=str(exc))
                failed.append(entry.video_id)
            else:
                synced += 1

        if synced:
            self._invalidate()
        logger.info("index_sync_finished", synced=synced, errors=len(failed))
        return SyncReport(synced=synced, errors=len(failed), failed_ids=tuple(failed))

    async def get_metrics(self) -> SearchMetrics:
        return await self._call("search_metrics", self._backend.get_metrics)

    async def clear_analytics(self) -> None:
        await self._call("analytics_clear", self._backend.clear_analytics)
        logger.info("search_analytics_cleared")

    async def _call(self, name: str, operation: Callable[[], Awaitable[T]], **context) -> T:
        try:
            return await retry_async(
                operation,
                max_attempts=self._max_attempts,
                base_delay=self._base_delay,
                retry_on=(SearchNetworkError,),
                logger=logger,
                operation_name=name,
            )
        except SearchServiceError as exc:
            raise IndexMaintenanceError(
                f"{name} failed: {exc}",
                context={**exc.context, **context, "kind": exc.kind},
            ) from exc

    def _invalidate(self) -> None:
        for invalidator in list(self._invalidators):
            invalidator()


__all__ = ["IndexMaintenanceService", "Invalidator"]
