"""Debounced typeahead suggestions."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from cachetools import TTLCache

from reelsearch.config import CacheSettings, SuggestionSettings
from reelsearch.domain.models import AutocompleteRequest, SuggestionOutcome
from reelsearch.logging import logger
from reelsearch.services.ports import SearchBackend

SuggestionCallback = Callable[[str, SuggestionOutcome | None], Awaitable[None] | None]


class SuggestionChannel:
    """Best-effort suggestion fetches, tagged with the text they were issued for.

    Failures never propagate: they are logged and reported as ``None`` so a
    failed lookup can be told apart from one that matched nothing.
    Gating against the live query text is left to the reducer.
    """

    def __init__(
        self,
        backend: SearchBackend,
        settings: SuggestionSettings | None = None,
        cache_settings: CacheSettings | None = None,
    ) -> None:
        self._backend = backend
        self._settings = settings or SuggestionSettings()
        cache_settings = cache_settings or CacheSettings()
        self._cache: TTLCache | None = None
        if cache_settings.enabled:
            self._cache = TTLCache(
                maxsize=cache_settings.max_entries,
                ttl=cache_settings.suggestion_ttl_seconds,
            )
        self._pending: asyncio.Task | None = None

    @property
    def pending(self) -> asyncio.Task | None:
        return self._pending

    def should_fetch(self, text: str) -> bool:
        return len(text) >= self._settings.min_query_length

    async def fetch(self, text: str) -> SuggestionOutcome | None:
        if not self.should_fetch(text):
            return SuggestionOutcome(query=text)

        if self._cache is not None and text in self._cache:
            return self._cache[text]

        request = AutocompleteRequest(
            query=text,
            types=self._settings.types,
            limit=self._settings.limit,
        )
        try:
            suggestions = await self._backend.suggest(request)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning(
                "suggestions_failed",
                query=text,
                error=str(exc),
                exception_type=exc.__class__.__name__,
            )
            return None

        outcome = SuggestionOutcome(query=text, suggestions=tuple(suggestions)[: self._settings.limit])
        if self._cache is not None:
            self._cache[text] = outcome
        return outcome

    def schedule(self, text: str, callback: SuggestionCallback) -> asyncio.Task:
        """Fetch after the debounce delay unless another call arrives first."""

        self.cancel()
        self._pending = asyncio.create_task(self._delayed_fetch(text, callback))
        return self._pending

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    def clear_cache(self) -> None:
        if self._cache is not None:
            self._cache.clear()

    async def _delayed_fetch(self, text: str, callback: SuggestionCallback) -> None:
        await asyncio.sleep(self._settings.debounce_seconds)
        # Only the timer is cancellable; a started fetch runs to completion.
        if self._pending is asyncio.current_task():
            self._pending = None
        outcome = await self.fetch(text)
        result = callback(text, outcome)
        if asyncio.iscoroutine(result):
            await result


__all__ = ["SuggestionCallback", "SuggestionChannel"]
