"""Caller-owned search controller exposing actions and a read-only state."""

from __future__ import annotations

import asyncio
import contextlib
from datetime import datetime
from typing import Any, Callable, Mapping

from cachetools import TTLCache
from pydantic import ValidationError

from reelsearch.config import SearchSettings, get_settings
from reelsearch.domain.actions import (
    Action,
    Clear,
    FilterSelection,
    ResetFilters,
    SearchFailed,
    SearchStarted,
    SearchSucceeded,
    SetFilters,
    SetPage,
    SetPageSize,
    SetQuery,
    SetSort,
    SuggestionsFailed,
    SuggestionsReceived,
    SuggestionsRequested,
)
from reelsearch.domain.models import (
    SearchError,
    SearchRequest,
    SearchState,
    SearchSuggestion,
    SortDirection,
    SortField,
    SuggestionOutcome,
)
from reelsearch.logging import logger
from reelsearch.search.cache_key import build_cache_key
from reelsearch.search.execution import SearchExecutionChannel
from reelsearch.search.reducer import initial_state, merge_filters, reduce
from reelsearch.search.suggestions import SuggestionChannel
from reelsearch.services.exceptions import SearchValidationError
from reelsearch.services.ports import SearchBackend
from reelsearch.utils.datetime import utc_now

StateListener = Callable[[SearchState], None]


class SearchController:
    """Owns the search state of one UI context.

    Every transition goes through :func:`reduce`. Setters never fetch; the
    caller decides when to run :meth:`submit_search`. Search settlements are
    tagged with a monotonically increasing sequence number and only the most
    recently issued one is applied.
    """

    def __init__(
        self,
        backend: SearchBackend,
        settings: SearchSettings | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._settings = settings or get_settings()
        self._backend = backend
        self._clock = clock
        self._execution = SearchExecutionChannel(backend, self._settings.query)
        self._suggestions = SuggestionChannel(
            backend, self._settings.suggestions, self._settings.cache
        )
        cache = self._settings.cache
        self._outcomes: TTLCache | None = (
            TTLCache(maxsize=cache.max_entries, ttl=cache.search_ttl_seconds)
            if cache.enabled
            else None
        )
        self._state = initial_state(page_size=self._settings.query.default_page_size)
        self._sequence = 0
        self._listeners: list[StateListener] = []
        self._background: set[asyncio.Task] = set()
        self._closed = False

    async def __aenter__(self) -> "SearchController":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def sequence(self) -> int:
        """Highest search sequence number issued so far."""

        return self._sequence

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> SearchState:
        if self._closed:
            logger.debug("search_dispatch_after_close", action=type(action).__name__)
            return self._state
        next_state = reduce(self._state, action)
        if next_state is not self._state:
            self._state = next_state
            for listener in list(self._listeners):
                try:
                    listener(next_state)
                except Exception:
                    logger.exception(
                        "search_listener_failed", action=type(action).__name__
                    )
        return self._state

    # Intent edits

    def set_query(self, text: str) -> SearchState:
        self._ensure_open()
        return self.dispatch(SetQuery(text))

    def set_filters(
        self, filters: Mapping[str, FilterSelection] | None = None, **facets: FilterSelection
    ) -> SearchState:
        self._ensure_open()
        partial = dict(filters or {})
        partial.update(facets)
        return self.dispatch(SetFilters(partial))

    def set_sort(self, field: SortField, direction: SortDirection = "DESC") -> SearchState:
        self._ensure_open()
        return self.dispatch(SetSort(field, direction))

    def set_page(self, page: int) -> SearchState:
        self._ensure_open()
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        return self.dispatch(SetPage(page))

    def set_page_size(self, page_size: int) -> SearchState:
        self._ensure_open()
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {page_size}")
        max_page_size = self._settings.query.max_page_size
        if page_size > max_page_size:
            logger.debug("page_size_clamped", requested=page_size, maximum=max_page_size)
            page_size = max_page_size
        return self.dispatch(SetPageSize(page_size))

    def clear(self) -> SearchState:
        self._ensure_open()
        self._suggestions.cancel()
        return self.dispatch(Clear())

    def reset_filters(self) -> SearchState:
        self._ensure_open()
        return self.dispatch(ResetFilters())

    # Channels

    async def submit_search(self, **overrides: Any) -> SearchState:
        """Run a search for the current intent overlaid with ``overrides``.

        Accepted overrides: ``query``, ``filters``, ``sort_field``,
        ``sort_direction``, ``page``, ``page_size`` and ``include_facets``.
        Remote failures end up in ``state.error``; they are never raised.
        """

        self._ensure_open()
        self._sequence += 1
        sequence = self._sequence
        self.dispatch(SearchStarted(sequence))

        try:
            request = self._compose_request(overrides)
            self._execution.validate(request)
        except SearchValidationError as exc:
            return self._fail(sequence, exc)

        cache_key = self._cache_key(request)
        cached = self._outcomes.get(cache_key) if self._outcomes is not None else None
        if cached is not None:
            logger.debug("search_cache_hit", sequence=sequence, query=request.query)
            return self.dispatch(SearchSucceeded(sequence, cached, self._clock()))

        try:
            outcome = await self._execution.execute(request, sequence=sequence)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            return self._fail(sequence, exc)

        if self._outcomes is not None:
            self._outcomes[cache_key] = outcome
        if sequence != self._sequence:
            logger.info("search_response_superseded", sequence=sequence, latest=self._sequence)
        return self.dispatch(SearchSucceeded(sequence, outcome, self._clock()))

    async def fetch_suggestions(self, text: str) -> list[SearchSuggestion]:
        self._ensure_open()
        if self._suggestions.should_fetch(text):
            self.dispatch(SuggestionsRequested(text))
        outcome = await self._suggestions.fetch(text)
        self._apply_suggestions(text, outcome)
        return list(outcome.suggestions) if outcome is not None else []

    def schedule_suggestions(self, text: str | None = None) -> asyncio.Task:
        """Debounced suggestion fetch, defaulting to the live query text."""

        self._ensure_open()
        target = self._state.query.text if text is None else text
        if self._suggestions.should_fetch(target):
            self.dispatch(SuggestionsRequested(target))
        return self._suggestions.schedule(target, self._apply_suggestions)

    def track_result_click(self, result_id: str, position: int) -> asyncio.Task:
        """Report a result click without waiting for the telemetry sink."""

        self._ensure_open()
        query = self._state.query.text
        task = asyncio.create_task(self._send_click(result_id, position, query))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    def invalidate_cache(self) -> None:
        if self._outcomes is not None:
            self._outcomes.clear()
        self._suggestions.clear_cache()
        logger.debug("search_cache_invalidated")

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        pending = self._suggestions.pending
        self._suggestions.cancel()
        if pending is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await pending
        clicks = list(self._background)
        for task in clicks:
            task.cancel()
        if clicks:
            await asyncio.gather(*clicks, return_exceptions=True)
        self._listeners.clear()
        logger.debug("search_controller_closed", sequence=self._sequence)

    # Internals

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("SearchController is closed")

    def _compose_request(self, overrides: Mapping[str, Any]) -> SearchRequest:
        overrides = dict(overrides)
        if overrides.get("filters") is not None:
            overrides["filters"] = merge_filters({}, overrides["filters"])
        try:
            return SearchRequest.from_query(self._state.query, **overrides)
        except ValidationError as exc:
            raise SearchValidationError(
                f"Invalid search request: {exc.error_count()} field error(s)",
                context={"errors": exc.errors(include_url=False)},
            ) from exc

    def _cache_key(self, request: SearchRequest) -> str:
        key = build_cache_key(request.to_query_state())
        return key if request.include_facets else f"{key}:nofacets"

    def _fail(self, sequence: int, exc: BaseException) -> SearchState:
        error = SearchError.from_exception(exc, context={"sequence": sequence})
        if sequence != self._sequence:
            logger.info("search_failure_superseded", sequence=sequence, latest=self._sequence)
        else:
            logger.warning(
                "search_failed",
                sequence=sequence,
                kind=error.kind,
                error=error.message,
            )
        return self.dispatch(SearchFailed(sequence, error))

    def _apply_suggestions(self, text: str, outcome: SuggestionOutcome | None) -> None:
        if text != self._state.query.text:
            logger.debug("stale_suggestions_dropped", query=text)
        if outcome is None:
            self.dispatch(SuggestionsFailed(text))
        else:
            self.dispatch(SuggestionsReceived(outcome))

    async def _send_click(self, result_id: str, position: int, query: str) -> None:
        try:
            await self._backend.track_click(result_id, position, query)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning(
                "click_tracking_failed",
                result_id=result_id,
                position=position,
                error=str(exc),
            )


__all__ = ["SearchController", "StateListener"]
