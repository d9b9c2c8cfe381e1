"""Shared fixtures: an in-memory search backend and controller settings."""

from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio

from reelsearch.config import CacheSettings, SearchSettings, SuggestionSettings
from reelsearch.domain.models import (
    SearchFacet,
    SearchOutcome,
    SearchPagination,
    SearchResult,
    SearchSuggestion,
)
from reelsearch.search.controller import SearchController


class FakeBackend:
    """Records calls and answers with deterministic payloads."""

    def __init__(self) -> None:
        self.search_calls = []
        self.suggest_calls = []
        self.clicks = []
        self.search_handler = None
        self.search_error: Exception | None = None
        self.suggest_error: Exception | None = None
        self.suggest_gate: asyncio.Event | None = None
        self.click_error: Exception | None = None

    @staticmethod
    def outcome_for(query: str, *, page: int = 1, page_size: int = 20) -> SearchOutcome:
        label = query or "all"
        results = tuple(
            SearchResult(video_id=f"{label}-{index}", title=f"{label} reel {index}")
            for index in (1, 2)
        )
        return SearchOutcome(
            query=query,
            results=results,
            facets=(SearchFacet(facet_type="process_type", facet_value=label, facet_count=2),),
            pagination=SearchPagination.build(page=page, page_size=page_size, total=2),
        )

    async def search(self, request):
        self.search_calls.append(request)
        if self.search_handler is not None:
            return await self.search_handler(request)
        if self.search_error is not None:
            raise self.search_error
        return self.outcome_for(request.query, page=request.page, page_size=request.page_size)

    async def suggest(self, request):
        self.suggest_calls.append(request.query)
        if self.suggest_gate is not None:
            await self.suggest_gate.wait()
        if self.suggest_error is not None:
            raise self.suggest_error
        return [
            SearchSuggestion(suggestion_type="tag", suggestion_value=f"{request.query} bit"),
            SearchSuggestion(suggestion_type="title", suggestion_value=f"{request.query} basics"),
        ]

    async def track_click(self, result_id, position, query):
        if self.click_error is not None:
            raise self.click_error
        self.clicks.append((result_id, position, query))


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def settings() -> SearchSettings:
    return SearchSettings(
        suggestions=SuggestionSettings(debounce_seconds=0.01),
        cache=CacheSettings(enabled=False),
    )


@pytest_asyncio.fixture
async def controller(backend, settings):
    instance = SearchController(backend, settings)
    try:
        yield instance
    finally:
        await instance.close()
