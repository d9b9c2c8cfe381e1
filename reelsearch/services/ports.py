"""Interfaces of the remote collaborators the search controller talks to."""

from __future__ import annotations

from typing import Protocol, Sequence

from reelsearch.domain.models import (
    AutocompleteRequest,
    IndexEntry,
    SearchMetrics,
    SearchOutcome,
    SearchRequest,
    SearchSuggestion,
)


class SearchBackend(Protocol):
    async def search(self, request: SearchRequest) -> SearchOutcome: ...

    async def suggest(self, request: AutocompleteRequest) -> Sequence[SearchSuggestion]: ...

    async def track_click(self, result_id: str, position: int, query: str) -> None: ...


class IndexBackend(Protocol):
    async def update_index_entry(self, entry: IndexEntry) -> None: ...

    async def remove_index_entry(self, video_id: str) -> None: ...

    async def get_metrics(self) -> SearchMetrics: ...

    async def clear_analytics(self) -> None: ...


__all__ = ["IndexBackend", "SearchBackend"]
