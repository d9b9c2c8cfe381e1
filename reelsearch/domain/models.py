"""Pydantic models shared by the search state machine and its clients."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from reelsearch.config import SuggestionType

SortField = Literal["relevance", "created_at", "view_count", "title"]
SortDirection = Literal["ASC", "DESC"]
ErrorKind = Literal["network", "validation", "unknown"]
Filters = dict[str, tuple[str, ...]]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class QueryState(_Frozen):
    """The user's current search intent."""

    text: str = ""
    filters: Filters = Field(default_factory=dict)
    sort_field: SortField = "relevance"
    sort_direction: SortDirection = "DESC"
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1)


class Highlight(_Frozen):
    title: str | None = None
    description: str | None = None
    transcript: str | None = None


class SearchResult(_Frozen):
    video_id: str
    title: str
    description: str | None = None
    thumbnail_url: str | None = None
    duration: int = 0
    tags: tuple[str, ...] = ()
    machine_model: str | None = None
    process_type: str | None = None
    tooling: str | None = None
    skill_level: str | None = None
    author_id: str | None = None
    view_count: int = 0
    bookmark_count: int = 0
    created_at: datetime | None = None
    relevance_score: float = 0.0
    highlight: Highlight | None = None


class SearchFacet(_Frozen):
    facet_type: str
    facet_value: str
    facet_count: int = Field(ge=0)


class SearchPagination(_Frozen):
    page: int = Field(ge=1)
    page_size: int = Field(ge=1)
    total: int = Field(ge=0)
    total_pages: int = Field(ge=0)
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, *, page: int, page_size: int, total: int) -> "SearchPagination":
        total_pages = -(-total // page_size) if total else 0
        return cls(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class SearchOutcome(_Frozen):
    """One remote response; results and facets are never mixed across outcomes."""

    query: str = ""
    results: tuple[SearchResult, ...] = ()
    facets: tuple[SearchFacet, ...] = ()
    pagination: SearchPagination
    execution_time_ms: int = 0


class SearchSuggestion(_Frozen):
    suggestion_type: SuggestionType
    suggestion_value: str
    usage_count: int = 0
    similarity_score: float = 0.0


class SuggestionOutcome(_Frozen):
    """Suggestions tagged with the query text they were requested for."""

    query: str
    suggestions: tuple[SearchSuggestion, ...] = ()


class SearchError(_Frozen):
    kind: ErrorKind = "unknown"
    message: str
    context: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(
        cls, exc: BaseException, *, context: dict[str, Any] | None = None
    ) -> "SearchError":
        kind = getattr(exc, "kind", "unknown")
        if kind not in ("network", "validation", "unknown"):
            kind = "unknown"
        payload = dict(getattr(exc, "context", None) or {})
        payload.update(context or {})
        payload.setdefault("exception_type", exc.__class__.__name__)
        return cls(kind=kind, message=str(exc) or "Search failed", context=payload)


class SearchState(_Frozen):
    """Aggregate snapshot exposed to presentation code."""

    query: QueryState = Field(default_factory=QueryState)
    outcome: SearchOutcome | None = None
    suggestions: SuggestionOutcome | None = None
    searching: bool = False
    suggesting: bool = False
    error: SearchError | None = None
    last_searched_at: datetime | None = None
    search_sequence: int = 0

    @property
    def results(self) -> tuple[SearchResult, ...]:
        return self.outcome.results if self.outcome else ()

    @property
    def facets(self) -> tuple[SearchFacet, ...]:
        return self.outcome.facets if self.outcome else ()

    @property
    def pagination(self) -> SearchPagination | None:
        return self.outcome.pagination if self.outcome else None

    @property
    def suggestion_list(self) -> tuple[SearchSuggestion, ...]:
        return self.suggestions.suggestions if self.suggestions else ()


class SearchRequest(_Frozen):
    """Effective request sent to the remote search service."""

    query: str = ""
    filters: Filters = Field(default_factory=dict)
    sort_field: SortField = "relevance"
    sort_direction: SortDirection = "DESC"
    page: int = 1
    page_size: int = 20
    include_facets: bool = True

    @classmethod
    def from_query(cls, query: QueryState, **overrides: Any) -> "SearchRequest":
        payload: dict[str, Any] = {
            "query": query.text,
            "filters": query.filters,
            "sort_field": query.sort_field,
            "sort_direction": query.sort_direction,
            "page": query.page,
            "page_size": query.page_size,
        }
        payload.update({key: value for key, value in overrides.items() if value is not None})
        return cls.model_validate(payload)

    def to_query_state(self) -> QueryState:
        return QueryState.model_construct(
            text=self.query,
            filters=self.filters,
            sort_field=self.sort_field,
            sort_direction=self.sort_direction,
            page=self.page,
            page_size=self.page_size,
        )


class AutocompleteRequest(_Frozen):
    query: str
    types: tuple[SuggestionType, ...]
    limit: int = 10


class IndexEntry(_Frozen):
    """Payload for upserting a video into the remote search index."""

    video_id: str = Field(min_length=1)
    title: str
    description: str | None = None
    tags: tuple[str, ...] = ()
    machine_model: str | None = None
    process_type: str | None = None
    tooling: str | None = None
    skill_level: str | None = None
    status: str = "published"
    visibility: str = "public"
    customer_scope: tuple[str, ...] = ()
    author_id: str
    view_count: int = 0
    bookmark_count: int = 0
    duration: int = 0


class TermCount(_Frozen):
    term: str
    count: int


class FilterCount(_Frozen):
    filter_type: str
    filter_value: str
    count: int


class SearchMetrics(_Frozen):
    total_queries: int = 0
    average_execution_time: float = 0.0
    most_searched_terms: tuple[TermCount, ...] = ()
    popular_filters: tuple[FilterCount, ...] = ()
    click_through_rate: float = 0.0
    zero_result_rate: float = 0.0


class SyncReport(_Frozen):
    synced: int = 0
    errors: int = 0
    failed_ids: tuple[str, ...] = ()


__all__ = [
    "AutocompleteRequest",
    "ErrorKind",
    "FilterCount",
    "Filters",
    "Highlight",
    "IndexEntry",
    "QueryState",
    "SearchError",
    "SearchFacet",
    "SearchMetrics",
    "SearchOutcome",
    "SearchPagination",
    "SearchRequest",
    "SearchResult",
    "SearchState",
    "SearchSuggestion",
    "SortDirection",
    "SortField",
    "SuggestionOutcome",
    "SyncReport",
    "TermCount",
]
