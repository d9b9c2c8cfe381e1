"""Actions accepted by the search state reducer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Mapping, Union

from reelsearch.domain.models import (
    SearchError,
    SearchOutcome,
    SortDirection,
    SortField,
    SuggestionOutcome,
)

FilterSelection = Union[str, Iterable[str], None]


@dataclass(frozen=True, slots=True)
class SetQuery:
    text: str


@dataclass(frozen=True, slots=True)
class SetFilters:
    partial: Mapping[str, FilterSelection]


@dataclass(frozen=True, slots=True)
class SetSort:
    field: SortField
    direction: SortDirection


@dataclass(frozen=True, slots=True)
class SetPage:
    page: int


@dataclass(frozen=True, slots=True)
class SetPageSize:
    page_size: int


@dataclass(frozen=True, slots=True)
class SearchStarted:
    sequence: int


@dataclass(frozen=True, slots=True)
class SearchSucceeded:
    sequence: int
    outcome: SearchOutcome
    completed_at: datetime


@dataclass(frozen=True, slots=True)
class SearchFailed:
    sequence: int
    error: SearchError


@dataclass(frozen=True, slots=True)
class SuggestionsRequested:
    query: str


@dataclass(frozen=True, slots=True)
class SuggestionsReceived:
    outcome: SuggestionOutcome


@dataclass(frozen=True, slots=True)
class SuggestionsFailed:
    query: str


@dataclass(frozen=True, slots=True)
class Clear:
    pass


@dataclass(frozen=True, slots=True)
class ResetFilters:
    pass


Action = Union[
    SetQuery,
    SetFilters,
    SetSort,
    SetPage,
    SetPageSize,
    SearchStarted,
    SearchSucceeded,
    SearchFailed,
    SuggestionsRequested,
    SuggestionsReceived,
    SuggestionsFailed,
    Clear,
    ResetFilters,
]

__all__ = [
    "Action",
    "Clear",
    "FilterSelection",
    "ResetFilters",
    "SearchFailed",
    "SearchStarted",
    "SearchSucceeded",
    "SetFilters",
    "SetPage",
    "SetPageSize",
    "SetQuery",
    "SetSort",
    "SuggestionsFailed",
    "SuggestionsReceived",
    "SuggestionsRequested",
]
