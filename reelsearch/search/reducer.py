"""Pure state transitions for the search controller."""

from __future__ import annotations

from typing import Mapping

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
from reelsearch.domain.models import Filters, QueryState, SearchState


def normalize_selection(selection: FilterSelection) -> tuple[str, ...]:
    """Turn a facet selection into an ordered tuple of unique values."""

    if selection is None:
        return ()
    if isinstance(selection, str):
        values = [selection]
    else:
        values = list(selection)
    seen: dict[str, None] = {}
    for value in values:
        text = str(value)
        if text:
            seen.setdefault(text, None)
    return tuple(seen)


def merge_filters(current: Filters, partial: Mapping[str, FilterSelection]) -> Filters:
    """Shallow merge per facet key; an empty selection drops the key."""

    merged = dict(current)
    for key, selection in partial.items():
        values = normalize_selection(selection)
        if values:
            merged[key] = values
        else:
            merged.pop(key, None)
    return merged


def _with_query(state: SearchState, **changes) -> SearchState:
    return state.model_copy(update={"query": state.query.model_copy(update=changes)})


def reduce(state: SearchState, action: Action) -> SearchState:
    """Return the state that results from applying ``action`` to ``state``."""

    if isinstance(action, SetQuery):
        updated = _with_query(state, text=action.text, page=1)
        # A pending fetch for the previous text can no longer land.
        return updated.model_copy(update={"suggesting": False})

    if isinstance(action, SetFilters):
        filters = merge_filters(state.query.filters, action.partial)
        return _with_query(state, filters=filters, page=1)

    if isinstance(action, SetSort):
        return _with_query(
            state, sort_field=action.field, sort_direction=action.direction, page=1
        )

    if isinstance(action, SetPage):
        return _with_query(state, page=action.page)

    if isinstance(action, SetPageSize):
        return _with_query(state, page_size=action.page_size, page=1)

    if isinstance(action, SearchStarted):
        return state.model_copy(
            update={"searching": True, "error": None, "search_sequence": action.sequence}
        )

    if isinstance(action, SearchSucceeded):
        if action.sequence != state.search_sequence:
            return state
        return state.model_copy(
            update={
                "searching": False,
                "outcome": action.outcome,
                "error": None,
                "last_searched_at": action.completed_at,
            }
        )

    if isinstance(action, SearchFailed):
        if action.sequence != state.search_sequence:
            return state
        # Prior outcome stays visible next to the error.
        return state.model_copy(update={"searching": False, "error": action.error})

    if isinstance(action, SuggestionsRequested):
        if action.query != state.query.text:
            return state
        return state.model_copy(update={"suggesting": True})

    if isinstance(action, SuggestionsReceived):
        if action.outcome.query != state.query.text:
            return state
        return state.model_copy(update={"suggestions": action.outcome, "suggesting": False})

    if isinstance(action, SuggestionsFailed):
        # Suggestions already on screen stay; only the spinner stops.
        if action.query != state.query.text or not state.suggesting:
            return state
        return state.model_copy(update={"suggesting": False})

    if isinstance(action, Clear):
        return state.model_copy(
            update={
                "query": state.query.model_copy(update={"text": "", "page": 1}),
                "outcome": None,
                "suggestions": None,
                "suggesting": False,
                "error": None,
            }
        )

    if isinstance(action, ResetFilters):
        return _with_query(state, filters={}, page=1)

    raise TypeError(f"Unsupported search action: {action!r}")


def initial_state(*, page_size: int = 20) -> SearchState:
    return SearchState(query=QueryState(page_size=page_size))


__all__ = ["initial_state", "merge_filters", "normalize_selection", "reduce"]
