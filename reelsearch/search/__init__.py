from reelsearch.search.cache_key import build_cache_key
from reelsearch.search.controller import SearchController
from reelsearch.search.execution import SearchExecutionChannel
from reelsearch.search.reducer import initial_state, reduce
from reelsearch.search.suggestions import SuggestionChannel

__all__ = [
    "SearchController",
    "SearchExecutionChannel",
    "SuggestionChannel",
    "build_cache_key",
    "initial_state",
    "reduce",
]
