from __future__ import annotations

from reelsearch.domain.models import QueryState
from reelsearch.search.cache_key import CACHE_KEY_PREFIX, build_cache_key


def test_cache_key_ignores_filter_ordering():
    first = QueryState(text="drill", filters={"tags": ("b", "a"), "author": ("jdoe",)})
    second = QueryState(text="drill ", filters={"author": ("jdoe",), "tags": ("a", "b")})
    assert build_cache_key(first) == build_cache_key(second)


def test_cache_key_tracks_pagination_and_sort():
    base = QueryState(text="drill")
    keys = {
        build_cache_key(base),
        build_cache_key(base.model_copy(update={"page": 2})),
        build_cache_key(base.model_copy(update={"page_size": 50})),
        build_cache_key(base.model_copy(update={"sort_direction": "ASC"})),
        build_cache_key(base.model_copy(update={"filters": {"tags": ("a",)}})),
    }
    assert len(keys) == 5


def test_cache_key_has_prefix():
    assert build_cache_key(QueryState()).startswith(CACHE_KEY_PREFIX)
