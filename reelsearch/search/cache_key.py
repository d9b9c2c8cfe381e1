"""Stable identities for query states."""

from __future__ import annotations

import hashlib
import json

from reelsearch.domain.models import QueryState

CACHE_KEY_PREFIX = "search:"


def canonical_query(query: QueryState) -> dict:
    """Order-independent view of a query state, suitable for hashing."""

    return {
        "text": query.text.strip(),
        "filters": {
            key: sorted(set(values))
            for key, values in sorted(query.filters.items())
            if values
        },
        "sort": [query.sort_field, query.sort_direction],
        "page": query.page,
        "page_size": query.page_size,
    }


def build_cache_key(query: QueryState) -> str:
    payload = json.dumps(canonical_query(query), sort_keys=True, separators=(",", ":"))
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
    return f"{CACHE_KEY_PREFIX}{digest}"


__all__ = ["CACHE_KEY_PREFIX", "build_cache_key", "canonical_query"]
