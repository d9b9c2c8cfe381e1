"""JSON/HTTP client for the remote search service."""

from __future__ import annotations

from typing import Any, Sequence
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from reelsearch.config import ApiSettings
from reelsearch.domain.models import (
    AutocompleteRequest,
    IndexEntry,
    SearchFacet,
    SearchMetrics,
    SearchOutcome,
    SearchPagination,
    SearchRequest,
    SearchResult,
    SearchSuggestion,
)
from reelsearch.logging import logger
from reelsearch.services.exceptions import (
    SearchNetworkError,
    SearchServiceError,
    SearchValidationError,
)

VALIDATION_STATUSES = frozenset({400, 422})
TRANSIENT_STATUSES = frozenset({408, 425, 429})


class HttpSearchClient:
    """Implements both the live search and the index maintenance interfaces."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: ApiSettings | None = None,
    ) -> None:
        self._client = http_client
        self._settings = settings or ApiSettings()

    async def search(self, request: SearchRequest) -> SearchOutcome:
        payload = {
            "query": request.query,
            "filters": {key: list(values) for key, values in request.filters.items()},
            "sort_by": request.sort_field,
            "sort_order": request.sort_direction,
            "page": request.page,
            "limit": request.page_size,
            "include_facets": request.include_facets,
        }
        data = await self._send("POST", "search", json=payload)
        try:
            return parse_search_response(data, request)
        except (ValueError, TypeError, AttributeError) as exc:
            raise SearchServiceError(
                f"Malformed search response: {exc}", context={"path": "search"}
            ) from exc

    async def suggest(self, request: AutocompleteRequest) -> Sequence[SearchSuggestion]:
        payload = {"query": request.query, "types": list(request.types), "limit": request.limit}
        data = await self._send("POST", "suggestions", json=payload)
        try:
            return [SearchSuggestion.model_validate(item) for item in data.get("suggestions") or []]
        except (ValidationError, AttributeError) as exc:
            raise SearchServiceError(
                f"Malformed suggestion response: {exc}", context={"path": "suggestions"}
            ) from exc

    async def track_click(self, result_id: str, position: int, query: str) -> None:
        payload = {"result_id": result_id, "position": position, "query": query}
        await self._send("POST", "analytics/clicks", json=payload)

    async def update_index_entry(self, entry: IndexEntry) -> None:
        path = f"index/{quote(entry.video_id, safe='')}"
        await self._send("PUT", path, json=entry.model_dump(mode="json"))

    async def remove_index_entry(self, video_id: str) -> None:
        await self._send("DELETE", f"index/{quote(video_id, safe='')}")

    async def get_metrics(self) -> SearchMetrics:
        data = await self._send("GET", "metrics")
        try:
            return SearchMetrics.model_validate(data)
        except ValidationError as exc:
            raise SearchServiceError(
                f"Malformed metrics response: {exc}", context={"path": "metrics"}
            ) from exc

    async def clear_analytics(self) -> None:
        await self._send("DELETE", "analytics")

    def _url(self, path: str) -> str:
        return f"{str(self._settings.base_url).rstrip('/')}/{path.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        api_key = self._settings.api_key
        if api_key is not None and api_key.get_secret_value():
            headers["Authorization"] = f"Bearer {api_key.get_secret_value()}"
        return headers

    async def _send(self, method: str, path: str, *, json: Any = None) -> dict[str, Any]:
        context = {"method": method, "path": path}
        try:
            response = await self._client.request(
                method,
                self._url(path),
                json=json,
                headers=self._headers(),
                timeout=self._settings.request_timeout_seconds,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            detail = exc.response.text[:500]
            context["status_code"] = status_code
            message = f"Search service returned {status_code}: {detail}"
            if status_code in VALIDATION_STATUSES:
                raise SearchValidationError(message, context=context) from exc
            if status_code >= 500 or status_code in TRANSIENT_STATUSES:
                raise SearchNetworkError(message, context=context) from exc
            raise SearchServiceError(message, context=context) from exc
        except httpx.RequestError as exc:
            raise SearchNetworkError(f"Search service unreachable: {exc}", context=context) from exc

        if response.status_code == 204 or not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as exc:
            raise SearchServiceError("Search service returned invalid JSON", context=context) from exc
        if not isinstance(data, dict):
            raise SearchServiceError("Search service returned an unexpected payload", context=context)
        logger.debug("search_api_response", status_code=response.status_code, **context)
        return data


def parse_search_response(data: dict[str, Any], request: SearchRequest) -> SearchOutcome:
    """Build an outcome from a remote payload, keeping the remote rank order."""

    results = tuple(SearchResult.model_validate(item) for item in data.get("results") or [])
    facets = tuple(SearchFacet.model_validate(item) for item in data.get("facets") or [])

    raw_pagination = data.get("pagination")
    if raw_pagination:
        page = int(raw_pagination.get("page", request.page))
        page_size = int(raw_pagination.get("page_size") or raw_pagination.get("limit") or request.page_size)
        total = int(raw_pagination.get("total", len(results)))
        pagination = SearchPagination.build(page=page, page_size=page_size, total=total)
        if "has_next" in raw_pagination:
            pagination = pagination.model_copy(
                update={"has_next": bool(raw_pagination["has_next"])}
            )
    else:
        pagination = SearchPagination.build(
            page=request.page, page_size=request.page_size, total=len(results)
        )

    return SearchOutcome(
        query=str(data.get("query", request.query)),
        results=results,
        facets=facets,
        pagination=pagination,
        execution_time_ms=int(data.get("execution_time_ms") or 0),
    )


__all__ = ["HttpSearchClient", "parse_search_response"]
