"""Authoritative search execution against the remote service."""

from __future__ import annotations

import time

from reelsearch.config import QuerySettings
from reelsearch.domain.models import SearchOutcome, SearchRequest
from reelsearch.logging import logger
from reelsearch.services.exceptions import SearchValidationError
from reelsearch.services.ports import SearchBackend
from reelsearch.utils.datetime import elapsed_ms


class SearchExecutionChannel:
    def __init__(self, backend: SearchBackend, settings: QuerySettings | None = None) -> None:
        self._backend = backend
        self._settings = settings or QuerySettings()

    def validate(self, request: SearchRequest) -> None:
        """Reject request shapes the remote service would refuse."""

        if request.page < 1:
            raise SearchValidationError(
                f"Page must be at least 1, got {request.page}.",
                context={"field": "page", "value": request.page},
            )
        if not 1 <= request.page_size <= self._settings.max_page_size:
            raise SearchValidationError(
                f"Page size must be between 1 and {self._settings.max_page_size}, "
                f"got {request.page_size}.",
                context={"field": "page_size", "value": request.page_size},
            )
        if len(request.query) > self._settings.max_query_length:
            raise SearchValidationError(
                f"Query exceeds {self._settings.max_query_length} characters.",
                context={"field": "query", "length": len(request.query)},
            )

    async def execute(self, request: SearchRequest, *, sequence: int | None = None) -> SearchOutcome:
        self.validate(request)
        started = time.perf_counter()
        outcome = await self._backend.search(request)
        logger.info(
            "search_executed",
            sequence=sequence,
            query=request.query,
            page=request.page,
            result_count=len(outcome.results),
            elapsed_ms=elapsed_ms(started),
        )
        return outcome


__all__ = ["SearchExecutionChannel"]
