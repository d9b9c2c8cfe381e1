"""Domain-specific exceptions."""

from __future__ import annotations

from typing import Any


class SearchServiceError(RuntimeError):
    """Raised when the remote search service fails or rejects a call."""

    kind = "unknown"

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = context or {}


class SearchNetworkError(SearchServiceError):
    kind = "network"


class SearchValidationError(SearchServiceError):
    kind = "validation"


class IndexMaintenanceError(SearchServiceError):
    """Raised to callers of the admin index operations."""
