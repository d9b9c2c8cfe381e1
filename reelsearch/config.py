"""Runtime configuration based on environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AnyHttpUrl, BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SuggestionType = Literal["tag", "machine_model", "process_type", "tooling", "author", "title"]

ALL_SUGGESTION_TYPES: tuple[SuggestionType, ...] = (
    "tag",
    "machine_model",
    "process_type",
    "tooling",
    "author",
    "title",
)


class ApiSettings(BaseModel):
    base_url: AnyHttpUrl = Field(
        default="http://localhost:8000/api/",
        description="Root URL of the remote search service.",
    )
    api_key: SecretStr | None = None
    request_timeout_seconds: float = Field(default=10, gt=0, le=120)


class QuerySettings(BaseModel):
    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=100, ge=1, le=1000)
    max_query_length: int = Field(default=200, ge=1)

    @model_validator(mode="after")
    def _default_within_max(self) -> "QuerySettings":
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size must not exceed max_page_size")
        return self


class SuggestionSettings(BaseModel):
    min_query_length: int = Field(default=2, ge=1)
    debounce_seconds: float = Field(default=0.3, ge=0)
    limit: int = Field(default=10, ge=1, le=50)
    types: tuple[SuggestionType, ...] = ALL_SUGGESTION_TYPES

    @field_validator("types", mode="before")
    @classmethod
    def _split_csv(cls, value):
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        return value


class CacheSettings(BaseModel):
    enabled: bool = True
    search_ttl_seconds: int = Field(default=300, ge=1)
    suggestion_ttl_seconds: int = Field(default=300, ge=1)
    max_entries: int = Field(default=256, ge=1)


class SearchSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REELSEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: Literal["dev", "staging", "prod"] = "dev"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    api: ApiSettings = Field(default_factory=ApiSettings)
    query: QuerySettings = Field(default_factory=QuerySettings)
    suggestions: SuggestionSettings = Field(default_factory=SuggestionSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)


@lru_cache
def get_settings() -> SearchSettings:
    """Return cached settings instance."""

    return SearchSettings()


__all__ = [
    "ALL_SUGGESTION_TYPES",
    "ApiSettings",
    "CacheSettings",
    "QuerySettings",
    "SearchSettings",
    "SuggestionSettings",
    "SuggestionType",
    "get_settings",
]
