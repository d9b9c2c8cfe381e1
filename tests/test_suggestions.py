"""Suggestion channel behaviour."""

from __future__ import annotations

import asyncio

import pytest

from reelsearch.config import CacheSettings, SuggestionSettings
from reelsearch.search.suggestions import SuggestionChannel


@pytest.mark.asyncio
async def test_short_text_skips_remote(backend):
    channel = SuggestionChannel(backend, SuggestionSettings())

    outcome = await channel.fetch("d")

    assert outcome.query == "d"
    assert outcome.suggestions == ()
    assert backend.suggest_calls == []


@pytest.mark.asyncio
async def test_fetch_tags_outcome_and_requests_all_types(backend):
    requests = []
    original = backend.suggest

    async def spy(request):
        requests.append(request)
        return await original(request)

    backend.suggest = spy
    channel = SuggestionChannel(backend, SuggestionSettings(limit=5))

    outcome = await channel.fetch("drill")

    assert outcome.query == "drill"
    assert [item.suggestion_value for item in outcome.suggestions] == ["drill bit", "drill basics"]
    assert requests[0].limit == 5
    assert set(requests[0].types) == {"tag", "machine_model", "process_type", "tooling", "author", "title"}


@pytest.mark.asyncio
async def test_failures_are_swallowed(backend):
    backend.suggest_error = RuntimeError("index offline")
    channel = SuggestionChannel(backend, SuggestionSettings())

    assert await channel.fetch("drill") is None


@pytest.mark.asyncio
async def test_outcomes_cached_per_text(backend):
    channel = SuggestionChannel(backend, SuggestionSettings(), CacheSettings(enabled=True))

    await channel.fetch("drill")
    await channel.fetch("drill")
    channel.clear_cache()
    await channel.fetch("drill")

    assert backend.suggest_calls == ["drill", "drill"]


@pytest.mark.asyncio
async def test_schedule_debounces_to_last_text(backend):
    channel = SuggestionChannel(
        backend, SuggestionSettings(debounce_seconds=0.02), CacheSettings(enabled=False)
    )
    received = []

    channel.schedule("dr", lambda text, outcome: received.append(outcome))
    channel.schedule("dri", lambda text, outcome: received.append(outcome))
    last = channel.schedule("drill", lambda text, outcome: received.append(outcome))
    await last

    assert backend.suggest_calls == ["drill"]
    assert [outcome.query for outcome in received] == ["drill"]


@pytest.mark.asyncio
async def test_cancel_drops_pending_timer(backend):
    channel = SuggestionChannel(backend, SuggestionSettings(debounce_seconds=0.02))
    received = []

    task = channel.schedule("drill", lambda text, outcome: received.append(outcome))
    channel.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert received == []
    assert backend.suggest_calls == []


@pytest.mark.asyncio
async def test_scheduled_failure_reports_text_without_outcome(backend):
    backend.suggest_error = RuntimeError("index offline")
    channel = SuggestionChannel(backend, SuggestionSettings(debounce_seconds=0.01))
    received = []

    await channel.schedule("drill", lambda text, outcome: received.append((text, outcome)))

    assert received == [("drill", None)]
