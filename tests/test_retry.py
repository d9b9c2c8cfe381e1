from __future__ import annotations

import pytest

from reelsearch.utils.retry import retry_async


@pytest.fixture
def delays(monkeypatch):
    recorded = []

    async def _record(delay):
        recorded.append(delay)

    monkeypatch.setattr("reelsearch.utils.retry.asyncio.sleep", _record)
    return recorded


@pytest.mark.asyncio
async def test_retry_uses_linear_backoff(delays):
    attempts = {"count": 0}

    async def flaky():
        attempts["count"] += 1
        if attempts["count"] < 3:
            raise ConnectionError("boom")
        return "ok"

    assert await retry_async(flaky, base_delay=0.5) == "ok"
    assert delays == [0.5, 1.0]


@pytest.mark.asyncio
async def test_non_matching_errors_are_not_retried(delays):
    attempts = {"count": 0}

    async def broken():
        attempts["count"] += 1
        raise ValueError("bad input")

    with pytest.raises(ValueError):
        await retry_async(broken, retry_on=(ConnectionError,))

    assert attempts["count"] == 1
    assert delays == []
