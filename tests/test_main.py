"""Tests for logging configuration and the command-line entrypoint."""

from __future__ import annotations

import argparse
import json

import httpx
import pytest
import structlog
from structlog.testing import capture_logs

from reelsearch import main as main_module
from reelsearch.config import SearchSettings
from reelsearch.logging import configure_logging


def test_configure_logging_outputs_json(capsys):
    configure_logging("INFO")
    try:
        logger = structlog.get_logger()
        logger.info("unit-test", foo="bar")
        logger.debug("filtered-out")
        out = capsys.readouterr().out
    finally:
        structlog.reset_defaults()
    assert "unit-test" in out
    assert "foo" in out
    assert "filtered-out" not in out


@pytest.fixture
def patched_runtime(monkeypatch):
    requests: list[dict] = []
    responses: dict[str, httpx.Response] = {}

    async def handler(request: httpx.Request) -> httpx.Response:
        requests.append({"path": request.url.path, "body": json.loads(request.content or b"{}")})
        return responses[request.url.path]

    real_client = httpx.AsyncClient
    monkeypatch.setattr(
        main_module.httpx,
        "AsyncClient",
        lambda: real_client(transport=httpx.MockTransport(handler)),
    )
    monkeypatch.setattr(main_module, "get_settings", lambda: SearchSettings())
    monkeypatch.setattr(main_module, "configure_logging", lambda level: None)
    with capture_logs() as logs:
        yield requests, responses, logs


@pytest.mark.asyncio
async def test_main_prints_search_outcome(patched_runtime, capsys):
    requests, responses, _ = patched_runtime
    responses["/api/search"] = httpx.Response(
        200,
        json={"results": [{"video_id": "v1", "title": "Drill basics"}], "pagination": {"page": 2, "limit": 5, "total": 6}},
    )

    code = await main_module.main(
        ["drill", "--filter", "tags=edm", "--filter", "tags=reel", "--page", "2", "--page-size", "5"]
    )

    assert code == 0
    body = requests[0]["body"]
    assert body["query"] == "drill"
    assert body["filters"] == {"tags": ["edm", "reel"]}
    assert body["page"] == 2
    assert body["limit"] == 5
    printed = json.loads(capsys.readouterr().out)
    assert printed["results"][0]["video_id"] == "v1"
    assert printed["pagination"]["total_pages"] == 2
    assert printed["pagination"]["has_next"] is False
    assert printed["pagination"]["has_prev"] is True


@pytest.mark.asyncio
async def test_main_reports_failures(patched_runtime):
    _, responses, logs = patched_runtime
    responses["/api/search"] = httpx.Response(503, text="maintenance")

    assert await main_module.main(["drill"]) == 1
    failure = next(entry for entry in logs if entry["event"] == "search_cli_failed")
    assert failure["kind"] == "network"


@pytest.mark.asyncio
async def test_main_prints_suggestions(patched_runtime, capsys):
    requests, responses, _ = patched_runtime
    responses["/api/suggestions"] = httpx.Response(
        200, json={"suggestions": [{"suggestion_type": "tag", "suggestion_value": "drill bit"}]}
    )

    assert await main_module.main(["dri", "--suggest"]) == 0
    assert requests[0]["path"] == "/api/suggestions"
    printed = json.loads(capsys.readouterr().out)
    assert printed[0]["suggestion_value"] == "drill bit"


def test_filter_pair_rejects_malformed_values():
    with pytest.raises(argparse.ArgumentTypeError):
        main_module._filter_pair("tags")


@pytest.mark.parametrize(
    "argv",
    [
        ["drill", "--filter", "tags"],
        ["drill", "--filter", "=edm"],
        ["drill", "--page", "0"],
        ["drill", "--page-size", "many"],
    ],
)
@pytest.mark.asyncio
async def test_bad_arguments_exit_with_usage_error(patched_runtime, capsys, argv):
    requests, _, _ = patched_runtime

    with pytest.raises(SystemExit) as excinfo:
        await main_module.main(argv)

    assert excinfo.value.code == 2
    assert "error:" in capsys.readouterr().err
    assert requests == []
