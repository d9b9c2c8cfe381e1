"""Command-line entrypoint: run one search against the configured service."""

from __future__ import annotations

import argparse
import asyncio
import json
from typing import Sequence

import httpx

from reelsearch.config import get_settings
from reelsearch.logging import configure_logging, logger
from reelsearch.search.controller import SearchController
from reelsearch.services.search_api import HttpSearchClient


def _filter_pair(raw: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"filter must look like facet=value, got {raw!r}")
    return key.strip(), value.strip()


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {raw!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return value


def _group_filters(pairs: Sequence[tuple[str, str]]) -> dict[str, list[str]]:
    filters: dict[str, list[str]] = {}
    for key, value in pairs:
        filters.setdefault(key, []).append(value)
    return filters


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search the training reel library")
    parser.add_argument("query", nargs="?", default="")
    parser.add_argument(
        "--filter", type=_filter_pair, action="append", default=[], help="facet=value, repeatable"
    )
    parser.add_argument("--sort", default="relevance", choices=["relevance", "created_at", "view_count", "title"])
    parser.add_argument("--order", default="DESC", choices=["ASC", "DESC"])
    parser.add_argument("--page", type=_positive_int, default=1)
    parser.add_argument("--page-size", type=_positive_int, default=None)
    parser.add_argument("--suggest", action="store_true", help="print suggestions instead of results")
    return parser


async def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    async with httpx.AsyncClient() as http_client:
        backend = HttpSearchClient(http_client, settings.api)
        async with SearchController(backend, settings) as controller:
            controller.set_query(args.query)
            if args.suggest:
                suggestions = await controller.fetch_suggestions(args.query)
                print(json.dumps([item.model_dump() for item in suggestions], indent=2))
                return 0

            controller.set_filters(_group_filters(args.filter))
            controller.set_sort(args.sort, args.order)
            if args.page_size is not None:
                controller.set_page_size(args.page_size)
            controller.set_page(args.page)
            state = await controller.submit_search()

    if state.error is not None:
        logger.error("search_cli_failed", kind=state.error.kind, error=state.error.message)
        return 1
    print(json.dumps(state.outcome.model_dump(mode="json"), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
