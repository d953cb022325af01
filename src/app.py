"""Application entry point for the threadwatch command line."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint

import settings
from adapters.hn_api import HackerNewsClient
from adapters.http_fetcher import HttpPageFetcher
from adapters.text_formatting import sanitize_and_format_title
from adapters.tree_rendering import (
    render_active_json,
    render_active_text,
    render_tree_json,
    render_tree_text,
)
from client import build_client
from core.activity_service import ActivityService
from core.clock import SystemClock
from core.durations import parse_duration
from core.errors import ThreadwatchError
from core.front_page import FrontPageTimeResolver
from core.models import Item
from core.ttl_cache import TTLCache, default_text_ttl

NAME = "THREADWATCH"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        # stderr keeps stdout clean for --json output.
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/threadwatch.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        file_handler = RotatingFileHandler(
            path,
            maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
            backupCount=int(file_cfg.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def _run(args: argparse.Namespace) -> str:
    clock = SystemClock()
    item_http = build_client(settings.ITEM_SOURCE.timeout_seconds)
    page_http = build_client(settings.FRONT_PAGE.timeout_seconds)
    try:
        text_cache: TTLCache[Item, str] = TTLCache(
            clock,
            default_text_ttl,
            sweep_interval=settings.TEXT_CACHE.sweep_interval_seconds,
        )
        service = ActivityService(
            source=HackerNewsClient(item_http, settings.ITEM_SOURCE),
            resolver=FrontPageTimeResolver(HttpPageFetcher(page_http), clock, settings.FRONT_PAGE),
            text_cache=text_cache,
            formatter=sanitize_and_format_title,
            clock=clock,
            activity_config=settings.ACTIVITY,
            source_config=settings.ITEM_SOURCE,
        )

        if args.command == "tree":
            rows = await service.tree(args.id, show_user=not args.hide_users)
            return render_tree_json(rows) if args.json else render_tree_text(rows)

        result = await service.active(
            window=parse_duration(args.window) if args.window else None,
            max_age=parse_duration(args.max_age) if args.max_age else None,
            min_by=args.min_by,
            show_user=not args.hide_users,
        )
        return render_active_json(result) if args.json else render_active_text(result)
    finally:
        await item_http.aclose()
        await page_http.aclose()


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--json", action="store_true", help="Print rows as JSON")
    common.add_argument("--hide-users", action="store_true", help="Leave author names out")

    parser = argparse.ArgumentParser(prog="threadwatch")
    subparsers = parser.add_subparsers(dest="command")

    active = subparsers.add_parser("active", parents=[common], help="Show threads with recent activity")
    active.add_argument("--window", help="Activity window, e.g. 1h or 30m")
    active.add_argument("--max-age", dest="max_age", help="Oldest thread to show, e.g. 24h")
    active.add_argument("--min-by", dest="min_by", type=int, help="Minimum distinct active authors")

    tree = subparsers.add_parser("tree", parents=[common], help="Show the full reply tree of one item")
    tree.add_argument("id", type=int, help="Item id")
    return parser


_COMMANDS = {"active", "tree", "-h", "--help"}


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    argv = list(sys.argv[1:] if argv is None else argv)
    # Bare options belong to the default command.
    if not argv or argv[0] not in _COMMANDS:
        argv.insert(0, "active")
    return _build_parser().parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    args = _parse_args(argv)

    if not args.json:
        _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    try:
        output = asyncio.run(_run(args))
    except ThreadwatchError as e:
        logger.error("Request failed: %s", e)
        raise SystemExit(1) from e

    print(output)


if __name__ == "__main__":
    main()
