"""
CLI (Command Line Interface).

Commands:

    schoolday today [URL]        fetch the feed (cached) and show today's lessons
    schoolday file <file.ics>    show today's lessons from a local file
    schoolday cache [URL]        show where the feed is cached and how fresh it is

The feed URL can also be given through the SCHOOLDAY_URL environment
variable, so the usual call is just `schoolday today`.

Errors are printed as a single message and the process exits with code 1.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from rich.console import Console

from schoolday.errors import ScheduleError
from schoolday.extract import extract_lessons, load_lessons
from schoolday.fetch import DEFAULT_TIMEOUT, fetch_calendar, freshness
from schoolday.model import utc_now
from schoolday.render import print_lessons
from schoolday.storage import CacheStore, cache_key

URL_ENV = "SCHOOLDAY_URL"

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _resolve_url(args: argparse.Namespace) -> str:
    """
    Return the feed URL from the command line, or from $SCHOOLDAY_URL.
    """
    url = (args.url or os.environ.get(URL_ENV) or "").strip()
    return url


def _cmd_today(args: argparse.Namespace, console: Console) -> int:
    """
    Fetch the feed (using the cache when possible) and print today's lessons.
    """
    url = _resolve_url(args)
    if not url:
        print(f"Please provide a calendar URL (argument or ${URL_ENV}).")
        return 1

    result = fetch_calendar(url, cache_dir=args.cache_dir, timeout=args.timeout)
    lessons = extract_lessons(result.content)
    print_lessons(lessons, result.from_cache, as_table=args.table, console=console)
    return 0


def _cmd_file(args: argparse.Namespace, console: Console) -> int:
    """
    Print today's lessons from a local .ics file.
    """
    lessons = load_lessons(args.path)
    print_lessons(lessons, True, as_table=args.table, console=console)
    return 0


def _cmd_cache(args: argparse.Namespace, console: Console) -> int:
    """
    Print the cache file used for a feed and its freshness state.
    """
    url = _resolve_url(args)
    if not url:
        print(f"Please provide a calendar URL (argument or ${URL_ENV}).")
        return 1

    key = cache_key(url)
    store = CacheStore(args.cache_dir)
    state = freshness(store, key, utc_now())
    console.print(f"{store.path_for(key)} ({state.value})", markup=False, highlight=False)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="schoolday", description="Today's lessons from an iCalendar feed")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_today = sub.add_parser("today", help="Show today's lessons from a calendar feed")
    p_today.add_argument("url", nargs="?", help=f"Calendar feed URL (default: ${URL_ENV})")
    p_today.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Network timeout in seconds")
    p_today.add_argument("--cache-dir", type=Path, default=None, help="Cache directory override")
    p_today.add_argument("--table", action="store_true", help="Show a table instead of plain lines")

    p_file = sub.add_parser("file", help="Show today's lessons from a local .ics file")
    p_file.add_argument("path", type=Path, help="Path to the .ics file")
    p_file.add_argument("--table", action="store_true", help="Show a table instead of plain lines")

    p_cache = sub.add_parser("cache", help="Show the cache file for a calendar feed")
    p_cache.add_argument("url", nargs="?", help=f"Calendar feed URL (default: ${URL_ENV})")
    p_cache.add_argument("--cache-dir", type=Path, default=None, help="Cache directory override")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    console = Console()
    handlers = {
        "today": _cmd_today,
        "file": _cmd_file,
        "cache": _cmd_cache,
    }
    handler = handlers.get(args.command)
    if handler is None:
        raise SystemExit(2)

    try:
        code = handler(args, console)
    except ScheduleError as err:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(err)
        raise SystemExit(1)

    raise SystemExit(code)
