"""
Feed fetching with a local cache.

fetch_calendar() decides between the cached copy and the network:

    MISSING  -> fetch, store, return (network errors are fatal)
    STALE    -> fetch, store, return; on network failure use the stale copy
    FRESH    -> return the cached copy without touching the network

A cache file counts as stale once it is older than STALE_AFTER.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Optional

import requests

from schoolday.errors import NetworkError
from schoolday.model import FetchResult, FreshnessState, utc_now
from schoolday.storage import CacheStore, cache_key

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

STALE_AFTER = timedelta(minutes=15)
DEFAULT_TIMEOUT = 10.0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def freshness(store: CacheStore, key: str, now: datetime) -> FreshnessState:
    """
    Classify the cache entry for `key` relative to `now`.
    """
    if not store.exists(key):
        return FreshnessState.MISSING
    age = now - store.last_modified(key)
    if age > STALE_AFTER:
        return FreshnessState.STALE
    return FreshnessState.FRESH


def _download(url: str, timeout: float, session: Any = None) -> str:
    """
    GET the feed and return its text.

    Any transport problem, timeout or non-2xx status becomes NetworkError.
    """
    getter = session.get if session is not None else requests.get
    logger.debug("GET %s (timeout %ss)", url, timeout)
    try:
        resp = getter(url, timeout=timeout)
        resp.raise_for_status()
        # iCalendar defaults to UTF-8; requests would assume ISO-8859-1 for text/*
        if "charset" not in resp.headers.get("Content-Type", "").lower():
            resp.encoding = "utf-8"
        return resp.text
    except requests.exceptions.Timeout as err:
        raise NetworkError(f"Timed out after {timeout}s while fetching the calendar.") from err
    except requests.exceptions.RequestException as err:
        raise NetworkError() from err


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def fetch_calendar(
    url: str,
    cache_dir: str | Path | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    session: Any = None,
    now: Optional[Callable[[], datetime]] = None,
) -> FetchResult:
    """
    Return the best available calendar text for `url`.

    Args:
        url: feed URL; its last path segment names the cache file
        cache_dir: override for the cache directory (default: per-user cache)
        timeout: seconds to wait for the server
        session: object with a requests-compatible `get` (default: requests)
        now: clock returning an aware UTC datetime (default: current time)

    Returns:
        FetchResult(content, from_cache)
    """
    key = cache_key(url)

    store = CacheStore(cache_dir)
    store.ensure_directory()

    clock = now or utc_now
    state = freshness(store, key, clock())
    logger.debug("Cache %s is %s", store.path_for(key), state.value)

    if state is FreshnessState.FRESH:
        return FetchResult(store.read(key), True)

    try:
        text = _download(url, timeout, session)
    except NetworkError as err:
        if state is FreshnessState.MISSING:
            raise
        # stale data beats no data
        logger.warning("Fetching %s failed (%s); using cached copy %s", url, err, store.path_for(key))
        return FetchResult(store.read(key), True)

    store.write(key, text)
    logger.info("Fetched %s (%d characters)", url, len(text))
    return FetchResult(text, False)
