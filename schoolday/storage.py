"""
Local cache storage for downloaded calendar feeds.

One file per feed is kept in the cache directory:

    <cache dir>/<cache key>.ics

where the cache key is the last path segment of the feed URL.
Only the most recent copy is kept; every successful fetch overwrites it.

Every filesystem failure is reported as CacheUnavailable so the fetch
layer only has to deal with one error type for the cache.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from schoolday.errors import CacheUnavailable, InvalidSource

logger = logging.getLogger(__name__)

APP_NAME = "schoolday"
CACHE_DIR_ENV = "SCHOOLDAY_CACHE_DIR"
CACHE_SUFFIX = ".ics"


def cache_key(url: str) -> str:
    """
    Derive the cache key from a feed URL: the text after the last '/'.

    Raises InvalidSource if the URL has no '/' or ends with one.
    """
    if "/" not in url:
        raise InvalidSource(f"Unable to derive a cache key from {url!r}: no '/' in the URL.")
    key = url.rsplit("/", 1)[-1]
    if not key:
        raise InvalidSource(f"Unable to derive a cache key from {url!r}: the URL ends with '/'.")
    return key


def default_cache_dir() -> Path:
    """
    Return the application cache directory.

    Lookup order:
    1. $SCHOOLDAY_CACHE_DIR
    2. $XDG_CACHE_HOME/schoolday
    3. ~/.cache/schoolday
    """
    env_cache_dir = os.environ.get(CACHE_DIR_ENV)
    if env_cache_dir:
        return Path(os.path.expanduser(env_cache_dir))

    xdg_cache_home = os.environ.get("XDG_CACHE_HOME")
    if xdg_cache_home:
        return Path(os.path.expanduser(xdg_cache_home)) / APP_NAME

    try:
        home = Path.home()
    except RuntimeError as err:
        raise CacheUnavailable("Unable to locate the local cache directory. You might be on an unsupported system.") from err
    return home / ".cache" / APP_NAME


class CacheStore:
    """
    Thin wrapper around the cache directory.

    Using an object with an explicit directory (instead of a module constant)
    makes testing easier, because tests can point it at a temporary folder.
    """

    def __init__(self, directory: str | Path | None = None) -> None:
        self.directory = Path(directory) if directory is not None else default_cache_dir()

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}{CACHE_SUFFIX}"

    def ensure_directory(self) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise CacheUnavailable(f"Unable to create the cache directory {self.directory}.") from err

    def exists(self, key: str) -> bool:
        path = self.path_for(key)
        try:
            path.stat()
        except FileNotFoundError:
            return False
        except OSError as err:
            raise CacheUnavailable(f"Unable to access the cache file {path}.") from err
        return True

    def last_modified(self, key: str) -> datetime:
        """Return the mtime of the cache file as an aware UTC datetime."""
        path = self.path_for(key)
        try:
            mtime = path.stat().st_mtime
        except OSError as err:
            raise CacheUnavailable(f"Unable to access the cache file {path}.") from err
        return datetime.fromtimestamp(mtime, tz=timezone.utc)

    def read(self, key: str) -> str:
        path = self.path_for(key)
        try:
            # newline="" keeps the CRLF line endings of the feed untouched
            with path.open("r", encoding="utf-8", newline="") as fh:
                return fh.read()
        except (OSError, UnicodeDecodeError) as err:
            raise CacheUnavailable(f"Unable to read the cache file {path}.") from err

    def write(self, key: str, content: str) -> None:
        path = self.path_for(key)
        try:
            with path.open("w", encoding="utf-8", newline="") as fh:
                fh.write(content)
        except OSError as err:
            raise CacheUnavailable(f"Unable to write the cache file {path}.") from err
        logger.debug("Cached %d characters in %s", len(content), path)
