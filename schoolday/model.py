"""
Central data model definitions used across the project.

This module defines the canonical structure of the objects passed between
the fetch, extraction and presentation layers:
- Lesson: one parsed schedule entry for today
- LessonSet: the result of one extraction run
- FreshnessState: how trustworthy the cached feed is right now
- FetchResult: raw calendar text plus where it came from
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, NamedTuple, Optional, Tuple


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Lesson:
    """
    Represents one lesson of today's schedule.

    start_time and end_time are timezone-aware UTC datetimes.
    The status helpers accept an optional `now` so callers (and tests)
    can evaluate them against a frozen clock.
    """

    subject: str
    classroom: str
    teacher: str
    start_time: datetime
    end_time: datetime

    def started(self, now: Optional[datetime] = None) -> bool:
        now = now or utc_now()
        return now > self.start_time

    def finished(self, now: Optional[datetime] = None) -> bool:
        now = now or utc_now()
        return now > self.end_time

    def active(self, now: Optional[datetime] = None) -> bool:
        # inclusive on both ends, unlike started/finished
        now = now or utc_now()
        return self.start_time <= now <= self.end_time


@dataclass(frozen=True)
class LessonSet:
    """
    Today's lessons in the order they appear in the calendar.

    `dropped` counts the events that were looked at but did not produce a
    lesson (wrong day, missing times, title not in the expected format).
    """

    date: datetime
    lessons: Tuple[Lesson, ...] = ()
    dropped: int = 0

    def __iter__(self) -> Iterator[Lesson]:
        return iter(self.lessons)

    def __len__(self) -> int:
        return len(self.lessons)


class FreshnessState(enum.Enum):
    FRESH = "fresh"
    STALE = "stale"
    MISSING = "missing"


class FetchResult(NamedTuple):
    content: str
    from_cache: bool
