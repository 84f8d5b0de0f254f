"""
Extraction (iCalendar text -> today's lessons).

- Parses the feed with `icalendar`
- Looks at every VEVENT in document order
- Keeps only events that end today (UTC) and whose title follows the
  school's naming convention:

      "<classroom> - <course code>.<subject> - <teacher>"

Important rules:
- A bad event is skipped, never an error. Only a document that is not a
  calendar at all raises FormatError.
- Zoned and floating times are read as UTC without conversion.
- Output order = calendar order (no sorting).
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Optional, Tuple

from icalendar import Calendar

from schoolday.errors import FormatError, InvalidSource
from schoolday.model import Lesson, LessonSet, utc_now

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def to_utc(prop: Any) -> Optional[datetime]:
    """
    Turn a DTSTART/DTEND property into an aware UTC datetime.

    Returns None for missing values and for anything that is not a
    date-time (all-day dates, periods, unparsable values).
    """
    try:
        value = getattr(prop, "dt", None)
    except ValueError:
        # newer icalendar raises on .dt of a property it could not parse
        return None
    if not isinstance(value, datetime):
        return None

    params = getattr(prop, "params", None) or {}
    if value.tzinfo is None or "TZID" in params:
        # floating, or named zone: keep the wall clock, call it UTC
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_title(summary: str) -> Optional[Tuple[str, str, str]]:
    """
    Split an event title into (classroom, subject, teacher).

    The title is split on '-' into at most three parts. Anything after the
    second '-' belongs to the teacher, so hyphenated names survive.
    The subject drops its course code prefix ("10A.Mathematics" -> "Mathematics").

    Returns None if the title has fewer than three parts.
    """
    parts = [p.strip() for p in summary.split("-", 2)]
    if len(parts) < 3:
        return None

    classroom, subject, teacher = parts
    subject = subject.split(".", 1)[-1]
    return classroom, subject, teacher


def event_to_lesson(event: Any, today: date) -> Optional[Lesson]:
    """
    Convert one VEVENT into a Lesson, or return None if it doesn't qualify.
    """
    start = to_utc(event.get("DTSTART"))
    end = to_utc(event.get("DTEND"))
    if start is None or end is None:
        return None

    # only the end day decides whether a lesson belongs to today
    if end.date() != today:
        return None

    summary = event.get("SUMMARY")
    if summary is None:
        return None

    fields = parse_title(str(summary))
    if fields is None:
        return None

    classroom, subject, teacher = fields
    return Lesson(
        subject=subject,
        classroom=classroom,
        teacher=teacher,
        start_time=start,
        end_time=end,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_calendar(calendar_text: str) -> Calendar:
    """
    Parse raw feed text. Raises FormatError if it is not a VCALENDAR document.
    """
    try:
        cal = Calendar.from_ical(calendar_text)
    except (ValueError, IndexError, KeyError) as err:
        raise FormatError(f"Error parsing calendar: {err}") from err

    if not isinstance(cal, Calendar) or cal.name != "VCALENDAR":
        raise FormatError("Error parsing calendar: the document is not a VCALENDAR.")
    return cal


def extract_lessons(calendar_text: str, now: Optional[datetime] = None) -> LessonSet:
    """
    Build today's LessonSet from raw calendar text.

    Args:
        calendar_text: the iCalendar document
        now: extraction time (aware datetime); defaults to the current UTC time

    Returns:
        LessonSet with the lessons in calendar order and the number of
        skipped events.
    """
    cal = parse_calendar(calendar_text)

    captured = (now or utc_now()).astimezone(timezone.utc)
    today = captured.date()

    lessons: list[Lesson] = []
    dropped = 0
    for event in cal.walk("VEVENT"):
        lesson = event_to_lesson(event, today)
        if lesson is None:
            dropped += 1
            continue
        lessons.append(lesson)

    if dropped:
        logger.debug("Skipped %d of %d events (not today or not a lesson)", dropped, dropped + len(lessons))

    return LessonSet(date=captured, lessons=tuple(lessons), dropped=dropped)


def load_lessons(path: str | Path, now: Optional[datetime] = None) -> LessonSet:
    """
    Read a local .ics file and extract today's lessons from it.
    """
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as err:
        raise InvalidSource(f"Unable to read the given file: {p}") from err
    return extract_lessons(text, now=now)
