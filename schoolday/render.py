"""
Terminal output for today's lessons.

Plain mode prints one line per lesson:

    ---- 🌐 9:05 - 18.10.2026 ----
    Mathematics in 204 - ⏳ 25m
    Biology in 112 - 🚀 2h

Table mode renders the same data as a rich table with the teacher and
the lesson times added.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from schoolday.model import Lesson, LessonSet, utc_now

CACHED_ICON = "💾"
ONLINE_ICON = "🌐"
FINISHED_ICON = "✅"
RUNNING_ICON = "⏳"
UPCOMING_ICON = "🚀"


def header(lessons: LessonSet, from_cache: bool) -> str:
    icon = CACHED_ICON if from_cache else ONLINE_ICON
    d = lessons.date.astimezone(timezone.utc)
    return f"---- {icon} {d.hour}:{d.minute:02d} - {d.day}.{d.month}.{d.year} ----"


def time_left(lesson: Lesson, now: Optional[datetime] = None) -> str:
    """
    Status text for one lesson: done, time until it ends, or time until it starts.

    Under 90 minutes the value is shown in minutes, otherwise in whole hours.
    """
    now = now or utc_now()
    if lesson.finished(now):
        return FINISHED_ICON

    if lesson.started(now):
        target, prefix = lesson.end_time, RUNNING_ICON
    else:
        target, prefix = lesson.start_time, UPCOMING_ICON

    minutes = int((target - now).total_seconds() // 60)
    if minutes < 90:
        return f"{prefix} {minutes}m"
    return f"{prefix} {minutes // 60}h"


def render_lines(lessons: LessonSet, from_cache: bool, now: Optional[datetime] = None) -> List[str]:
    """
    Build the plain output lines (header first).
    """
    now = now or utc_now()
    lines = [header(lessons, from_cache)]
    if not lessons.lessons:
        lines.append("No lessons today.")
        return lines

    for lesson in lessons.lessons:
        lines.append(f"{lesson.subject} in {lesson.classroom} - {time_left(lesson, now)}")
    return lines


def render_table(lessons: LessonSet, from_cache: bool, now: Optional[datetime] = None) -> Table:
    now = now or utc_now()
    table = Table(title=header(lessons, from_cache), box=box.SIMPLE)
    table.add_column("Subject")
    table.add_column("Room")
    table.add_column("Teacher")
    table.add_column("Time")
    table.add_column("Status", justify="right")

    for lesson in lessons.lessons:
        subject = escape(lesson.subject)
        if lesson.active(now):
            subject = f"[bold green]{subject}[/]"
        elif lesson.finished(now):
            subject = f"[dim]{subject}[/]"
        table.add_row(
            subject,
            escape(lesson.classroom),
            escape(lesson.teacher),
            f"{lesson.start_time:%H:%M}-{lesson.end_time:%H:%M}",
            time_left(lesson, now),
        )
    return table


def print_lessons(
    lessons: LessonSet,
    from_cache: bool,
    as_table: bool = False,
    console: Optional[Console] = None,
) -> None:
    """
    Print today's lessons to the terminal.
    """
    console = console or Console()
    now = utc_now()
    if as_table:
        console.print(render_table(lessons, from_cache, now))
        if not lessons.lessons:
            console.print("No lessons today.")
        return

    for line in render_lines(lessons, from_cache, now):
        console.print(line, markup=False, highlight=False)
