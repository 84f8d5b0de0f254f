"""
Error types shared by the fetch, storage and extraction layers.

Every failure that should reach the user is a ScheduleError.
The CLI catches this base class, prints the message and exits with code 1.
"""

from __future__ import annotations


class ScheduleError(Exception):
    """Base class for all user-facing errors."""

    default_message = "Something went wrong while loading the schedule."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidSource(ScheduleError):
    default_message = "Unable to use the given calendar source. Make sure the URL ends with the feed identifier."


class CacheUnavailable(ScheduleError):
    default_message = "Error accessing the cache directory / file. Check your permissions."


class NetworkError(ScheduleError):
    default_message = "Couldn't fetch the calendar data. Please check the URL and your network connection."


class FormatError(ScheduleError):
    default_message = "Unable to read the calendar data."
