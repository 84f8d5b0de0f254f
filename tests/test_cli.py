"""
Tests for CLI entry points.

These tests focus on:
- Argument validation (a feed URL is required)
- Exit codes: 0 on success, 1 on schedule errors
- The network layer is patched out, the cache lives in a temporary folder
"""

import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from datetime import datetime, timezone
from pathlib import Path
from unittest import mock

from schoolday.cli import main
from schoolday.errors import NetworkError
from schoolday.model import FetchResult


def _today_calendar() -> str:
    day = datetime.now(timezone.utc).strftime("%Y%m%d")
    return "\r\n".join(
        [
            "BEGIN:VCALENDAR",
            "VERSION:2.0",
            "PRODID:-//schoolday tests//EN",
            "BEGIN:VEVENT",
            "UID:1",
            f"DTSTART:{day}T000000Z",
            f"DTEND:{day}T235900Z",
            "SUMMARY:204 - 10A.Mathematics - J. Doe",
            "END:VEVENT",
            "END:VCALENDAR",
            "",
        ]
    )


class TestCLI(unittest.TestCase):
    def _run(self, argv: list[str]) -> tuple[int, str]:
        out = io.StringIO()
        with redirect_stdout(out):
            with self.assertRaises(SystemExit) as ctx:
                main(argv)
        return ctx.exception.code, out.getvalue()

    def test_today_requires_url(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop("SCHOOLDAY_URL", None)
            code, out = self._run(["today"])
        self.assertNotEqual(code, 0)
        self.assertIn("calendar URL", out)

    def test_today_prints_lessons(self) -> None:
        result = FetchResult(_today_calendar(), False)
        with mock.patch("schoolday.cli.fetch_calendar", return_value=result) as fetch:
            code, out = self._run(["today", "https://example.org/feed/abc", "--timeout", "3"])

        self.assertEqual(code, 0)
        self.assertIn("🌐", out)
        self.assertIn("Mathematics in 204", out)
        fetch.assert_called_once_with("https://example.org/feed/abc", cache_dir=None, timeout=3.0)

    def test_today_uses_url_from_environment(self) -> None:
        result = FetchResult(_today_calendar(), True)
        with mock.patch.dict(os.environ, {"SCHOOLDAY_URL": "https://example.org/feed/env"}):
            with mock.patch("schoolday.cli.fetch_calendar", return_value=result) as fetch:
                code, out = self._run(["today"])

        self.assertEqual(code, 0)
        self.assertIn("💾", out)
        self.assertEqual(fetch.call_args[0][0], "https://example.org/feed/env")

    def test_today_network_error_exits_nonzero(self) -> None:
        with mock.patch("schoolday.cli.fetch_calendar", side_effect=NetworkError()):
            code, out = self._run(["today", "https://example.org/feed/abc"])

        self.assertEqual(code, 1)
        self.assertIn("Couldn't fetch the calendar data", out)

    def test_today_invalid_url_exits_nonzero(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            code, out = self._run(["today", "no-slash-here", "--cache-dir", d])
        self.assertEqual(code, 1)

    def test_file_command(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "schedule.ics"
            p.write_text(_today_calendar(), encoding="utf-8")
            code, out = self._run(["file", str(p)])

        self.assertEqual(code, 0)
        self.assertIn("Mathematics in 204", out)

    def test_file_command_with_broken_file(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "broken.ics"
            p.write_text("garbage", encoding="utf-8")
            code, out = self._run(["file", str(p)])

        self.assertEqual(code, 1)
        self.assertIn("Error parsing calendar", out)

    def test_cache_command_reports_missing(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            code, out = self._run(["cache", "https://example.org/feed/abc", "--cache-dir", d])

        self.assertEqual(code, 0)
        self.assertIn("abc.ics", out)
        self.assertIn("(missing)", out)


if __name__ == "__main__":
    unittest.main()
