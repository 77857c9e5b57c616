"""Tests for path template resolution and .NET-style date formatting."""

import os
from datetime import datetime, timedelta, timezone

import pytest

from logcapture.models import LogRecord, LogType
from logcapture.path_resolver import (
    ensure_json_extension,
    format_dotnet_datetime,
    resolve_json_file_path,
    substitute_datetime,
)

FIXED_NOW = datetime(2024, 3, 5, 14, 7, 9, 123456, tzinfo=timezone(timedelta(hours=7)))


def _fixed_time():
    return FIXED_NOW


def _record(log_type=LogType.Error, override=None) -> LogRecord:
    return LogRecord(message="boom", type=log_type, json_file_path=override)


@pytest.fixture(autouse=True)
def _chdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)


class TestFormatDotnetDatetime:
    @pytest.mark.parametrize("fmt, expected", [
        ("yyyy-MM-dd", "2024-03-05"),
        ("yy", "24"),
        ("MM-dd", "03-05"),
        ("M/d", "3/5"),
        ("MMM", "Mar"),
        ("MMMM", "March"),
        ("ddd", "Tue"),
        ("dddd", "Tuesday"),
        ("HH:mm:ss", "14:07:09"),
        ("h:m:s.ff tt", "2:7:9.12 PM"),
        ("fff", "123"),
        ("zzz", "+07:00"),
        ("yyyy'y'MM", "2024y03"),
        ("%d", "5"),
    ])
    def test_formats(self, fmt, expected):
        assert format_dotnet_datetime(FIXED_NOW, fmt) == expected

    def test_midnight_is_twelve_am(self):
        midnight = FIXED_NOW.replace(hour=0)
        assert format_dotnet_datetime(midnight, "hh tt") == "12 AM"

    @pytest.mark.parametrize("fmt, expected", [
        ("d", "03/05/2024"),
        ("M", "March 05"),
        ("T", "14:07:09"),
        ("s", "2024-03-05T14:07:09"),
        ("u", "2024-03-05 07:07:09Z"),
        ("%M", "3"),
    ])
    def test_single_letter_is_standard_format(self, fmt, expected):
        assert format_dotnet_datetime(FIXED_NOW, fmt) == expected


class TestSubstitution:
    def test_multiple_date_tokens(self):
        assert substitute_datetime("Logs/{yyyy}/{MM-dd}", FIXED_NOW) == "Logs/2024/03-05"

    def test_unmatched_open_brace_is_left_alone(self):
        assert substitute_datetime("Logs/{yyyy.json", FIXED_NOW) == "Logs/{yyyy.json"

    def test_close_before_open_is_left_alone(self):
        assert substitute_datetime("Logs/}yyyy{.json", FIXED_NOW) == "Logs/}yyyy{.json"

    def test_no_tokens(self):
        assert substitute_datetime("Logs/app.json", FIXED_NOW) == "Logs/app.json"

    def test_standard_short_date_splits_folders(self):
        assert substitute_datetime("Logs/{d}", FIXED_NOW) == "Logs/03/05/2024"


class TestEnsureJsonExtension:
    def test_txt_is_rewritten(self):
        assert ensure_json_extension("/a/b/log.txt") == "/a/b/log.json"

    def test_missing_extension_is_added(self):
        assert ensure_json_extension("/a/b/log") == "/a/b/log.json"

    def test_json_kept(self):
        assert ensure_json_extension("/a/b/log.JSON") == "/a/b/log.JSON"


class TestResolveJsonFilePath:
    def test_type_and_date_tokens(self):
        path = resolve_json_file_path("Logs/{Type}/{yyyy}/{MM-dd}.json", _record(), _fixed_time)

        assert path == os.path.join(os.getcwd(), "Logs", "Error", "2024", "03-05.json")
        assert os.path.isdir(os.path.dirname(path))

    def test_extension_coerced(self):
        path = resolve_json_file_path("Logs/{yyyy-MM-dd}.txt", _record(), _fixed_time)
        assert path == os.path.join(os.getcwd(), "Logs", "2024-03-05.json")

    def test_malformed_template_unchanged(self):
        path = resolve_json_file_path("Logs/{yyyy.json", _record(), _fixed_time)
        assert path == os.path.join(os.getcwd(), "Logs", "{yyyy.json")

    def test_override_path_wins(self):
        record = _record(LogType.Info, override="Audit/{Type}.json")
        path = resolve_json_file_path("Logs/{yyyy-MM-dd}.json", record, _fixed_time)
        assert path == os.path.join(os.getcwd(), "Audit", "Info.json")

    def test_blank_override_ignored(self):
        record = _record(override="   ")
        path = resolve_json_file_path("Logs/{yyyy-MM-dd}.json", record, _fixed_time)
        assert path == os.path.join(os.getcwd(), "Logs", "2024-03-05.json")

    def test_backslashes_normalized(self):
        path = resolve_json_file_path("Logs\\{Type}\\app.json", _record(LogType.Fatal), _fixed_time)
        assert path == os.path.join(os.getcwd(), "Logs", "Fatal", "app.json")

    def test_absolute_template(self, tmp_path):
        template = os.path.join(str(tmp_path), "abs", "{yyyy}.json")
        path = resolve_json_file_path(template, _record(), _fixed_time)
        assert path == os.path.join(str(tmp_path), "abs", "2024.json")
