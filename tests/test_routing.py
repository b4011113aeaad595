"""
Tests for destination routing and date formatting.
"""

from datetime import datetime, timezone

import pytest

from granola_sync.models import DailyNote, DateFolder, FlatFolder
from granola_sync.routing import (
    RoutingMode,
    daily_note_path,
    date_folder,
    date_key,
    format_date,
    join_vault_path,
    parse_timestamp,
    resolve_date,
    route,
)


def fixed_now():
    return datetime(2024, 7, 1, 12, 0, tzinfo=timezone.utc)


def test_daily_note_uses_created_at():
    decision = route(["2024-03-05T10:00:00Z", None], RoutingMode.DAILY_NOTE_MERGE, "YYYY-MM-DD", "")
    assert decision == DailyNote(date_key="2024-03-05")


def test_falls_back_to_updated_at():
    decision = route([None, "2024-04-10T08:30:00Z"], RoutingMode.DAILY_NOTE_MERGE, "YYYY-MM-DD", "")
    assert decision == DailyNote(date_key="2024-04-10")


def test_falls_back_to_now_when_no_timestamp():
    decision = route([None, None], RoutingMode.DAILY_NOTE_MERGE, "YYYY-MM-DD", "", now=fixed_now)
    assert decision == DailyNote(date_key="2024-07-01")


def test_unparseable_timestamp_is_skipped(caplog):
    decision = route(["not a date", "2024-02-29T23:00:00Z"], RoutingMode.DAILY_NOTE_MERGE, "", "", now=fixed_now)
    assert decision == DailyNote(date_key="2024-02-29")
    assert "not a date" in caplog.text


def test_timestamps_are_converted_to_utc():
    decision = route(["2024-03-05T23:30:00-05:00"], RoutingMode.DAILY_NOTE_MERGE, "", "")
    assert decision == DailyNote(date_key="2024-03-06")


def test_flat_mode_ignores_dates():
    decision = route(["2024-03-05T10:00:00Z"], RoutingMode.FLAT, "YYYY/MM/DD", "Granola/")
    assert decision == FlatFolder(path="Granola")


def test_folder_structure_drops_filename_segment():
    decision = route(["2024-03-05T10:00:00Z"], RoutingMode.DAILY_FOLDER_STRUCTURE, "YYYY/MM/DD", "Daily")
    assert decision == DateFolder(path="Daily/2024/03")


def test_folder_structure_without_separator_uses_base_folder():
    decision = route(["2024-03-05T10:00:00Z"], RoutingMode.DAILY_FOLDER_STRUCTURE, "YYYY-MM-DD", "Daily")
    assert decision == DateFolder(path="Daily")


def test_folder_structure_with_month_names():
    decision = route(["2024-03-05T10:00:00Z"], RoutingMode.DAILY_FOLDER_STRUCTURE, "YYYY/MM-MMMM/YYYY-MM-DD", "")
    assert decision == DateFolder(path="2024/03-March")


def test_mode_accepts_setting_value():
    decision = route(["2024-03-05T10:00:00Z"], "daily_folder", "YYYY/MM/DD", "")
    assert decision == DateFolder(path="2024/03")


def test_routing_mode_from_setting():
    assert RoutingMode.from_setting(" Daily_Note ") is RoutingMode.DAILY_NOTE_MERGE
    with pytest.raises(ValueError, match="flat, daily_note, daily_folder"):
        RoutingMode.from_setting("weekly")


def test_resolve_date_prefers_first_candidate():
    resolved = resolve_date(["2024-01-02T03:04:05.123456789Z", "2023-01-01T00:00:00Z"])
    assert resolved == datetime(2024, 1, 2, 3, 4, 5, 123456, tzinfo=timezone.utc)


def test_parse_timestamp_naive_is_utc():
    assert parse_timestamp("2024-03-05T10:00:00") == datetime(2024, 3, 5, 10, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", [None, "", "yesterday", "2024-13-01T00:00:00Z"])
def test_parse_timestamp_rejects_unusable_values(value):
    assert parse_timestamp(value) is None


@pytest.mark.parametrize("pattern, expected", [
    ("YYYY-MM-DD", "2024-03-05"),
    ("YY/M/D", "24/3/5"),
    ("dddd, MMMM Do YYYY", "Tuesday, March 5th 2024"),
    ("ddd MMM DD", "Tue Mar 05"),
    ("HH:mm:ss", "14:07:09"),
    ("h:mm a", "2:07 pm"),
    ("hh A", "02 PM"),
    ("[Week of] YYYY", "Week of 2024"),
    ("[Q]Q YYYY", "Q1 2024"),
    ("DDDD DDD", "065 65"),
    ("dd d E", "Tu 2 2"),
    ("H:m:s", "14:7:9"),
    ("GGGG-[W]WW", "2024-W10"),
    ("w ww", "10 10"),
    ("X", "1709647629"),
    ("x", "1709647629000"),
])
def test_format_date_tokens(pattern, expected):
    value = datetime(2024, 3, 5, 14, 7, 9, tzinfo=timezone.utc)
    assert format_date(value, pattern) == expected


@pytest.mark.parametrize("value, expected", [
    (datetime(2024, 12, 29, tzinfo=timezone.utc), "1"),
    (datetime(2024, 12, 28, tzinfo=timezone.utc), "52"),
    (datetime(2021, 1, 1, tzinfo=timezone.utc), "1"),
    (datetime(2021, 1, 3, tzinfo=timezone.utc), "2"),
])
def test_sunday_first_week_numbers(value, expected):
    assert format_date(value, "w") == expected


@pytest.mark.parametrize("day, suffix", [(1, "1st"), (2, "2nd"), (3, "3rd"), (4, "4th"), (11, "11th"),
                                         (12, "12th"), (13, "13th"), (21, "21st"), (22, "22nd"), (31, "31st")])
def test_ordinal_days(day, suffix):
    assert format_date(datetime(2024, 1, day), "Do") == suffix


def test_date_key():
    assert date_key(datetime(2024, 3, 5, 23, 59)) == "2024-03-05"


def test_daily_note_path():
    assert daily_note_path("2024-03-05", "YYYY-MM-DD", "") == "2024-03-05.md"
    assert daily_note_path("2024-03-05", "YYYY/MM/YYYY-MM-DD", "Journal/") == "Journal/2024/03/2024-03-05.md"


def test_date_folder_base_only():
    assert date_folder(datetime(2024, 3, 5), "YYYY-MM-DD", "") == ""


def test_join_vault_path():
    assert join_vault_path("", "/Granola/", "2024", "") == "Granola/2024"
    assert join_vault_path("", "") == ""
