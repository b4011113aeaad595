"""
Date helpers for routing.

Daily-note formats are written in the moment.js token style used by note
applications (e.g. "YYYY-MM-DD" or "YYYY/MM/MMMM D"), so formatting is done
with a small token translator instead of strftime. Month and weekday names
are always English, independent of the process locale.
"""

import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, Optional


DATE_KEY_FORMAT = "YYYY-MM-DD"

_MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
_WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

_TOKEN_PATTERN = re.compile(
    r"\[[^\]]*\]|YYYY|YY|Q|MMMM|MMM|MM|M|Do|DDDD|DDD|DD|D|dddd|ddd|dd|d|E|ww|w|WW|W|GGGG"
    r"|HH|H|hh|h|mm|m|ss|s|A|a|X|x"
)


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def _twelve_hour(hour: int) -> int:
    return hour % 12 or 12


def _sunday_weekday(value: datetime) -> int:
    return (value.weekday() + 1) % 7


def _locale_week(value: datetime) -> int:
    """
    Week of the year with weeks starting on Sunday.

    Week 1 is the week holding January 1st, so the last days of December can
    belong to week 1 of the following year.
    """
    day = value.date()
    week_start = day - timedelta(days=_sunday_weekday(value))
    if week_start + timedelta(days=6) >= date(day.year + 1, 1, 1):
        return 1
    jan_first = date(day.year, 1, 1)
    jan_first_offset = (jan_first.weekday() + 1) % 7
    return (day.timetuple().tm_yday - 1 + jan_first_offset) // 7 + 1


_TOKENS: Dict[str, Callable[[datetime], str]] = {
    "YYYY": lambda d: f"{d.year:04d}",
    "YY": lambda d: f"{d.year % 100:02d}",
    "Q": lambda d: str((d.month - 1) // 3 + 1),
    "MMMM": lambda d: _MONTHS[d.month - 1],
    "MMM": lambda d: _MONTHS[d.month - 1][:3],
    "MM": lambda d: f"{d.month:02d}",
    "M": lambda d: str(d.month),
    "Do": lambda d: _ordinal(d.day),
    "DDDD": lambda d: f"{d.timetuple().tm_yday:03d}",
    "DDD": lambda d: str(d.timetuple().tm_yday),
    "DD": lambda d: f"{d.day:02d}",
    "D": lambda d: str(d.day),
    "dddd": lambda d: _WEEKDAYS[d.weekday()],
    "ddd": lambda d: _WEEKDAYS[d.weekday()][:3],
    "dd": lambda d: _WEEKDAYS[d.weekday()][:2],
    "d": lambda d: str(_sunday_weekday(d)),
    "E": lambda d: str(d.isoweekday()),
    "ww": lambda d: f"{_locale_week(d):02d}",
    "w": lambda d: str(_locale_week(d)),
    "WW": lambda d: f"{d.isocalendar()[1]:02d}",
    "W": lambda d: str(d.isocalendar()[1]),
    "GGGG": lambda d: f"{d.isocalendar()[0]:04d}",
    "HH": lambda d: f"{d.hour:02d}",
    "H": lambda d: str(d.hour),
    "hh": lambda d: f"{_twelve_hour(d.hour):02d}",
    "h": lambda d: str(_twelve_hour(d.hour)),
    "mm": lambda d: f"{d.minute:02d}",
    "m": lambda d: str(d.minute),
    "ss": lambda d: f"{d.second:02d}",
    "s": lambda d: str(d.second),
    "A": lambda d: "AM" if d.hour < 12 else "PM",
    "a": lambda d: "am" if d.hour < 12 else "pm",
    "X": lambda d: str(int(d.timestamp())),
    "x": lambda d: str(int(d.timestamp() * 1000)),
}


def format_date(value: datetime, pattern: str) -> str:
    """
    Format a datetime with a moment.js style pattern.

    Supported tokens: year (YYYY, YY, GGGG), quarter (Q), month (MMMM, MMM,
    MM, M), day of month (Do, DD, D), day of year (DDDD, DDD), weekday (dddd,
    ddd, dd, d, E), week of year (ww, w with Sunday-first weeks; WW, W for ISO
    weeks), time (HH, H, hh, h, mm, m, ss, s, A, a) and Unix time (X, x).
    Text inside square brackets is emitted literally; other characters pass
    through unchanged. Names are English.

    Args:
        value: The datetime to format
        pattern: The pattern, e.g. "YYYY/MM/DD"

    Returns:
        The formatted string
    """
    def replace(match: "re.Match[str]") -> str:
        token = match.group(0)
        if token.startswith("["):
            return token[1:-1]
        return _TOKENS[token](value)

    return _TOKEN_PATTERN.sub(replace, pattern)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive timestamps are taken to be UTC. Returns None for absent or
    unparseable values.
    """
    if not value:
        return None

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    # fromisoformat before 3.11 accepts at most six fractional digits
    text = re.sub(r"(\.\d{6})\d+", r"\1", text)

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logging.warning(f"Ignoring unparseable timestamp: {value!r}")
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def date_key(value: datetime) -> str:
    """The canonical YYYY-MM-DD key for a date."""
    return format_date(value, DATE_KEY_FORMAT)


def parse_date_key(key: str) -> datetime:
    """Inverse of date_key(): midnight UTC of the keyed day."""
    return datetime.strptime(key, "%Y-%m-%d").replace(tzinfo=timezone.utc)
