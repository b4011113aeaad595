"""
Destination routing for rendered documents.

Where a document is written is decided independently of how it is rendered.
The routing mode is a single enumerated setting, so exactly one policy
applies to every document of a run.
"""

import posixpath
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Sequence

from ..models import DailyNote, DateFolder, FlatFolder, RoutingDecision
from .dates import date_key, format_date, parse_date_key, parse_timestamp, utc_now


class RoutingMode(str, Enum):
    """The policy selecting where rendered documents are written."""

    FLAT = "flat"
    DAILY_NOTE_MERGE = "daily_note"
    DAILY_FOLDER_STRUCTURE = "daily_folder"

    @classmethod
    def from_setting(cls, value: str) -> "RoutingMode":
        """
        Parse a routing mode from its configuration value.

        Raises:
            ValueError: If the value names no routing mode
        """
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(mode.value for mode in cls)
            raise ValueError(f"Unknown destination mode {value!r}; expected one of: {choices}")


def join_vault_path(*parts: str) -> str:
    """Join vault path segments with '/', dropping empty segments."""
    cleaned = [part.strip("/") for part in parts if part and part.strip("/")]
    if not cleaned:
        return ""
    return posixpath.normpath("/".join(cleaned))


def resolve_date(
    timestamp_candidates: Sequence[Optional[str]],
    now: Optional[Callable[[], datetime]] = None
) -> datetime:
    """
    Pick the date a document is filed under.

    Args:
        timestamp_candidates: ISO-8601 timestamps in priority order
        now: Clock used when no candidate is usable (defaults to UTC now)

    Returns:
        The first parseable candidate, else the current time, in UTC
    """
    for candidate in timestamp_candidates:
        parsed = parse_timestamp(candidate)
        if parsed is not None:
            return parsed
    return (now or utc_now)()


def date_folder(resolved: datetime, date_format: str, base_folder: str) -> str:
    """
    Folder for a document under the daily-note folder structure.

    The date is formatted with `date_format`; every path segment except the
    last (the filename part) becomes the folder below `base_folder`.
    """
    segments = format_date(resolved, date_format).split("/")
    return join_vault_path(base_folder, *segments[:-1])


def daily_note_path(key: str, date_format: str, folder: str, extension: str = ".md") -> str:
    """
    Vault path of the daily note for a date key.

    Args:
        key: Date key in YYYY-MM-DD form
        date_format: The daily-note filename format (may contain '/')
        folder: The daily-notes base folder
        extension: File extension

    Returns:
        The vault-relative file path
    """
    filename = format_date(parse_date_key(key), date_format or "YYYY-MM-DD")
    return join_vault_path(folder, filename) + extension


def route(
    timestamp_candidates: Sequence[Optional[str]],
    mode: RoutingMode,
    date_format: str,
    base_folder: str,
    now: Optional[Callable[[], datetime]] = None
) -> RoutingDecision:
    """
    Decide where a document goes.

    Args:
        timestamp_candidates: created_at then updated_at (either may be None)
        mode: The active routing mode
        date_format: Daily-note date format, used by the folder structure mode
        base_folder: Flat folder, or base folder for the folder structure mode
        now: Clock used when no timestamp is available

    Returns:
        FlatFolder, DailyNote or DateFolder
    """
    mode = RoutingMode(mode)
    if mode is RoutingMode.FLAT:
        return FlatFolder(path=join_vault_path(base_folder))

    resolved = resolve_date(timestamp_candidates, now)

    if mode is RoutingMode.DAILY_NOTE_MERGE:
        return DailyNote(date_key=date_key(resolved))

    if mode is RoutingMode.DAILY_FOLDER_STRUCTURE:
        return DateFolder(path=date_folder(resolved, date_format or "YYYY-MM-DD", base_folder))

    raise ValueError(f"Unhandled routing mode: {mode}")
