"""Destination routing: deciding where each rendered document is written."""

from .dates import format_date, parse_timestamp, date_key, parse_date_key, utc_now
from .router import (
    RoutingMode,
    route,
    resolve_date,
    date_folder,
    daily_note_path,
    join_vault_path,
)

__all__ = [
    "format_date",
    "parse_timestamp",
    "date_key",
    "parse_date_key",
    "utc_now",
    "RoutingMode",
    "route",
    "resolve_date",
    "date_folder",
    "daily_note_path",
    "join_vault_path"
]
