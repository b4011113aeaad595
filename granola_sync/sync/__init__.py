"""Sync orchestration for Granola Sync."""

from .runner import SkippedItem, SyncReport, SyncRunner, group_by_date_key

__all__ = ["SkippedItem", "SyncReport", "SyncRunner", "group_by_date_key"]
