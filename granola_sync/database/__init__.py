"""Sync state tracking for Granola Sync."""

from .manager import SyncStateManager

__all__ = ["SyncStateManager"]
