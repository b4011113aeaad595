"""Data models for Granola Sync."""

from .source_tree import NodeKind, SourceNode, SourceDocument
from .documents import DocumentRecord, DocumentPanel, RejectedDocument, TranscriptEntry
from .destinations import FlatFolder, DailyNote, DateFolder, RoutingDecision

__all__ = [
    "NodeKind",
    "SourceNode",
    "SourceDocument",
    "DocumentRecord",
    "DocumentPanel",
    "RejectedDocument",
    "TranscriptEntry",
    "FlatFolder",
    "DailyNote",
    "DateFolder",
    "RoutingDecision"
]
