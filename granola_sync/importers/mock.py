"""
Mock importer for testing Granola Sync.

This module provides a mock document source with hardcoded meetings for
exercising the sync pipeline without a Granola account.
"""

from typing import Any, Dict, List

from ..models import DocumentRecord, TranscriptEntry
from .base import BaseImporter


def _text(value: str) -> Dict[str, Any]:
    return {"type": "text", "text": value}


def _paragraph(value: str) -> Dict[str, Any]:
    return {"type": "paragraph", "content": [_text(value)]}


def _heading(value: str, level: int) -> Dict[str, Any]:
    return {"type": "heading", "attrs": {"level": level}, "content": [_text(value)]}


def _bullets(*items: str) -> Dict[str, Any]:
    return {
        "type": "bulletList",
        "content": [{"type": "listItem", "content": [_paragraph(item)]} for item in items]
    }


class MockImporter(BaseImporter):
    """
    Mock importer that returns hardcoded test documents.

    Used for testing the pipeline without requiring the Granola API.
    """

    def __init__(self):
        """Initialize the mock importer with test data."""
        self._documents = self._create_test_documents()
        self._transcripts = self._create_test_transcripts()

    def get_all_documents(self) -> List[DocumentRecord]:
        """
        Return all hardcoded test documents.

        Returns:
            List of test DocumentRecord objects
        """
        return list(self._documents)

    def get_transcript(self, document_id: str) -> List[TranscriptEntry]:
        return list(self._transcripts.get(document_id, []))

    def _create_test_documents(self) -> List[DocumentRecord]:
        """
        Create hardcoded test documents covering the routing cases.

        Returns:
            Two meetings on the same day, one on another day, and one without
            a note body
        """
        raw_documents = [
            {
                "id": "doc-standup-0522",
                "title": "Team Standup",
                "created_at": "2024-05-22T09:00:00Z",
                "updated_at": "2024-05-22T09:20:00Z",
                "last_viewed_panel": {"content": {"type": "doc", "content": [
                    _heading("Updates", 2),
                    _bullets("Migration is on track", "Release notes drafted", ""),
                    _paragraph(""),
                    _heading("Action items", 2),
                    _bullets("Sarah to review the schema changes"),
                ]}}
            },
            {
                "id": "doc-planning-0522",
                "title": "Q3 Planning: \"Project Phoenix\"",
                "created_at": "2024-05-22T14:30:00Z",
                "last_viewed_panel": {"content": {"type": "doc", "content": [
                    _paragraph("Scope agreed for the first milestone."),
                    {"type": "blockquote", "content": [_paragraph("Ship small, ship often.")]},
                ]}}
            },
            {
                "id": "doc-review-0523",
                "title": "Design Review",
                "updated_at": "2024-05-23T16:00:00Z",
                "last_viewed_panel": {"content": {"type": "doc", "content": [
                    _heading("Decisions", 1),
                    _paragraph("Keep the current navigation."),
                ]}}
            },
            {
                "id": "doc-empty",
                "title": "Untitled call",
                "created_at": "2024-05-23T08:00:00Z",
            },
        ]
        return [DocumentRecord.model_validate(raw) for raw in raw_documents]

    def _create_test_transcripts(self) -> Dict[str, List[TranscriptEntry]]:
        entries = [
            ("microphone", "2024-05-22T09:00:05Z", "Morning everyone."),
            ("microphone", "2024-05-22T09:00:09Z", "Quick round of updates?"),
            ("system", "2024-05-22T09:00:15Z", "Migration is on track."),
            ("microphone", "2024-05-22T09:00:30Z", "Great, thanks."),
        ]
        return {
            "doc-standup-0522": [
                TranscriptEntry(
                    document_id="doc-standup-0522",
                    id=f"entry-{index}",
                    source=source,
                    start_timestamp=start,
                    end_timestamp=start,
                    text=text
                )
                for index, (source, start, text) in enumerate(entries)
            ]
        }
