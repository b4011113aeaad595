"""
Local export importer.

Reads documents from a JSON file saved from the documents endpoint, so a sync
can be replayed offline. The file holds either the API response
(`{"docs": [...]}`) or a bare list of documents; an optional `transcripts`
mapping keys transcript entry lists by document id.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from ..errors import ApiError
from ..models import DocumentRecord, RejectedDocument, TranscriptEntry
from .base import BaseImporter
from .granola_api import parse_documents, parse_transcript


class FileImporter(BaseImporter):
    """
    Importer for a Granola documents export on disk.
    """

    def __init__(self, export_path: str):
        """
        Initialize the importer.

        Args:
            export_path: Path to the JSON export file
        """
        self.export_path = Path(export_path).expanduser()
        self._data: Dict[str, Any] = {}
        self._loaded = False
        self.rejected: List[RejectedDocument] = []

    def _load(self) -> Dict[str, Any]:
        if self._loaded:
            return self._data

        try:
            with open(self.export_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ApiError(f"Could not read export file {self.export_path}: {e}") from e

        if isinstance(data, list):
            data = {"docs": data}
        if not isinstance(data, dict) or not isinstance(data.get("docs"), list):
            raise ApiError(f"Export file {self.export_path} holds no 'docs' list")

        self._data = data
        self._loaded = True
        logging.info(f"Loaded export file: {self.export_path}")
        return self._data

    def get_all_documents(self) -> List[DocumentRecord]:
        self.rejected = []
        return parse_documents(self._load()["docs"], self.rejected)

    def get_transcript(self, document_id: str) -> List[TranscriptEntry]:
        transcripts = self._load().get("transcripts") or {}
        raw_entries = transcripts.get(document_id) if isinstance(transcripts, dict) else None
        return parse_transcript(raw_entries if isinstance(raw_entries, list) else [])

    def get_rejected_documents(self) -> List[RejectedDocument]:
        return list(self.rejected)
