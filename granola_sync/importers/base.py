"""
Base importer interface for Granola Sync.

This module defines the abstract interface that all document sources must implement.
"""

from abc import ABC, abstractmethod
from typing import List

from ..models import DocumentRecord, RejectedDocument, TranscriptEntry


class BaseImporter(ABC):
    """
    Abstract base class for all document sources.

    Each importer delivers Granola documents (the live API, a local export,
    hardcoded samples) as DocumentRecord objects.
    """

    @abstractmethod
    def get_all_documents(self) -> List[DocumentRecord]:
        """
        Retrieve all documents from the source.

        Returns:
            List of DocumentRecord objects

        Raises:
            GranolaSyncError: If the document list cannot be retrieved
        """
        pass

    @abstractmethod
    def get_transcript(self, document_id: str) -> List[TranscriptEntry]:
        """
        Retrieve the transcript of one document.

        Args:
            document_id: The Granola document identifier

        Returns:
            Transcript entries in spoken order (empty if there is none)
        """
        pass

    def get_rejected_documents(self) -> List[RejectedDocument]:
        """
        Document entries the last get_all_documents() call could not read.

        Returns:
            The rejected entries (empty for sources that never reject any)
        """
        return []

    def close(self) -> None:
        """Release any resources held by the importer."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
