"""
Granola API importer.

Talks to the Granola HTTP API with httpx: the documents endpoint for notes and
the transcript endpoint for per-meeting transcripts.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ..config import ConfigManager, config
from ..errors import ApiError
from ..models import DocumentRecord, RejectedDocument, TranscriptEntry
from .base import BaseImporter


DOCUMENTS_PATH = "/v2/get-documents"
TRANSCRIPT_PATH = "/v1/get-document-transcript"


def describe_status(status_code: int) -> str:
    """A user-facing explanation for an API error status."""
    if status_code == 401:
        return "Authentication failed. Your access token may have expired. Please update your credentials file."
    if status_code == 403:
        return "Access forbidden. Please check your permissions."
    if status_code == 404:
        return "API endpoint not found. Please check for updates."
    if status_code >= 500:
        return "Granola API server error. Please try again later."
    return f"Granola API request failed with status {status_code}."


class GranolaClient:
    """
    Minimal client for the Granola API.
    """

    def __init__(
        self,
        access_token: str,
        api_base: Optional[str] = None,
        client_version: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize the client.

        Args:
            access_token: Bearer token for the API
            api_base: API base URL (defaults to config value)
            client_version: Version reported in the client headers (defaults to config value)
            timeout: Request timeout in seconds (defaults to config value)
            transport: Optional httpx transport, e.g. a MockTransport in tests
        """
        self.api_base = (api_base or config.api_base).rstrip("/")
        self.client_version = client_version or config.client_version
        self.client = httpx.Client(
            base_url=self.api_base,
            timeout=timeout or config.api_timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
                "Accept": "*/*",
                "User-Agent": f"GranolaSync/{self.client_version}",
                "X-Client-Version": f"GranolaSync-{self.client_version}",
            }
        )

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        self.client.close()

    def _post(self, path: str, payload: Dict[str, Any]) -> Any:
        """
        POST a JSON payload and decode the JSON answer.

        Raises:
            ApiError: On transport failures, error statuses or non-JSON bodies
        """
        try:
            response = self.client.post(path, json=payload)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise ApiError(describe_status(status), status_code=status) from e
        except httpx.RequestError as e:
            raise ApiError(
                "Failed to reach the Granola API. Please check your internet connection."
            ) from e
        except ValueError as e:
            raise ApiError("Invalid API response format. Please try again later.") from e

    def get_documents(self, limit: int = 100, offset: int = 0) -> List[Dict[str, Any]]:
        """
        Fetch one page of documents, including their last viewed panel.

        Args:
            limit: Page size
            offset: Page offset

        Returns:
            The raw document mappings
        """
        data = self._post(DOCUMENTS_PATH, {
            "limit": limit,
            "offset": offset,
            "include_last_viewed_panel": True
        })
        if not isinstance(data, dict) or not isinstance(data.get("docs"), list):
            raise ApiError("Invalid API response format. Please try again later.")
        return data["docs"]

    def get_transcript(self, document_id: str) -> List[Dict[str, Any]]:
        """
        Fetch the transcript entries of a document.

        Returns:
            The raw transcript entries (empty when the API returns none)
        """
        data = self._post(TRANSCRIPT_PATH, {"document_id": document_id})
        return data if isinstance(data, list) else []


class GranolaImporter(BaseImporter):
    """
    Importer backed by the live Granola API.
    """

    def __init__(self, client: GranolaClient, page_limit: Optional[int] = None):
        self.client = client
        self.page_limit = page_limit or int(config.get("granola.page_limit", 100))
        self.rejected: List[RejectedDocument] = []

    @classmethod
    def from_config(cls, access_token: str, config_manager: Optional[ConfigManager] = None) -> "GranolaImporter":
        manager = config_manager or config
        client = GranolaClient(
            access_token,
            api_base=manager.api_base,
            client_version=manager.client_version,
            timeout=manager.api_timeout
        )
        return cls(client, page_limit=int(manager.get("granola.page_limit", 100)))

    def get_all_documents(self) -> List[DocumentRecord]:
        logging.info("Fetching documents from the Granola API...")
        raw_documents = self.client.get_documents(limit=self.page_limit)
        self.rejected = []
        documents = parse_documents(raw_documents, self.rejected)
        logging.info(f"Retrieved {len(documents)} documents from Granola")
        return documents

    def get_transcript(self, document_id: str) -> List[TranscriptEntry]:
        return parse_transcript(self.client.get_transcript(document_id))

    def get_rejected_documents(self) -> List[RejectedDocument]:
        return list(self.rejected)

    def close(self) -> None:
        self.client.close()


def parse_documents(
    raw_documents: List[Any],
    rejected: Optional[List[RejectedDocument]] = None
) -> List[DocumentRecord]:
    """
    Validate raw document mappings, skipping any that are not documents.

    Args:
        raw_documents: Entries of the documents list
        rejected: Optional list that collects the skipped entries

    Returns:
        The validated documents, in input order
    """
    documents = []
    for raw in raw_documents:
        if not isinstance(raw, dict):
            logging.warning(f"Skipping malformed document entry: {raw!r}")
            if rejected is not None:
                rejected.append(RejectedDocument.from_raw(raw, "malformed document entry"))
            continue
        try:
            documents.append(DocumentRecord.model_validate(raw))
        except ValidationError as e:
            logging.warning(f"Skipping malformed document {raw.get('id', '?')}: {e}")
            if rejected is not None:
                rejected.append(RejectedDocument.from_raw(raw, "could not read document"))
    return documents


def parse_transcript(raw_entries: List[Any]) -> List[TranscriptEntry]:
    entries = []
    for raw in raw_entries:
        if not isinstance(raw, dict):
            continue
        try:
            entries.append(TranscriptEntry.model_validate(raw))
        except ValidationError as e:
            logging.warning(f"Skipping malformed transcript entry: {e}")
    return entries
