"""
Document models for Granola Sync.

These mirror the records returned by the Granola API: meeting notes with an
optional rendered panel, and the transcript entries recorded for a meeting.
"""

import logging
from typing import Any, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from .source_tree import SourceDocument


DEFAULT_TITLE = "Untitled Granola Note"
DEFAULT_DOCUMENT_ID = "unknown_id"


class DocumentPanel(BaseModel):
    """The last panel a user viewed for a document; carries the note tree."""

    model_config = ConfigDict(extra="allow")

    content: Optional[SourceDocument] = None

    @field_validator("content", mode="wrap")
    @classmethod
    def _flatten_unreadable_tree(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        if not isinstance(value, (dict, SourceDocument)):
            return None
        try:
            return handler(value)
        except ValidationError as e:
            logging.warning(f"Source tree could not be validated, keeping its flattened text: {e}")
            return SourceDocument.flattened(value)


class DocumentRecord(BaseModel):
    """
    A Granola document as returned by the documents endpoint.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(
        default=DEFAULT_DOCUMENT_ID,
        description="The Granola document identifier"
    )

    title: str = Field(
        default=DEFAULT_TITLE,
        description="The meeting title"
    )

    created_at: Optional[str] = Field(
        default=None,
        description="ISO-8601 creation timestamp"
    )

    updated_at: Optional[str] = Field(
        default=None,
        description="ISO-8601 last update timestamp"
    )

    last_viewed_panel: Optional[DocumentPanel] = Field(
        default=None,
        description="Panel holding the note's source tree"
    )

    @field_validator("id", mode="before")
    @classmethod
    def _default_id(cls, value: Any) -> str:
        return str(value) if value else DEFAULT_DOCUMENT_ID

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, value: Any) -> str:
        return str(value) if value else DEFAULT_TITLE

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _empty_timestamp(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) and value else None

    @field_validator("last_viewed_panel", mode="before")
    @classmethod
    def _drop_bad_panel(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, DocumentPanel)) else None

    @property
    def tree(self) -> Optional[SourceDocument]:
        """The document's source tree, if one was delivered."""
        if self.last_viewed_panel is None:
            return None
        return self.last_viewed_panel.content

    @property
    def has_note(self) -> bool:
        """True if the document carries a renderable "doc" tree."""
        return self.tree is not None and self.tree.kind == "doc"

    @property
    def timestamp_candidates(self) -> List[Optional[str]]:
        """Timestamps in routing priority order."""
        return [self.created_at, self.updated_at]


class TranscriptEntry(BaseModel):
    """
    One utterance of a meeting transcript.
    """

    model_config = ConfigDict(extra="allow")

    document_id: str = ""
    id: str = ""
    source: str = Field(
        default="",
        description="Audio source identifier, e.g. 'microphone' or 'system'"
    )
    text: str = ""
    start_timestamp: str = ""
    end_timestamp: str = ""
    is_final: bool = True

    @field_validator("document_id", "id", "source", "text", "start_timestamp", "end_timestamp", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("is_final", mode="before")
    @classmethod
    def _default_final(cls, value: Any) -> bool:
        return True if value is None else bool(value)


class RejectedDocument(BaseModel):
    """
    A document entry an importer received but could not read.
    """

    id: str = DEFAULT_DOCUMENT_ID
    title: str = DEFAULT_TITLE
    reason: str = ""

    @classmethod
    def from_raw(cls, raw: Any, reason: str) -> "RejectedDocument":
        """Keep whatever identifies the raw entry, falling back to the defaults."""
        if not isinstance(raw, dict):
            return cls(reason=reason)
        return cls(
            id=str(raw.get("id") or DEFAULT_DOCUMENT_ID),
            title=str(raw.get("title") or DEFAULT_TITLE),
            reason=reason
        )
