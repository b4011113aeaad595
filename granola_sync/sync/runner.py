"""
Sync orchestration for Granola Sync.

The runner pulls documents from an importer, renders them, routes each one to
its destination and writes the result into the vault. Documents are handled
one at a time; a failure affecting one document is logged and reported as a
skipped item while the rest of the batch continues.
"""

import logging
import posixpath
from collections import OrderedDict
from datetime import datetime
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from ..config import SyncSettings
from ..database import SyncStateManager
from ..errors import GranolaSyncError
from ..importers import BaseImporter
from ..merging import merge_section
from ..models import DocumentRecord, RejectedDocument
from ..rendering import (
    SpeakerResolver,
    build_daily_section_body,
    build_standalone_note,
    format_transcript,
    render,
    sanitize_filename,
)
from ..routing import RoutingMode, daily_note_path, join_vault_path, route
from ..vault import VaultFileSystem


class SkippedItem(BaseModel):
    """A document that was not written, and why."""

    document_id: str
    title: str
    reason: str


class SyncReport(BaseModel):
    """
    Outcome of one sync run.
    """

    kind: str = Field(description="'notes' or 'transcripts'")
    synced: int = 0
    skipped: List[SkippedItem] = Field(default_factory=list)
    location: str = Field(default="", description="Where documents were written, for display")

    def skip(self, document: DocumentRecord, reason: str) -> None:
        self.skipped.append(SkippedItem(document_id=document.id, title=document.title, reason=reason))

    def skip_rejected(self, rejected: RejectedDocument) -> None:
        self.skipped.append(SkippedItem(document_id=rejected.id, title=rejected.title, reason=rejected.reason))

    @property
    def summary(self) -> str:
        noun = "notes" if self.kind == "notes" else "transcripts"
        message = f"{self.synced} {noun} synced to {self.location}"
        if self.skipped:
            message += f" ({len(self.skipped)} skipped)"
        return message


class SyncRunner:
    """
    Runs note and transcript syncs against a vault.
    """

    def __init__(
        self,
        importer: BaseImporter,
        vault: VaultFileSystem,
        settings: SyncSettings,
        state: Optional[SyncStateManager] = None,
        now: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize the runner.

        Args:
            importer: Source of documents and transcripts
            vault: The vault notes are written into
            settings: Validated sync settings
            state: Optional sync state database with an open connection
            now: Clock for documents without timestamps (defaults to UTC now)
        """
        self.importer = importer
        self.vault = vault
        self.settings = settings
        self.state = state
        self.now = now

    def location_label(self) -> str:
        """Describe where notes are written under the active routing mode."""
        if self.settings.destination is RoutingMode.DAILY_NOTE_MERGE:
            return "daily notes"
        if self.settings.destination is RoutingMode.DAILY_FOLDER_STRUCTURE:
            return "daily note folder structure"
        return f"'{join_vault_path(self.settings.granola_folder)}'"

    def sync_notes(self, documents: Optional[List[DocumentRecord]] = None) -> SyncReport:
        """
        Render every document and write it to its routed destination.

        Entries the importer rejected on its most recent fetch are reported
        as skipped.

        Args:
            documents: Documents to sync (defaults to fetching them from the importer)

        Returns:
            The run's SyncReport

        Raises:
            GranolaSyncError: If the documents cannot be fetched; nothing is written then
        """
        started_at = datetime.now()
        if documents is None:
            documents = self.importer.get_all_documents()

        mode = self.settings.destination
        report = SyncReport(kind="notes", location=self.location_label())
        logging.info(f"Syncing {len(documents)} documents to {report.location}...")

        for rejected in self.importer.get_rejected_documents():
            logging.warning(f"Document {rejected.id} could not be read, skipping")
            report.skip_rejected(rejected)

        renderable = []
        for document in documents:
            if not document.has_note:
                logging.info(f"Document {document.id} has no note content, skipping")
                report.skip(document, "no note content")
                continue
            renderable.append(document)

        if mode is RoutingMode.DAILY_NOTE_MERGE:
            self._sync_daily_notes(renderable, report)
        else:
            self._sync_standalone_notes(renderable, report)

        self._record_run(report, mode, started_at)
        logging.info(f"Granola Sync complete: {report.summary}")
        return report

    def _sync_standalone_notes(self, documents: List[DocumentRecord], report: SyncReport) -> None:
        for i, document in enumerate(documents, 1):
            logging.info(f"Processing document {i}/{len(documents)}: {document.title}")
            try:
                decision = route(
                    document.timestamp_candidates,
                    self.settings.destination,
                    self.settings.daily_note_format,
                    self._base_folder(),
                    now=self.now
                )
                folder = decision.path
                if not self.vault.ensure_folder(folder):
                    report.skip(document, f"could not create folder '{folder}'")
                    continue

                content = build_standalone_note(document, render(document.tree))
                file_path = join_vault_path(folder, sanitize_filename(document.title) + ".md")
                self.vault.write(file_path, content)
                self._record_document(document, file_path, content)
                report.synced += 1

            except (OSError, GranolaSyncError, ValueError) as e:
                logging.error(f"Error processing document {document.id}: {e}")
                report.skip(document, str(e))

    def _sync_daily_notes(self, documents: List[DocumentRecord], report: SyncReport) -> None:
        groups = group_by_date_key(documents, now=self.now)

        heading = self.settings.daily_note_heading
        for key, day_documents in groups.items():
            entries = [(document, render(document.tree)) for document in day_documents]
            file_path = daily_note_path(key, self.settings.daily_note_format, self.settings.daily_note_folder)
            try:
                folder = posixpath.dirname(file_path)
                if folder and not self.vault.ensure_folder(folder):
                    raise OSError(f"could not create folder '{folder}'")

                existing = self.vault.read(file_path) if self.vault.exists(file_path) else ""
                updated = merge_section(existing, heading, build_daily_section_body(entries))
                if updated != existing:
                    self.vault.write(file_path, updated)
                    logging.info(f"Updated daily note {file_path} with {len(entries)} documents")
                else:
                    logging.info(f"Daily note {file_path} already up to date")

                for document, markdown in entries:
                    self._record_document(document, file_path, markdown)
                report.synced += len(entries)

            except (OSError, GranolaSyncError, ValueError) as e:
                logging.error(f"Error updating section in {file_path}: {e}")
                for document, _ in entries:
                    report.skip(document, f"could not update {file_path}: {e}")

    def sync_transcripts(self, documents: Optional[List[DocumentRecord]] = None) -> SyncReport:
        """
        Fetch and write the transcript of every document.

        Transcripts always go to the Granola folder, one file per document.

        Args:
            documents: Documents whose transcripts to sync (defaults to fetching them from the importer)

        Returns:
            The run's SyncReport
        """
        started_at = datetime.now()
        folder = join_vault_path(self.settings.granola_folder)
        if not folder:
            raise GranolaSyncError("Granola folder is not configured.")

        if documents is None:
            documents = self.importer.get_all_documents()

        report = SyncReport(kind="transcripts", location=f"'{folder}'")
        if not self.vault.ensure_folder(folder):
            raise GranolaSyncError(f"Could not create folder '{folder}'")

        speakers = SpeakerResolver(self.settings.speakers or None)
        for document in documents:
            try:
                entries = self.importer.get_transcript(document.id)
                if not entries:
                    report.skip(document, "no transcript")
                    continue

                content = format_transcript(entries, document.title, speakers)
                file_path = join_vault_path(folder, sanitize_filename(document.title) + "-transcript.md")
                self.vault.write(file_path, content)
                report.synced += 1

            except (OSError, GranolaSyncError) as e:
                logging.error(f"Error fetching transcript for document {document.title}: {e}")
                report.skip(document, str(e))

        self._record_run(report, RoutingMode.FLAT, started_at)
        logging.info(f"Granola transcript sync complete: {report.summary}")
        return report

    def _base_folder(self) -> str:
        if self.settings.destination is RoutingMode.DAILY_FOLDER_STRUCTURE:
            return self.settings.daily_note_folder
        return self.settings.granola_folder

    def _record_document(self, document: DocumentRecord, destination: str, content: str) -> None:
        if self.state is not None:
            self.state.record_document(document.id, document.title, destination, content)

    def _record_run(self, report: SyncReport, mode: RoutingMode, started_at: datetime) -> None:
        if self.state is not None:
            self.state.record_run(report.kind, mode.value, report.synced, len(report.skipped), started_at)


def group_by_date_key(
    documents: List[DocumentRecord],
    now: Optional[Callable[[], datetime]] = None
) -> Dict[str, List[DocumentRecord]]:
    """
    Group documents by the day they are filed under, keeping document order.
    """
    groups: Dict[str, List[DocumentRecord]] = OrderedDict()
    for document in documents:
        decision = route(document.timestamp_candidates, RoutingMode.DAILY_NOTE_MERGE, "", "", now=now)
        groups.setdefault(decision.date_key, []).append(document)
    return groups
