"""
Sync state database for Granola Sync.

This module records which documents were written where, and the outcome of
each sync run, using DuckDB.
"""

import duckdb
import hashlib
import logging
from typing import Any, Dict, List, Optional
from datetime import datetime

from ..errors import StateError


class SyncStateManager:
    """
    Manages the DuckDB database tracking synced documents and sync runs.
    """

    def __init__(self, db_path: str = "granola_sync.db"):
        """
        Initialize the state manager.

        Args:
            db_path: Path to the DuckDB database file (":memory:" for tests)
        """
        self.db_path = db_path
        self.connection = None

    def connect(self):
        """
        Establish connection to the database.

        Raises:
            StateError: If the database file cannot be opened, e.g. when it is
                locked by another process or is not a DuckDB file
        """
        try:
            self.connection = duckdb.connect(self.db_path)
        except duckdb.Error as e:
            raise StateError(f"Could not open sync state database {self.db_path}: {e}") from e

    def disconnect(self):
        """Close the database connection."""
        if self.connection:
            self.connection.close()
            self.connection = None

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        self.initialize_database()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()

    def _require_connection(self):
        if not self.connection:
            raise RuntimeError("Database connection not established")
        return self.connection

    def initialize_database(self):
        """
        Create all necessary tables if they don't exist.
        """
        connection = self._require_connection()

        connection.execute("""
            CREATE TABLE IF NOT EXISTS synced_documents (
                document_id VARCHAR PRIMARY KEY,
                title VARCHAR NOT NULL,
                destination VARCHAR NOT NULL,
                content_hash VARCHAR NOT NULL,
                synced_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        connection.execute("CREATE SEQUENCE IF NOT EXISTS run_id_seq;")
        connection.execute("""
            CREATE TABLE IF NOT EXISTS sync_runs (
                run_id BIGINT PRIMARY KEY DEFAULT nextval('run_id_seq'),
                kind VARCHAR NOT NULL,
                mode VARCHAR NOT NULL,
                synced INTEGER NOT NULL,
                skipped INTEGER NOT NULL,
                started_at TIMESTAMP NOT NULL,
                finished_at TIMESTAMP NOT NULL
            )
        """)

    @staticmethod
    def calculate_content_hash(content: str) -> str:
        """
        Calculate the SHA-256 hash of written note content.

        Args:
            content: The text written to the vault

        Returns:
            The SHA-256 hash as a hex string
        """
        return hashlib.sha256(content.encode('utf-8')).hexdigest()

    def record_document(self, document_id: str, title: str, destination: str, content: str) -> None:
        """
        Record that a document was written, replacing any earlier record.

        Args:
            document_id: The Granola document identifier
            title: The document title
            destination: Vault path the document was written to
            content: The rendered content written for the document
        """
        connection = self._require_connection()
        connection.execute("""
            INSERT OR REPLACE INTO synced_documents (document_id, title, destination, content_hash, synced_at)
            VALUES (?, ?, ?, ?, ?)
        """, [document_id, title, destination, self.calculate_content_hash(content), datetime.now()])

    def document_changed(self, document_id: str, content: str) -> bool:
        """
        Check if a document is new or its rendered content changed since it was last synced.
        """
        record = self.get_synced_document(document_id)
        if record is None:
            return True
        return record["content_hash"] != self.calculate_content_hash(content)

    def get_synced_document(self, document_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve the sync record of a document.

        Args:
            document_id: The Granola document identifier

        Returns:
            The record as a dict, or None if the document was never synced
        """
        connection = self._require_connection()
        row = connection.execute("""
            SELECT document_id, title, destination, content_hash, synced_at
            FROM synced_documents
            WHERE document_id = ?
        """, [document_id]).fetchone()

        if row:
            return _document_row(row)
        return None

    def list_synced_documents(self, destination: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        List sync records, optionally filtered by destination path.

        Args:
            destination: Optional vault path filter

        Returns:
            List of records ordered by document id
        """
        connection = self._require_connection()
        query = """
            SELECT document_id, title, destination, content_hash, synced_at
            FROM synced_documents
        """
        params = []
        if destination:
            query += " WHERE destination = ?"
            params.append(destination)
        query += " ORDER BY document_id"

        return [_document_row(row) for row in connection.execute(query, params).fetchall()]

    def record_run(
        self,
        kind: str,
        mode: str,
        synced: int,
        skipped: int,
        started_at: datetime,
        finished_at: Optional[datetime] = None
    ) -> Optional[int]:
        """
        Record the outcome of a sync run.

        Args:
            kind: "notes" or "transcripts"
            mode: The routing mode value used for the run
            synced: Number of documents written
            skipped: Number of documents skipped
            started_at: When the run started
            finished_at: When the run finished (defaults to now)

        Returns:
            The run id
        """
        connection = self._require_connection()
        result = connection.execute("""
            INSERT INTO sync_runs (kind, mode, synced, skipped, started_at, finished_at)
            VALUES (?, ?, ?, ?, ?, ?)
            RETURNING run_id
        """, [kind, mode, synced, skipped, started_at, finished_at or datetime.now()]).fetchone()
        logging.info(f"Recorded {kind} sync run: {synced} synced, {skipped} skipped")
        return result[0] if result else None

    def latest_sync_time(self, kind: Optional[str] = None) -> Optional[datetime]:
        """
        Get when the most recent sync run finished.

        Args:
            kind: Optional run kind filter

        Returns:
            The finish time, or None if no run was recorded
        """
        connection = self._require_connection()
        if kind:
            row = connection.execute(
                "SELECT max(finished_at) FROM sync_runs WHERE kind = ?", [kind]
            ).fetchone()
        else:
            row = connection.execute("SELECT max(finished_at) FROM sync_runs").fetchone()
        return row[0] if row else None


def _document_row(row) -> Dict[str, Any]:
    return {
        "document_id": row[0],
        "title": row[1],
        "destination": row[2],
        "content_hash": row[3],
        "synced_at": row[4],
    }
