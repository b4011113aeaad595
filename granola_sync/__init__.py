"""
Granola Sync: Granola meeting notes into a Markdown vault.

Renders Granola's rich-text notes to Markdown and files them as standalone
notes or as a section merged into each day's daily note.
"""

__version__ = "0.1.0"
__author__ = "Granola Sync Project"

# Import main components
from .errors import (
    GranolaSyncError,
    ConfigurationError,
    CredentialError,
    CredentialFailure,
    ApiError,
    VaultError,
    StateError,
)
from .models import DocumentRecord, TranscriptEntry, SourceDocument, SourceNode, NodeKind
from .rendering import render, format_transcript
from .merging import merge_section, escape_pattern
from .routing import RoutingMode, route
from .importers import BaseImporter, MockImporter, FileImporter, GranolaImporter
from .database import SyncStateManager
from .sync import SyncRunner, SyncReport

__all__ = [
    "GranolaSyncError",
    "ConfigurationError",
    "CredentialError",
    "CredentialFailure",
    "ApiError",
    "VaultError",
    "StateError",
    "DocumentRecord",
    "TranscriptEntry",
    "SourceDocument",
    "SourceNode",
    "NodeKind",
    "render",
    "format_transcript",
    "merge_section",
    "escape_pattern",
    "RoutingMode",
    "route",
    "BaseImporter",
    "MockImporter",
    "FileImporter",
    "GranolaImporter",
    "SyncStateManager",
    "SyncRunner",
    "SyncReport",
]
