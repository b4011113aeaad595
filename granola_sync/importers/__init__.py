"""Document sources for Granola Sync."""

from .base import BaseImporter
from .mock import MockImporter
from .granola_api import GranolaClient, GranolaImporter
from .file_export import FileImporter

__all__ = ["BaseImporter", "MockImporter", "GranolaClient", "GranolaImporter", "FileImporter"]
