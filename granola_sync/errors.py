"""
Exception types for Granola Sync.

Failures that abort a whole sync run (credentials, API, configuration) are
raised as subclasses of GranolaSyncError. Failures local to one document are
caught by the sync runner and reported as skipped items instead.
"""

from enum import Enum
from typing import Optional


class GranolaSyncError(Exception):
    """Base class for all Granola Sync errors."""


class ConfigurationError(GranolaSyncError):
    """Raised when the sync configuration is invalid or incomplete."""


class CredentialFailure(str, Enum):
    """Reasons a credential could not be resolved."""

    NOT_CONFIGURED = "not_configured"
    ABSOLUTE_PATH = "absolute_path"
    FILE_NOT_FOUND = "file_not_found"
    INVALID_JSON = "invalid_json"
    TOKEN_MISSING = "token_missing"
    UNREACHABLE = "unreachable"


class CredentialError(GranolaSyncError):
    """
    Raised when the Granola access token cannot be loaded.

    Attributes:
        reason: The CredentialFailure describing the cause
    """

    def __init__(self, reason: CredentialFailure, message: str):
        super().__init__(message)
        self.reason = reason


class ApiError(GranolaSyncError):
    """
    Raised when the Granola API cannot be reached or answers with an error.

    Attributes:
        status_code: HTTP status code, or None for transport failures
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class VaultError(GranolaSyncError):
    """Raised when a vault path is invalid or a vault operation fails."""


class StateError(GranolaSyncError):
    """Raised when the sync state database cannot be opened."""
