"""Resolution of the Granola access token."""

from .loader import CredentialsLoader, parse_token_payload
from .server import CredentialServer

__all__ = ["CredentialsLoader", "parse_token_payload", "CredentialServer"]
