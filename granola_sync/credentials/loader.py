"""
Access token resolution for Granola Sync.

The Granola app stores its session in a `supabase.json` file whose
`cognito_tokens` field is itself a JSON document holding the access token.
The token is read either from a copy of that file inside the vault, or
through the loopback credentials server from the app's own data directory.
Every failure raises a CredentialError naming its cause, and a sync run
stops before writing anything.
"""

import json
import logging
import re
from typing import Any, Optional, Union

import httpx

from ..config import ConfigManager, config
from ..errors import CredentialError, CredentialFailure, VaultError
from ..vault import VaultFileSystem
from .server import CredentialServer, DEFAULT_HOST, DEFAULT_PORT


_WINDOWS_ABSOLUTE = re.compile(r"^[A-Za-z]:\\")


def parse_token_payload(payload: Union[str, bytes, dict, Any]) -> str:
    """
    Extract the access token from a credentials payload.

    Args:
        payload: The raw file content, or an already decoded mapping

    Returns:
        The access token

    Raises:
        CredentialError: INVALID_JSON if the payload cannot be decoded,
            TOKEN_MISSING if it holds no access token
    """
    try:
        data = json.loads(payload) if isinstance(payload, (str, bytes)) else payload
        if isinstance(data, str):
            data = json.loads(data)
        tokens = data.get("cognito_tokens") if isinstance(data, dict) else None
        if isinstance(tokens, (str, bytes)):
            tokens = json.loads(tokens)
    except ValueError as e:
        # Covers undecodable bytes as well as malformed JSON
        logging.error(f"Token file parse error: {e}")
        raise CredentialError(
            CredentialFailure.INVALID_JSON,
            "Invalid JSON format in credentials file. Please ensure the file is properly formatted."
        ) from e

    if not isinstance(data, dict):
        raise CredentialError(
            CredentialFailure.INVALID_JSON,
            "Invalid JSON format in credentials file. Expected a JSON object."
        )

    access_token = tokens.get("access_token") if isinstance(tokens, dict) else None
    if not access_token or not isinstance(access_token, str):
        raise CredentialError(
            CredentialFailure.TOKEN_MISSING,
            "No access token found in credentials file. The token may have expired."
        )
    return access_token


class CredentialsLoader:
    """
    Resolves the Granola access token from the configured source.
    """

    def __init__(self, vault: VaultFileSystem, config_manager: Optional[ConfigManager] = None):
        """
        Initialize the loader.

        Args:
            vault: The vault the token file path is relative to
            config_manager: Configuration to read credential settings from
        """
        self.vault = vault
        self.config = config_manager or config

    def load(self) -> str:
        """
        Load the access token using `credentials.source`.

        Returns:
            The access token

        Raises:
            CredentialError: If the token cannot be resolved
        """
        source = str(self.config.get("credentials.source", "file")).lower()
        if source == "loopback":
            return self.load_via_loopback()
        return self.load_from_file(self.config.get("credentials.token_path", ""))

    def load_from_file(self, token_path: Optional[str]) -> str:
        """
        Read the token from a credentials file inside the vault.

        Args:
            token_path: Vault-relative path of the credentials file
        """
        if not token_path:
            raise CredentialError(
                CredentialFailure.NOT_CONFIGURED,
                "Token path is not configured in settings."
            )

        if token_path.startswith("/") or _WINDOWS_ABSOLUTE.match(token_path):
            raise CredentialError(
                CredentialFailure.ABSOLUTE_PATH,
                "Token path appears to be an absolute path. Please ensure it's a path "
                "relative to your vault root, e.g., 'configs/supabase.json'."
            )

        try:
            found = self.vault.exists(token_path)
        except VaultError as e:
            raise CredentialError(CredentialFailure.ABSOLUTE_PATH, str(e)) from e

        if not found:
            raise CredentialError(
                CredentialFailure.FILE_NOT_FOUND,
                f"Credentials file not found at '{token_path}'. Please check the path in settings."
            )

        try:
            content = self.vault.read(token_path)
        except UnicodeDecodeError as e:
            raise CredentialError(
                CredentialFailure.INVALID_JSON,
                f"Credentials file '{token_path}' is not valid UTF-8 text."
            ) from e
        except OSError as e:
            raise CredentialError(
                CredentialFailure.FILE_NOT_FOUND,
                f"Failed to read credentials file '{token_path}': {e}"
            ) from e

        token = parse_token_payload(content)
        logging.info(f"Loaded Granola access token from {token_path}")
        return token

    def load_via_loopback(self) -> str:
        """
        Fetch the token through a short-lived loopback credentials server.

        The server is started for this single request and always stopped.
        """
        server = CredentialServer(
            self.config.get("credentials.loopback_source", ""),
            host=self.config.get("credentials.loopback_host", DEFAULT_HOST),
            port=int(self.config.get("credentials.loopback_port", DEFAULT_PORT))
        )

        try:
            server.start()
        except OSError as e:
            raise CredentialError(
                CredentialFailure.UNREACHABLE,
                f"Could not start the credentials server: {e}"
            ) from e

        try:
            with httpx.Client(timeout=10.0, trust_env=False) as client:
                response = client.get(server.url)
        except httpx.HTTPError as e:
            raise CredentialError(
                CredentialFailure.UNREACHABLE,
                f"Failed to load credentials from {server.url}. "
                "Please check if the credentials server is running."
            ) from e
        finally:
            server.stop()

        if response.status_code == 404:
            raise CredentialError(
                CredentialFailure.FILE_NOT_FOUND,
                f"Granola credentials file not found at '{server.source_path}'."
            )
        if response.status_code != 200:
            raise CredentialError(
                CredentialFailure.UNREACHABLE,
                f"Credentials server answered with status {response.status_code}."
            )

        token = parse_token_payload(response.content)
        logging.info("Loaded Granola access token through the credentials server")
        return token
