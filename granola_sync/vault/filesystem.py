"""
Vault filesystem access for Granola Sync.

All paths handed to the vault are vault-relative and '/'-separated, the way
note applications address files. They are normalized and refused if they
would resolve outside the vault root.
"""

import logging
import posixpath
from pathlib import Path

from ..errors import VaultError


def normalize_path(path: str) -> str:
    """
    Normalize a vault-relative path.

    Backslashes become '/', duplicate and trailing separators are removed and
    '.' segments are resolved. The vault root itself is "".
    """
    cleaned = path.replace("\\", "/").strip().strip("/")
    if not cleaned:
        return ""
    normalized = posixpath.normpath(cleaned)
    return "" if normalized == "." else normalized


class VaultFileSystem:
    """
    Reads and writes notes inside a vault directory.
    """

    def __init__(self, root: str):
        """
        Initialize the vault.

        Args:
            root: Path to the vault directory
        """
        self.root = Path(root).expanduser().resolve()

    def resolve(self, path: str) -> Path:
        """
        Map a vault-relative path to a filesystem path.

        Raises:
            VaultError: If the path escapes the vault root
        """
        normalized = normalize_path(path)
        target = (self.root / normalized).resolve() if normalized else self.root
        if target != self.root and self.root not in target.parents:
            raise VaultError(f"Path escapes the vault: {path}")
        return target

    def exists(self, path: str) -> bool:
        return self.resolve(path).exists()

    def read(self, path: str) -> str:
        with open(self.resolve(path), 'r', encoding='utf-8') as f:
            return f.read()

    def write(self, path: str, content: str) -> None:
        """
        Write a file, replacing any existing content.

        The parent folder must already exist; use ensure_folder() first.
        """
        with open(self.resolve(path), 'w', encoding='utf-8') as f:
            f.write(content)
        logging.debug(f"Wrote {path}")

    def create_folder(self, path: str) -> None:
        self.resolve(path).mkdir(parents=True, exist_ok=True)
        logging.info(f"Created folder: {normalize_path(path) or '/'}")

    def ensure_folder(self, path: str) -> bool:
        """
        Create a folder unless it already exists.

        Args:
            path: Vault-relative folder path

        Returns:
            True if the folder exists afterwards, False if it could not be created
        """
        try:
            if not self.exists(path):
                self.create_folder(path)
            return True
        except (OSError, VaultError) as e:
            logging.error(f"Could not create folder '{path}': {e}")
            return False
