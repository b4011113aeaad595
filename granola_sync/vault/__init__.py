"""Vault filesystem access."""

from .filesystem import VaultFileSystem, normalize_path

__all__ = ["VaultFileSystem", "normalize_path"]
