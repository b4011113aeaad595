"""
Configuration management for Granola Sync.

This module handles loading and accessing configuration values from config.yaml.
It provides a centralized way to manage all settings and makes it easy to
modify behavior without changing code.
"""

import yaml
import copy
from pathlib import Path
from typing import Any, Dict, Optional
import logging

from pydantic import BaseModel, Field

from .errors import ConfigurationError
from .routing import RoutingMode


DEFAULT_CONFIG: Dict[str, Any] = {
    "granola": {
        "api_base": "https://api.granola.ai",
        "client_version": "0.1.7",
        "timeout": 30.0,
        "page_limit": 100
    },
    "credentials": {
        "source": "file",
        "token_path": "configs/supabase.json",
        "loopback_host": "127.0.0.1",
        "loopback_port": 2590,
        "loopback_source": "~/Library/Application Support/Granola/supabase.json"
    },
    "vault": {
        "root": "vault"
    },
    "sync": {
        "destination": "daily_note",
        "granola_folder": "Granola",
        "daily_note_heading": "## Granola Notes",
        "interval": 1800,
        "sync_transcripts": False
    },
    "daily_notes": {
        "folder": "",
        "format": "YYYY-MM-DD"
    },
    "transcripts": {
        "speakers": {
            "microphone": "Me",
            "system": "Guest"
        }
    },
    "database": {
        "filename": "granola_sync.db"
    },
    "paths": {
        "log_file": "granola_sync.log"
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    }
}


class ConfigManager:
    """
    Manages configuration loading and access for Granola Sync.
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file, layered over the defaults."""
        try:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}

            if not isinstance(loaded, dict):
                raise ValueError(f"Configuration root must be a mapping: {self.config_path}")

            self._config = _deep_merge(self._get_default_config(), loaded)
            logging.info(f"Configuration loaded from {self.config_path}")

        except (OSError, ValueError, yaml.YAMLError) as e:
            logging.warning(f"Failed to load configuration, using defaults: {e}")
            self._config = self._get_default_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return copy.deepcopy(DEFAULT_CONFIG)

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "sync.destination")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("sync.destination")  # Returns "daily_note"
            config.get("daily_notes.format")  # Returns "YYYY-MM-DD"
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def set(self, key_path: str, value: Any) -> None:
        """
        Override a configuration value in memory (e.g. from a CLI flag).

        Args:
            key_path: Dot-separated path to the configuration value
            value: The new value
        """
        keys = key_path.split('.')
        section = self._config
        for key in keys[:-1]:
            if not isinstance(section.get(key), dict):
                section[key] = {}
            section = section[key]
        section[keys[-1]] = value

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience properties for commonly used values

    @property
    def api_base(self) -> str:
        """Get Granola API base URL."""
        return self.get("granola.api_base", "https://api.granola.ai")

    @property
    def client_version(self) -> str:
        """Get the client version reported to the Granola API."""
        return str(self.get("granola.client_version", "0.1.7"))

    @property
    def api_timeout(self) -> float:
        """Get Granola API timeout."""
        return float(self.get("granola.timeout", 30.0))

    @property
    def vault_root(self) -> str:
        return self.get("vault.root", "vault")

    @property
    def destination(self) -> str:
        return self.get("sync.destination", "daily_note")

    @property
    def granola_folder(self) -> str:
        return self.get("sync.granola_folder", "Granola")

    @property
    def daily_note_heading(self) -> str:
        return self.get("sync.daily_note_heading", "## Granola Notes")

    @property
    def sync_interval(self) -> int:
        """Get the periodic sync interval in seconds."""
        return int(self.get("sync.interval", 1800))

    @property
    def database_filename(self) -> str:
        """Get database filename."""
        return self.get("database.filename", "granola_sync.db")

    @property
    def log_filename(self) -> str:
        """Get log file name."""
        return self.get("paths.log_file", "granola_sync.log")

    @property
    def speakers(self) -> Dict[str, str]:
        """Get the transcript source-to-speaker mapping."""
        return self.get("transcripts.speakers", {
            "microphone": "Me",
            "system": "Guest"
        })


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


class SyncSettings(BaseModel):
    """
    The validated settings a sync run works with.
    """

    destination: RoutingMode = Field(
        default=RoutingMode.DAILY_NOTE_MERGE,
        description="Where rendered notes are written"
    )

    granola_folder: str = Field(
        default="Granola",
        description="Folder for standalone notes and transcripts"
    )

    daily_note_heading: str = Field(
        default="## Granola Notes",
        description="Heading of the Granola section inside daily notes"
    )

    daily_note_folder: str = Field(
        default="",
        description="Base folder of the daily notes"
    )

    daily_note_format: str = Field(
        default="YYYY-MM-DD",
        description="Daily note filename format; may contain '/'"
    )

    speakers: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_config(cls, manager: Optional[ConfigManager] = None) -> "SyncSettings":
        """
        Build validated settings from a ConfigManager.

        Raises:
            ConfigurationError: If the destination mode is unknown, or a mode
                is missing the folder or heading it needs
        """
        manager = manager or config
        try:
            destination = RoutingMode.from_setting(manager.destination)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        settings = cls(
            destination=destination,
            granola_folder=str(manager.granola_folder or "").strip(),
            daily_note_heading=str(manager.daily_note_heading or "").strip(),
            daily_note_folder=str(manager.get("daily_notes.folder", "") or ""),
            daily_note_format=str(manager.get("daily_notes.format", "YYYY-MM-DD") or "YYYY-MM-DD"),
            speakers=dict(manager.speakers or {})
        )

        if settings.destination is RoutingMode.FLAT and not settings.granola_folder:
            raise ConfigurationError(
                "No folder configured: set sync.granola_folder or choose a daily-note destination"
            )
        if settings.destination is RoutingMode.DAILY_NOTE_MERGE and not settings.daily_note_heading:
            raise ConfigurationError("sync.daily_note_heading must not be empty for daily-note merging")

        return settings


# Global configuration instance
config = ConfigManager()


def get_config() -> ConfigManager:
    """
    Get the global configuration instance.

    Returns:
        The global ConfigManager instance
    """
    return config
