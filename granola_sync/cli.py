"""
Command line interface for Granola Sync.

Coordinates a sync run: configuration, credentials, document import, rendering
and writing into the vault.
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from .config import ConfigManager, SyncSettings, config
from .credentials import CredentialsLoader
from .database import SyncStateManager
from .errors import CredentialError, GranolaSyncError
from .importers import BaseImporter, FileImporter, GranolaImporter, MockImporter
from .sync import SyncReport, SyncRunner
from .vault import VaultFileSystem


def setup_logging(manager: Optional[ConfigManager] = None):
    """Configure logging for the application."""
    manager = manager or config
    level = getattr(logging, str(manager.get("logging.level", "INFO")).upper(), logging.INFO)
    format_str = manager.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    log_file = manager.log_filename

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file)
        ]
    )


def create_importer(importer_type: str, vault: VaultFileSystem, manager: ConfigManager,
                    export_path: Optional[str] = None) -> BaseImporter:
    """
    Build the document importer for a run.

    The live importer resolves credentials first, so a credential failure
    stops the run before anything is written.

    Args:
        importer_type: "granola", "file" or "mock"
        vault: The target vault (credential files are vault-relative)
        manager: Active configuration
        export_path: Export file for the file importer

    Raises:
        GranolaSyncError: If credentials cannot be resolved or the arguments are incomplete
    """
    if importer_type == "mock":
        logging.info("Using mock importer with sample meetings")
        return MockImporter()

    if importer_type == "file":
        if not export_path:
            raise GranolaSyncError("--export-path is required for the file importer")
        return FileImporter(export_path)

    access_token = CredentialsLoader(vault, manager).load()
    return GranolaImporter.from_config(access_token, manager)


def run_sync(importer: BaseImporter, vault: VaultFileSystem, settings: SyncSettings,
             manager: ConfigManager, transcripts: bool = False) -> List[SyncReport]:
    """
    Run one note sync, and optionally a transcript sync, against the vault.

    Returns:
        The SyncReport of each run performed
    """
    db_path = str(Path(manager.vault_root) / manager.database_filename)
    reports = []
    documents = importer.get_all_documents()

    with SyncStateManager(db_path) as state:
        runner = SyncRunner(importer, vault, settings, state=state)

        reports.append(runner.sync_notes(documents))
        if transcripts:
            reports.append(runner.sync_transcripts(documents))

        last_sync = state.latest_sync_time()
        if last_sync:
            logging.info(f"Last synced {last_sync:%Y-%m-%d %H:%M:%S}")

    for report in reports:
        for item in report.skipped:
            logging.info(f"  skipped {item.title} ({item.document_id}): {item.reason}")

    return reports


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Granola Sync - Granola meeting notes into a Markdown vault",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                      # Sync notes using config.yaml
  python main.py --importer mock --vault ./demo       # Try it with sample meetings
  python main.py --destination flat --transcripts     # Standalone notes plus transcripts
  python main.py --importer file --export-path docs.json
  python main.py --watch                              # Repeat every sync.interval seconds
        """
    )

    parser.add_argument(
        "--importer",
        choices=["granola", "file", "mock"],
        default="granola",
        help="Document source to use (default: granola)"
    )

    parser.add_argument(
        "--export-path",
        type=str,
        help="Path to a JSON documents export (required for the file importer)"
    )

    parser.add_argument(
        "--config",
        type=str,
        default="config.yaml",
        help="Path to the configuration file (default: config.yaml)"
    )

    parser.add_argument(
        "--vault",
        type=str,
        help="Vault directory (overrides vault.root)"
    )

    parser.add_argument(
        "--destination",
        choices=["flat", "daily_note", "daily_folder"],
        help="Routing mode (overrides sync.destination)"
    )

    parser.add_argument(
        "--transcripts",
        action="store_true",
        help="Also sync meeting transcripts"
    )

    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep running and sync every sync.interval seconds"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="Granola Sync 0.1.0"
    )

    return parser.parse_args(argv)


def load_configuration(args) -> ConfigManager:
    """Load the configuration file and apply command line overrides."""
    manager = config if args.config == str(config.config_path) else ConfigManager(args.config)
    if args.vault:
        manager.set("vault.root", args.vault)
    if args.destination:
        manager.set("sync.destination", args.destination)
    if args.transcripts:
        manager.set("sync.sync_transcripts", True)
    return manager


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)
    manager = load_configuration(args)
    setup_logging(manager)

    logging.info("Granola Sync - Granola meeting notes into a Markdown vault")

    try:
        settings = SyncSettings.from_config(manager)
        vault = VaultFileSystem(manager.vault_root)
        vault.root.mkdir(parents=True, exist_ok=True)
        importer = create_importer(args.importer, vault, manager, args.export_path)
    except CredentialError as e:
        logging.error(f"Granola Sync Error: {e} ({e.reason.value})")
        return 1
    except (GranolaSyncError, OSError) as e:
        logging.error(f"Granola Sync Error: {e}")
        return 1

    transcripts = bool(manager.get("sync.sync_transcripts", False))

    with importer:
        while True:
            try:
                for report in run_sync(importer, vault, settings, manager, transcripts):
                    print(f"Granola Sync: Complete. {report.summary}.")
            except GranolaSyncError as e:
                logging.error(f"Sync failed: {e}")
                if not args.watch:
                    return 1
            except KeyboardInterrupt:
                logging.info("Sync interrupted by user")
                return 130

            if not args.watch:
                return 0

            interval = manager.sync_interval
            logging.info(f"Next sync in {interval} seconds")
            try:
                time.sleep(interval)
            except KeyboardInterrupt:
                logging.info("Periodic sync stopped by user")
                return 0


if __name__ == "__main__":
    sys.exit(main())
