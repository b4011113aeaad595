#!/usr/bin/env python3
"""
Granola Sync - Granola meeting notes into a Markdown vault

Main entry point. See granola_sync.cli for the available options.
"""

import sys

from granola_sync.cli import main


if __name__ == "__main__":
    sys.exit(main())
