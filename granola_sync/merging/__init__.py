"""Section-scoped merging of rendered notes into existing files."""

from .patterns import escape_pattern, heading_level
from .section import merge_section, find_section, format_section, SectionSpan

__all__ = [
    "escape_pattern",
    "heading_level",
    "merge_section",
    "find_section",
    "format_section",
    "SectionSpan"
]
