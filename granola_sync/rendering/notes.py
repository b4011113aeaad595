"""
Note assembly for Granola Sync.

Builds the text written to the vault: standalone notes with a metadata block,
and the per-document entries that make up a daily note's Granola section.
"""

import re
from typing import Iterable, List, Tuple

from ..models import DocumentRecord


MAX_FILENAME_LENGTH = 200

_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')
_WHITESPACE_RUN = re.compile(r"\s+")
_LINE_BREAKS = re.compile(r"[ \t]*[\r\n\x85\u2028\u2029]+[ \t]*")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def sanitize_filename(title: str) -> str:
    """
    Turn a note title into a safe filename stem.

    Characters invalid on common filesystems are removed, whitespace runs
    become single underscores and the result is truncated.

    Args:
        title: The note title

    Returns:
        The filename stem, without extension
    """
    filename = _INVALID_FILENAME_CHARS.sub("", title)
    filename = _WHITESPACE_RUN.sub("_", filename)
    return filename[:MAX_FILENAME_LENGTH]


def escape_yaml_title(title: str) -> str:
    """
    Make a title safe inside a one-line double-quoted YAML scalar.

    Line breaks fold into single spaces, backslashes and quotes are escaped
    and other control characters become \\xNN escapes.
    """
    title = _LINE_BREAKS.sub(" ", title)
    title = title.replace("\\", "\\\\").replace('"', '\\"')
    return _CONTROL_CHARS.sub(lambda match: f"\\x{ord(match.group()):02x}", title)


def build_standalone_note(document: DocumentRecord, markdown: str) -> str:
    """
    Build the full text of a standalone note file.

    Args:
        document: The source document (for its metadata)
        markdown: The document's rendered block

    Returns:
        Metadata block, a blank line, then the rendered block
    """
    lines = [
        "---",
        f"id: {document.id}",
        f'title: "{escape_yaml_title(document.title)}"',
    ]
    if document.created_at:
        lines.append(f"created_at: {document.created_at}")
    if document.updated_at:
        lines.append(f"updated_at: {document.updated_at}")
    lines.extend(["---", ""])

    return "\n".join(lines) + "\n" + markdown


def build_daily_entry(document: DocumentRecord, markdown: str) -> str:
    """Build one document's entry inside a daily note section."""
    entry = f"### {document.title}\n"
    entry += f"**ID:** {document.id}\n"
    if document.created_at:
        entry += f"**Created:** {document.created_at}\n"
    if document.updated_at:
        entry += f"**Updated:** {document.updated_at}\n"
    entry += f"\n{markdown}\n"
    return entry


def build_daily_section_body(entries: Iterable[Tuple[DocumentRecord, str]]) -> str:
    """
    Join the entries of every document sharing a date into one section body.

    Args:
        entries: (document, rendered block) pairs in document order

    Returns:
        The section body, without the section heading
    """
    parts: List[str] = [build_daily_entry(document, markdown) for document, markdown in entries]
    return "\n".join(parts).strip()
