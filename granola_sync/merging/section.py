"""
Section-scoped merging of Markdown files.

A section is the region of a file that starts at an exact heading line and
runs until the next heading of the same or a shallower level (or the end of
the file). Merging replaces that region wholesale, or appends it when the
heading is absent, leaving everything else in the file untouched. Merging the
same heading and body twice yields the same text as merging it once.
"""

import re
from typing import NamedTuple, Optional, Pattern

from .patterns import escape_pattern, heading_level


class SectionSpan(NamedTuple):
    """Character offsets of a located section inside a file's text."""

    start: int
    body_start: int
    end: int


def build_heading_pattern(heading_line: str) -> Pattern[str]:
    """Pattern matching `heading_line` as a whole line, trailing blanks allowed."""
    return re.compile(rf"^{escape_pattern(heading_line)}[ \t]*\r?$", re.MULTILINE)


def build_boundary_pattern(level: int) -> Optional[Pattern[str]]:
    """
    Pattern matching a heading line of level 1..`level`.

    Deeper headings belong to the section and do not end it. A level of 0
    means the section has no heading boundary and runs to the end of file.

    Args:
        level: The nesting level of the section heading

    Returns:
        The compiled pattern, or None when only the end of file bounds the section
    """
    if level <= 0:
        return None
    return re.compile(rf"^#{{1,{level}}}(?!#)(?:[ \t]|$)", re.MULTILINE)


BLANK_LINES = re.compile(r"(?:[ \t]*\r?\n)*")


def ends_section(text: str, position: int, boundary_pattern: Optional[Pattern[str]]) -> bool:
    """
    Check whether `position` sits at the end of a section.

    Only blank lines may separate `position` from the end of the file or from
    a boundary heading, and `position` itself must be at the end of a line.
    """
    if position < len(text) and text[position] not in "\r\n":
        return False
    rest = BLANK_LINES.match(text, position).end()
    if not text[rest:].strip():
        return True
    return boundary_pattern is not None and boundary_pattern.match(text, rest) is not None


def find_section(text: str, heading_line: str, body: str = "") -> Optional[SectionSpan]:
    """
    Locate the first section introduced by `heading_line`.

    The span covers the heading line and every body line up to the last
    non-blank one; blank lines separating the body from the next boundary
    heading are left outside the span. When the section already consists of
    exactly `body`, followed only by blank lines before the next boundary or
    the end of the file, the boundary search starts after it, so headings
    inside a previously merged body do not cut the section short.

    Args:
        text: The file content to search
        heading_line: The exact heading line
        body: The trimmed body about to be written, if any

    Returns:
        The section span, or None if the heading does not occur
    """
    match = build_heading_pattern(heading_line).search(text)
    if not match:
        return None

    body_start = match.end()
    boundary_pattern = build_boundary_pattern(heading_level(heading_line))

    search_from = body_start
    if body and text.startswith("\n" + body, body_start):
        body_end = body_start + 1 + len(body)
        if ends_section(text, body_end, boundary_pattern):
            search_from = body_end

    region_end = len(text)
    if boundary_pattern is not None:
        boundary = boundary_pattern.search(text, search_from)
        if boundary:
            region_end = boundary.start()

    content_end = body_start + len(text[body_start:region_end].rstrip())
    line_end = text.find("\n", content_end, region_end)
    end = line_end + 1 if line_end != -1 else region_end

    return SectionSpan(start=match.start(), body_start=body_start, end=end)


def format_section(heading_line: str, body: str) -> str:
    """Heading line, then the trimmed body, each ending in a newline."""
    body = body.strip()
    if not body:
        return f"{heading_line}\n"
    return f"{heading_line}\n{body}\n"


def merge_section(existing_text: str, heading_line: str, new_section_body: str) -> str:
    """
    Replace or append the section introduced by `heading_line`.

    Args:
        existing_text: Current content of the target file ("" for a new file)
        heading_line: The section heading, including its leading '#' characters
        new_section_body: The section's new body

    Returns:
        The new full content of the file

    Raises:
        ValueError: If `heading_line` is blank
    """
    if not heading_line.strip():
        raise ValueError("Section heading must not be blank")

    body = new_section_body.strip()
    section = format_section(heading_line, body)

    span = find_section(existing_text, heading_line, body)
    if span is not None:
        return existing_text[:span.start] + section + existing_text[span.end:]

    if not existing_text.strip():
        return section
    return existing_text.rstrip(" \t\r\n") + "\n\n" + section
