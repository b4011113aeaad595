"""
Pattern helpers for matching user-supplied text literally.
"""

import re


_METACHARACTERS = re.compile(r"[.*+?^${}()|\[\]\\]")


def escape_pattern(text: str) -> str:
    """
    Escape every regular-expression metacharacter in `text`.

    The escaped string matches only `text` itself when embedded in a pattern.

    Args:
        text: Arbitrary text, e.g. a heading line

    Returns:
        The text with . * + ? ^ $ { } ( ) | [ ] and backslash escaped
    """
    return _METACHARACTERS.sub(lambda match: "\\" + match.group(0), text)


def heading_level(heading_line: str) -> int:
    """Number of leading '#' characters; 0 for a line that is not a heading."""
    return len(heading_line) - len(heading_line.lstrip("#"))
