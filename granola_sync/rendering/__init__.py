"""Renderers turning Granola data into Markdown."""

from .markdown import render, render_node, normalize_block
from .notes import (
    sanitize_filename,
    build_standalone_note,
    build_daily_entry,
    build_daily_section_body,
)
from .transcript import format_transcript, SpeakerResolver, DEFAULT_SPEAKERS

__all__ = [
    "render",
    "render_node",
    "normalize_block",
    "sanitize_filename",
    "build_standalone_note",
    "build_daily_entry",
    "build_daily_section_body",
    "format_transcript",
    "SpeakerResolver",
    "DEFAULT_SPEAKERS"
]
