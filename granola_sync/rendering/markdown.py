"""
Markdown renderer for Granola source trees.

Converts a SourceDocument into a normalized Markdown block. The upstream tree
is produced by a system we do not control and may contain empty or unknown
nodes, so rendering never raises: unknown kinds fall back to their flattened
text and the final output is canonicalized (no runs of three or more
newlines, no surrounding whitespace).
"""

import logging
import re
from typing import Any, Callable, Dict, List, Union

from pydantic import ValidationError

from ..models import NodeKind, SourceDocument, SourceNode


_EXCESS_NEWLINES = re.compile(r"\n{3,}")


def _heading_level(node: SourceNode) -> int:
    level = node.attrs.get("level")
    try:
        level = int(level) if level else 1
    except (TypeError, ValueError):
        level = 1
    return max(1, level)


def _render_heading(node: SourceNode, text_content: str, children: List[str]) -> str:
    return f"{'#' * _heading_level(node)} {text_content.strip()}\n\n"


def _render_paragraph(node: SourceNode, text_content: str, children: List[str]) -> str:
    trimmed = text_content.strip()
    return f"{trimmed}\n\n" if trimmed else ""


def _render_bullet_list(node: SourceNode, text_content: str, children: List[str]) -> str:
    items = []
    for item, item_markdown in zip(node.content or [], children):
        if item.node_kind is not NodeKind.LIST_ITEM:
            continue
        item_content = item_markdown.strip() if item.content else ""
        # Empty items are dropped instead of emitting a bare "- "
        if item_content:
            items.append(f"- {item_content}")

    if not items:
        return ""
    return "\n".join(items) + "\n\n"


def _render_text(node: SourceNode, text_content: str, children: List[str]) -> str:
    return node.text or ""


def _render_flattened(node: SourceNode, text_content: str, children: List[str]) -> str:
    return text_content


_RENDERERS: Dict[NodeKind, Callable[[SourceNode, str, List[str]], str]] = {
    NodeKind.HEADING: _render_heading,
    NodeKind.PARAGRAPH: _render_paragraph,
    NodeKind.BULLET_LIST: _render_bullet_list,
    NodeKind.TEXT: _render_text,
    NodeKind.LIST_ITEM: _render_flattened,
    NodeKind.UNKNOWN: _render_flattened,
}


def render_node(node: SourceNode) -> str:
    """
    Render a single node and its subtree.

    The tree is walked children first with an explicit stack, so nesting
    depth is not limited by the interpreter's recursion limit.

    Args:
        node: The node to render

    Returns:
        The node's Markdown fragment (not yet normalized)
    """
    rendered: List[str] = []
    stack = [(node, False)]
    while stack:
        current, children_done = stack.pop()
        content = current.content or []
        if content and not children_done:
            stack.append((current, True))
            stack.extend((child, False) for child in reversed(content))
            continue

        # The children's fragments are the last len(content) entries
        split = len(rendered) - len(content)
        children = rendered[split:]
        del rendered[split:]

        text_content = "".join(children) if content else (current.text or "")
        renderer = _RENDERERS.get(current.node_kind, _render_flattened)
        rendered.append(renderer(current, text_content, children))

    return rendered[0]


def normalize_block(markdown: str) -> str:
    """Collapse runs of blank lines and trim surrounding whitespace."""
    return _EXCESS_NEWLINES.sub("\n\n", markdown).strip()


def render(doc: Union[SourceDocument, Dict[str, Any], None]) -> str:
    """
    Render a source tree to a normalized Markdown block.

    A raw tree that cannot be validated node by node, for instance one nested
    deeper than the validator allows, renders as its flattened text.

    Args:
        doc: A SourceDocument, the raw JSON mapping of one, or None

    Returns:
        The rendered Markdown, or an empty string for absent or non-"doc" input
    """
    if doc is None:
        return ""

    if isinstance(doc, dict):
        try:
            doc = SourceDocument.model_validate(doc)
        except ValidationError as e:
            logging.warning(f"Source tree could not be validated, rendering its flattened text: {e}")
            doc = SourceDocument.flattened(doc)

    if not isinstance(doc, SourceDocument) or not doc.is_renderable:
        return ""

    return normalize_block("".join(render_node(node) for node in doc.content or []))
