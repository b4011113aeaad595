"""
Source tree models for Granola Sync.

Granola delivers note bodies as a loosely-typed JSON tree resembling a
ProseMirror document. These models accept that tree as-is: node kinds form an
open vocabulary and malformed parts are dropped rather than rejected, so that
one odd node never prevents a document from rendering.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NodeKind(str, Enum):
    """
    The node kinds the renderer knows how to format.

    Every other tag found in a source tree maps to UNKNOWN.
    """

    HEADING = "heading"
    PARAGRAPH = "paragraph"
    BULLET_LIST = "bulletList"
    LIST_ITEM = "listItem"
    TEXT = "text"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, tag: Any) -> "NodeKind":
        """
        Map a raw node tag to a NodeKind.

        Args:
            tag: The node's `type` value from the source tree

        Returns:
            The matching NodeKind, or NodeKind.UNKNOWN for anything unrecognized
        """
        try:
            return cls(tag)
        except ValueError:
            return cls.UNKNOWN


def _drop_malformed_children(value: Any) -> Optional[List[Any]]:
    if value is None:
        return None
    if not isinstance(value, list):
        return None
    return [item for item in value if isinstance(item, (dict, BaseModel))]


def flatten_raw_text(raw: Any) -> str:
    """
    Concatenate the text of every leaf of a raw source tree, in document order.

    Walks the tree with an explicit stack, so it handles trees too deeply
    nested to be validated as SourceNode models.
    """
    texts = []
    stack = [raw]
    while stack:
        node = stack.pop()
        if not isinstance(node, dict):
            continue
        children = _drop_malformed_children(node.get("content"))
        if children:
            stack.extend(reversed(children))
        elif isinstance(node.get("text"), str):
            texts.append(node["text"])
    return "".join(texts)


class SourceNode(BaseModel):
    """
    A single node of a source tree.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    kind: str = Field(
        default="",
        alias="type",
        description="The node tag, e.g. 'heading', 'paragraph' or 'bulletList'"
    )

    content: Optional[List["SourceNode"]] = Field(
        default=None,
        description="Ordered child nodes"
    )

    text: Optional[str] = Field(
        default=None,
        description="Literal text, used only when the node has no children"
    )

    attrs: Dict[str, Any] = Field(
        default_factory=dict,
        description="Node attributes such as a heading's level"
    )

    @field_validator("kind", mode="before")
    @classmethod
    def _coerce_kind(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> Optional[List[Any]]:
        return _drop_malformed_children(value)

    @field_validator("text", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("attrs", mode="before")
    @classmethod
    def _coerce_attrs(cls, value: Any) -> Dict[str, Any]:
        return value if isinstance(value, dict) else {}

    @property
    def node_kind(self) -> NodeKind:
        """The node's tag as a NodeKind."""
        return NodeKind.parse(self.kind)


class SourceDocument(BaseModel):
    """
    The root of a source tree. Only a tree whose kind is "doc" renders.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    kind: str = Field(default="", alias="type")

    content: Optional[List[SourceNode]] = Field(default=None)

    @field_validator("kind", mode="before")
    @classmethod
    def _coerce_kind(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> Optional[List[Any]]:
        return _drop_malformed_children(value)

    @classmethod
    def flattened(cls, raw: Any) -> "SourceDocument":
        """
        Build a single-paragraph document from the flattened text of a raw tree.

        Used for trees that cannot be validated node by node, such as trees
        nested deeper than the validator allows.
        """
        kind = raw.get("type") if isinstance(raw, dict) else ""
        return cls.model_validate({
            "type": kind,
            "content": [{"type": "paragraph", "text": flatten_raw_text(raw)}]
        })

    @property
    def is_renderable(self) -> bool:
        return self.kind == "doc" and self.content is not None


SourceNode.model_rebuild()
