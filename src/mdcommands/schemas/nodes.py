"""Markdown tree node model."""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NodeType(str, Enum):
    """Node kinds produced by the parser and understood by the serializer.

    ``MarkdownNode.type`` stays an open string: kinds outside this set pass
    through untouched and keep their grammar-specific fields as extras.
    """

    ROOT = "root"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    THEMATIC_BREAK = "thematicBreak"
    BLOCKQUOTE = "blockquote"
    LIST = "list"
    LIST_ITEM = "listItem"
    CODE = "code"
    HTML = "html"
    TABLE = "table"
    TABLE_ROW = "tableRow"
    TABLE_CELL = "tableCell"
    TEXT = "text"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    DELETE = "delete"
    INLINE_CODE = "inlineCode"
    BREAK = "break"
    LINK = "link"
    IMAGE = "image"


class MarkdownNode(BaseModel):
    """A node in the Markdown tree with a synthetic id.

    Attributes:
        id: Unique identifier, assigned after parsing. ``None`` before that.
        type: Node kind (e.g. ``"heading"``, ``"paragraph"``, ``"text"``).
        depth: Heading level, for heading nodes.
        value: Text content, for leaf nodes.
        properties: Open map of auxiliary attributes.
        children: Child nodes. ``None`` marks a leaf that can never hold
            children; an empty list marks a container that currently has none.

    Grammar-specific attributes such as ``url``, ``lang`` or ``ordered`` are
    stored as pydantic extra fields.
    """

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    type: str
    depth: int | None = None
    value: str | None = None
    properties: dict[str, Any] | None = None
    children: list["MarkdownNode"] | None = Field(default=None)

    @property
    def node_type(self) -> NodeType | None:
        """Known kind of this node, or None for pass-through kinds."""
        try:
            return NodeType(self.type)
        except ValueError:
            return None

    @property
    def is_parent(self) -> bool:
        """True when the node may hold children."""
        return self.children is not None

    def attr(self, name: str, default: Any = None) -> Any:
        """Return a grammar-specific extra attribute."""
        return (self.model_extra or {}).get(name, default)

    def walk(self) -> Iterator[MarkdownNode]:
        """Traverse the subtree in pre-order, yielding self first."""
        yield self
        for child in self.children or []:
            yield from child.walk()

    def to_json_dict(self) -> dict[str, Any]:
        """Dump the subtree as JSON-compatible data, omitting unset fields."""
        return self.model_dump(mode="json", exclude_none=True)
