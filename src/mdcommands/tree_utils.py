"""Lookup and traversal helpers for Markdown trees.

Every lookup walks the live tree from the given root. Nothing is cached and
no parent pointers are stored, so results always reflect the latest mutation.
"""

from __future__ import annotations

from dataclasses import dataclass

from mdcommands.schemas import MarkdownNode, NodeType


@dataclass
class NodeLocation:
    """A node together with its parent and its index among the parent's children.

    For the root, ``parent`` is None and ``index`` is -1.
    """

    node: MarkdownNode
    parent: MarkdownNode | None
    index: int


def find_node_by_id(root: MarkdownNode, node_id: str) -> MarkdownNode | None:
    """Return the first node in pre-order whose id equals ``node_id``."""
    for node in root.walk():
        if node.id == node_id:
            return node
    return None


def find_parent_and_index(root: MarkdownNode, node_id: str) -> NodeLocation | None:
    """Locate the parent of ``node_id`` by scanning every node's direct children.

    Returns None if the id is unknown or belongs to the root, which has no parent.
    """
    for node in root.walk():
        for index, child in enumerate(node.children or []):
            if child.id == node_id:
                return NodeLocation(node=child, parent=node, index=index)
    return None


def find_node_and_parent(root: MarkdownNode, node_id: str) -> NodeLocation | None:
    """Find a node, its parent and its index in a single traversal."""
    stack: list[tuple[MarkdownNode, MarkdownNode | None, int]] = [(root, None, -1)]
    while stack:
        node, parent, index = stack.pop()
        if node.id == node_id:
            return NodeLocation(node=node, parent=parent, index=index)
        children = node.children or []
        # Reversed so children pop in document order.
        for child_index in range(len(children) - 1, -1, -1):
            stack.append((children[child_index], node, child_index))
    return None


def find_nodes_by_type(root: MarkdownNode, node_type: str | NodeType) -> list[MarkdownNode]:
    """Collect every node of the given type, in pre-order."""
    wanted = node_type.value if isinstance(node_type, NodeType) else node_type
    return [node for node in root.walk() if node.type == wanted]


def contains_id(subtree: MarkdownNode, node_id: str) -> bool:
    """True if ``node_id`` is ``subtree`` itself or one of its descendants."""
    return find_node_by_id(subtree, node_id) is not None


def truncate_text_nodes(root: MarkdownNode, max_length: int) -> int:
    """Cut the value of every text node to at most ``max_length`` characters.

    Returns:
        Number of text nodes that were shortened.
    """
    truncated = 0
    for node in root.walk():
        if node.type == NodeType.TEXT.value and node.value and len(node.value) > max_length:
            node.value = node.value[:max_length]
            truncated += 1
    return truncated
