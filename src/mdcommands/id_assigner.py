"""Synthetic node id assignment."""

from __future__ import annotations

import re
from uuid import uuid4

from mdcommands.schemas import MarkdownNode

_COUNTER_ID_RE = re.compile(r"^node-(\d+)$")


def assign_node_ids(tree: MarkdownNode) -> int:
    """Stamp every node in the tree with an id of the form ``node-<n>``.

    Nodes are numbered in pre-order, root first. A freshly parsed tree is
    numbered from zero. When the tree already carries counter ids, numbering
    continues above the highest one, so a re-run replaces every id and no
    earlier id keeps resolving. The counter is local to this call.

    Args:
        tree: Root of the tree to stamp.

    Returns:
        Number of nodes stamped.
    """
    counter = _next_free_index(tree)
    stamped = 0
    for node in tree.walk():
        node.id = f"node-{counter}"
        counter += 1
        stamped += 1
    return stamped


def _next_free_index(tree: MarkdownNode) -> int:
    highest = -1
    for node in tree.walk():
        match = _COUNTER_ID_RE.match(node.id or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return highest + 1


def generate_unique_id() -> str:
    """Return a fresh id for a node created after assignment."""
    return f"node-{uuid4().hex}"
