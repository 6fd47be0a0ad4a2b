"""Tests for tree lookup helpers."""

from __future__ import annotations

from mdcommands.id_assigner import assign_node_ids
from mdcommands.markdown import parse_markdown
from mdcommands.schemas import MarkdownNode, NodeType
from mdcommands.tree_utils import (
    contains_id,
    find_node_and_parent,
    find_node_by_id,
    find_nodes_by_type,
    find_parent_and_index,
    truncate_text_nodes,
)


class TestFindNodeById:
    """Tests for find_node_by_id."""

    def test_finds_every_assigned_id(self) -> None:
        """Every id produced by assignment resolves to its own node."""
        tree = parse_markdown("# A\n\ntext with `code`\n\n1. x\n2. y\n")
        assign_node_ids(tree)

        for node in tree.walk():
            assert find_node_by_id(tree, node.id) is node

    def test_unknown_id_returns_none(self, intro_tree: MarkdownNode) -> None:
        """Ids not present in the tree are not found."""
        assert find_node_by_id(intro_tree, "node-99") is None
        assert find_node_by_id(intro_tree, "") is None

    def test_returns_first_preorder_match_for_duplicates(self, intro_tree: MarkdownNode) -> None:
        """With duplicate ids the first node in pre-order wins."""
        heading, paragraph = intro_tree.children
        paragraph.id = heading.id

        assert find_node_by_id(intro_tree, heading.id) is heading


class TestFindParentAndIndex:
    """Tests for find_parent_and_index."""

    def test_locates_child(self, list_tree: MarkdownNode) -> None:
        """Returns the parent and the index within its children."""
        location = find_parent_and_index(list_tree, "node-7")

        assert location is not None
        assert location.parent.id == "node-3"
        assert location.index == 1
        assert location.node.id == "node-7"

    def test_root_has_no_parent(self, list_tree: MarkdownNode) -> None:
        """The root's own id is not found as a child."""
        assert find_parent_and_index(list_tree, "node-0") is None

    def test_unknown_id(self, list_tree: MarkdownNode) -> None:
        """Unknown ids return None."""
        assert find_parent_and_index(list_tree, "missing") is None


class TestFindNodeAndParent:
    """Tests for find_node_and_parent."""

    def test_nested_node(self, list_tree: MarkdownNode) -> None:
        """Finds node, parent and index in one traversal."""
        location = find_node_and_parent(list_tree, "node-9")

        assert location is not None
        assert location.node.value == "b"
        assert location.parent.id == "node-8"
        assert location.index == 0

    def test_root(self, list_tree: MarkdownNode) -> None:
        """The root is found with no parent and index -1."""
        location = find_node_and_parent(list_tree, "node-0")

        assert location is not None
        assert location.node is list_tree
        assert location.parent is None
        assert location.index == -1

    def test_unknown_id(self, list_tree: MarkdownNode) -> None:
        """Unknown ids return None."""
        assert find_node_and_parent(list_tree, "node-1000") is None

    def test_sees_latest_mutation(self, list_tree: MarkdownNode) -> None:
        """Lookups reflect the tree as it is now."""
        list_node = list_tree.children[1]
        list_node.children.reverse()

        location = find_node_and_parent(list_tree, "node-4")
        assert location.index == 2


class TestFindNodesByType:
    """Tests for find_nodes_by_type."""

    def test_collects_in_preorder(self, list_tree: MarkdownNode) -> None:
        """Returns all matches in document order."""
        texts = find_nodes_by_type(list_tree, "text")
        assert [node.value for node in texts] == ["Lead", "a", "b", "c"]

    def test_accepts_enum(self, list_tree: MarkdownNode) -> None:
        """NodeType members work as well as plain strings."""
        assert len(find_nodes_by_type(list_tree, NodeType.LIST_ITEM)) == 3


class TestContainsId:
    """Tests for contains_id."""

    def test_self_and_descendants(self, list_tree: MarkdownNode) -> None:
        """A subtree contains its own id and its descendants' ids."""
        list_node = list_tree.children[1]
        assert contains_id(list_node, "node-3")
        assert contains_id(list_node, "node-12")

    def test_outside_subtree(self, list_tree: MarkdownNode) -> None:
        """Ids outside the subtree are not contained."""
        list_node = list_tree.children[1]
        assert not contains_id(list_node, "node-1")
        assert not contains_id(list_node, "node-0")


class TestTruncateTextNodes:
    """Tests for truncate_text_nodes."""

    def test_cuts_long_text_only(self) -> None:
        """Only text values over the limit are shortened."""
        tree = parse_markdown("short\n\n" + "x" * 300 + "\n\n```\n" + "y" * 300 + "\n```\n")

        truncated = truncate_text_nodes(tree, 128)

        texts = find_nodes_by_type(tree, "text")
        assert truncated == 1
        assert texts[0].value == "short"
        assert texts[1].value == "x" * 128
        assert find_nodes_by_type(tree, "code")[0].value == "y" * 300
