"""Tests for node id assignment."""

from __future__ import annotations

from mdcommands.id_assigner import assign_node_ids, generate_unique_id
from mdcommands.markdown import parse_markdown
from mdcommands.schemas import MarkdownNode

SOURCE = """\
# Title

Some *emphasis* and a [link](https://example.com).

- one
- two

> quoted
"""


def _ids(tree: MarkdownNode) -> list[str | None]:
    return [node.id for node in tree.walk()]


class TestAssignNodeIds:
    """Tests for assign_node_ids."""

    def test_every_node_gets_a_distinct_id(self) -> None:
        """Every node has a non-empty id and no two ids are equal."""
        tree = parse_markdown(SOURCE)
        count = assign_node_ids(tree)

        ids = _ids(tree)
        assert count == len(ids)
        assert all(ids)
        assert len(set(ids)) == len(ids)

    def test_ids_follow_preorder(self, intro_tree: MarkdownNode) -> None:
        """Root is node-0 and numbering follows pre-order."""
        assert _ids(intro_tree) == ["node-0", "node-1", "node-2", "node-3", "node-4"]
        assert intro_tree.children[0].type == "heading"
        assert intro_tree.children[0].id == "node-1"

    def test_counter_is_local_to_each_call(self) -> None:
        """Independent trees are numbered from zero each time."""
        first = parse_markdown("a\n")
        second = parse_markdown("b\n")
        assign_node_ids(first)
        assign_node_ids(second)

        assert first.id == "node-0"
        assert second.id == "node-0"

    def test_reassignment_replaces_every_id(self) -> None:
        """Re-running assignment on the same tree yields an all-new id set."""
        tree = parse_markdown(SOURCE)
        assign_node_ids(tree)
        old_ids = set(_ids(tree))

        assign_node_ids(tree)
        new_ids = _ids(tree)

        assert not old_ids & set(new_ids)
        assert len(set(new_ids)) == len(new_ids)
        assert all(new_ids)

    def test_reassignment_after_inserts(self) -> None:
        """Generated ids left by earlier edits are replaced as well."""
        tree = parse_markdown(SOURCE)
        assign_node_ids(tree)
        tree.children[0].id = generate_unique_id()
        old_ids = set(_ids(tree))

        assign_node_ids(tree)

        assert not old_ids & set(_ids(tree))


class TestGenerateUniqueId:
    """Tests for generate_unique_id."""

    def test_format(self) -> None:
        """Generated ids use the node- prefix."""
        assert generate_unique_id().startswith("node-")

    def test_no_repeats(self) -> None:
        """Many calls never repeat an id."""
        ids = {generate_unique_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_does_not_collide_with_counter_ids(self) -> None:
        """Generated ids never look like counter-assigned ids."""
        generated = generate_unique_id()
        assert not generated.removeprefix("node-").isdigit()
