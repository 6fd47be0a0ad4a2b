"""Test setup for mdcommands."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mdcommands.id_assigner import assign_node_ids  # noqa: E402
from mdcommands.schemas import MarkdownNode  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for pytest.

    This allows running integration tests selectively:
        pytest -m integration       # run only integration tests
        pytest -m "not integration" # skip integration tests
    """
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (call a live model API)",
    )


def text(value: str) -> dict:
    return {"type": "text", "value": value}


@pytest.fixture
def intro_tree() -> MarkdownNode:
    """``# Intro`` followed by ``Welcome.``, with ids assigned.

    Ids in pre-order: root node-0, heading node-1, "Intro" node-2,
    paragraph node-3, "Welcome." node-4.
    """
    tree = MarkdownNode.model_validate(
        {
            "type": "root",
            "children": [
                {"type": "heading", "depth": 1, "children": [text("Intro")]},
                {"type": "paragraph", "children": [text("Welcome.")]},
            ],
        }
    )
    assign_node_ids(tree)
    return tree


@pytest.fixture
def list_tree() -> MarkdownNode:
    """A root with a paragraph and a three-item list, with ids assigned.

    Ids in pre-order: root node-0, paragraph node-1, "Lead" node-2,
    list node-3, items node-4 / node-7 / node-10 holding paragraphs
    node-5 / node-8 / node-11 with texts "a" node-6, "b" node-9, "c" node-12.
    """
    items = [
        {"type": "listItem", "children": [{"type": "paragraph", "children": [text(value)]}]}
        for value in ("a", "b", "c")
    ]
    tree = MarkdownNode.model_validate(
        {
            "type": "root",
            "children": [
                {"type": "paragraph", "children": [text("Lead")]},
                {"type": "list", "ordered": False, "spread": False, "children": items},
            ],
        }
    )
    assign_node_ids(tree)
    return tree
