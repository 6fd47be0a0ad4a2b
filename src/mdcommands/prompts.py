"""Prompt asking a model for a command batch that edits a Markdown tree."""

from __future__ import annotations

import json

from mdcommands.schemas import MarkdownNode

COMMAND_FORMAT = """\
Respond with a single JSON object of the form {"commands": [...]}, inside a
```json fenced block. Each command is one of:

  {"action": "insert", "target": "<id>", "position": <position>, "node": <node>}
  {"action": "delete", "target": "<id>"}
  {"action": "move", "target": "<id>", "destination": "<id>", "position": <position>}
  {"action": "modify", "target": "<id>", "properties": {...}, "value": "<text>"}
  {"action": "replace", "target": "<id>", "node": <node>}

<position> is "before", "after", "firstChild", "lastChild" or a zero-based
child index. "before" and "after" place the node next to the target;
the other positions place it inside the target, which must have children.
A move destination must have children for every position.

"modify" merges "properties" into the node and sets "value" when the key is
present, even if it is null. It cannot change a node's "id": ids stay unique
and fixed so later commands can refer to them.

<node> is a node without an id, e.g.
  {"type": "heading", "depth": 2, "children": [{"type": "text", "value": "Title"}]}

Commands run in order, and each one sees the tree left by the previous ones.
Only reference ids that appear in the tree below."""


def build_command_prompt(tree: MarkdownNode, instruction: str) -> str:
    """Render ``instruction`` and the id-annotated tree into a prompt.

    Args:
        tree: Tree with ids assigned, possibly with truncated text values.
        instruction: What the model should change in the document.

    Returns:
        The prompt text.
    """
    tree_json = json.dumps(tree.to_json_dict(), indent=2, ensure_ascii=False)
    return (
        "You are provided with the syntax tree of a Markdown document. Every node "
        "has an \"id\". Text values may be truncated.\n\n"
        f"Task: {instruction.strip()}\n\n"
        f"{COMMAND_FORMAT}\n\n"
        f"Here is the tree:\n{tree_json}\n"
    )
