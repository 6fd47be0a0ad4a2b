"""Apply command batches to a Markdown tree.

Commands run strictly in batch order and each sees the tree left by the
previous one. A command either applies fully or is skipped: failures are
logged, recorded in the returned report, and never abort the batch. There is
no batch-level rollback.

The tree is mutated in place and is not locked; at most one
``execute_commands`` call may be in flight per tree.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any, Mapping

from pydantic import TypeAdapter, ValidationError

from mdcommands.command_parser import load_command_batch
from mdcommands.exceptions import (
    InvalidCommandError,
    InvalidTargetError,
    NodeNotFoundError,
    UnrecognizedActionError,
)
from mdcommands.id_assigner import generate_unique_id
from mdcommands.schemas import (
    Command,
    CommandBatch,
    CommandOutcome,
    DeleteCommand,
    ExecutionReport,
    InsertCommand,
    MarkdownNode,
    ModifyCommand,
    MoveCommand,
    NodePayload,
    NodeType,
    Position,
    ReplaceCommand,
    parse_command,
)
from mdcommands.tree_utils import (
    contains_id,
    find_node_and_parent,
    find_node_by_id,
    find_parent_and_index,
)

logger = logging.getLogger(__name__)

DEFAULT_NODE_TYPE = NodeType.PARAGRAPH.value

_PAYLOAD_LIST_ADAPTER: TypeAdapter[list[NodePayload]] = TypeAdapter(list[NodePayload])


def execute_commands(
    tree: MarkdownNode, batch: CommandBatch | Mapping[str, Any]
) -> ExecutionReport:
    """Execute a batch of commands on the tree.

    Args:
        tree: Root of a tree whose ids have been assigned.
        batch: The batch to apply, either validated or as decoded JSON.

    Returns:
        One outcome per command, in batch order.

    Raises:
        MalformedBatchError: If ``batch`` is not shaped like
            ``{"commands": [...]}``. Raised before any command runs.
    """
    if not isinstance(batch, CommandBatch):
        batch = load_command_batch(batch)

    report = ExecutionReport()
    for index, raw in enumerate(batch.commands):
        report.outcomes.append(_execute_one(tree, index, raw))

    logger.info(
        "Executed %d commands: %d applied, %d skipped",
        len(report.outcomes),
        report.applied,
        report.failed,
    )
    return report


def _execute_one(tree: MarkdownNode, index: int, raw: Any) -> CommandOutcome:
    action = raw.get("action") if isinstance(raw, dict) else None
    target = raw.get("target") if isinstance(raw, dict) else None
    outcome = CommandOutcome(
        index=index,
        action=action if isinstance(action, str) else None,
        target=target if isinstance(target, str) else None,
        success=False,
    )

    try:
        command = parse_command(raw)
        node_id = _HANDLERS[command.action](tree, command)
    except UnrecognizedActionError as exc:
        logger.warning("Skipping command %d (%s): %s", index, exc, _dump(raw))
        return _failed(outcome, exc)
    except Exception as exc:  # noqa: BLE001 - isolate each command
        logger.error("Error executing command %s: %s", _dump(raw), exc)
        return _failed(outcome, exc)

    return outcome.model_copy(update={"success": True, "node_id": node_id})


def _failed(outcome: CommandOutcome, exc: Exception) -> CommandOutcome:
    return outcome.model_copy(update={"error_type": type(exc).__name__, "error": str(exc)})


def _dump(raw: Any) -> str:
    return json.dumps(raw, default=str, ensure_ascii=False)


def _handle_insert(tree: MarkdownNode, command: InsertCommand) -> str:
    target = find_node_by_id(tree, command.target)
    if target is None:
        raise NodeNotFoundError(f"Insert command: target node {command.target} not found")

    siblings, slot = _resolve_slot(tree, target, command.target, command.position, "Insert")
    new_node = build_node(command.node)
    siblings.insert(slot, new_node)

    logger.info("Inserted node %s as %s of %s", new_node.id, command.position, command.target)
    return new_node.id


def _handle_delete(tree: MarkdownNode, command: DeleteCommand) -> None:
    location = find_parent_and_index(tree, command.target)
    if location is None:
        raise NodeNotFoundError(f"Delete command: node {command.target} not found")

    del location.parent.children[location.index]
    logger.info("Deleted node %s", command.target)


def _handle_move(tree: MarkdownNode, command: MoveCommand) -> None:
    location = find_node_and_parent(tree, command.target)
    if location is None:
        raise NodeNotFoundError(f"Move command: node {command.target} not found")
    if location.parent is None:
        raise NodeNotFoundError(f"Move command: node {command.target} is the root and has no parent")

    destination = find_node_by_id(tree, command.destination)
    if destination is None:
        raise NodeNotFoundError(f"Move command: destination node {command.destination} not found")
    if destination.children is None:
        raise InvalidTargetError(f"Move command: destination node {command.destination} cannot have children")
    if contains_id(location.node, command.destination):
        raise InvalidTargetError(
            f"Move command: destination {command.destination} is inside the moved node {command.target}"
        )

    # Validate placement before detaching so a failed move leaves the tree untouched.
    _resolve_slot(tree, destination, command.destination, command.position, "Move")
    del location.parent.children[location.index]
    siblings, slot = _resolve_slot(tree, destination, command.destination, command.position, "Move")
    siblings.insert(slot, location.node)

    logger.info("Moved node %s to %s of %s", command.target, command.position, command.destination)


def _handle_modify(tree: MarkdownNode, command: ModifyCommand) -> None:
    target = find_node_by_id(tree, command.target)
    if target is None:
        raise NodeNotFoundError(f"Modify command: node {command.target} not found")

    updates = dict(command.properties or {})
    for key in updates:
        if key == "id":
            raise InvalidCommandError(
                f"Modify command: the id of node {command.target} cannot be changed; ids must stay unique"
            )
        if key.startswith("_") or (key not in MarkdownNode.model_fields and hasattr(MarkdownNode, key)):
            raise InvalidCommandError(f"Modify command: property {key!r} is reserved")

    declared = {key: value for key, value in updates.items() if key in MarkdownNode.model_fields and key != "children"}
    try:
        checked = MarkdownNode.model_validate({"type": target.type, **declared})
        children = _build_children(updates["children"]) if updates.get("children") is not None else None
    except ValidationError as exc:
        raise InvalidCommandError(f"Modify command: invalid properties for node {command.target}: {exc}") from exc

    for key, value in updates.items():
        if key == "children":
            target.children = children
        elif key in declared:
            setattr(target, key, getattr(checked, key))
        else:
            setattr(target, key, value)

    if "value" in command.model_fields_set:
        target.value = command.value

    logger.info("Modified node %s", command.target)


def _handle_replace(tree: MarkdownNode, command: ReplaceCommand) -> str:
    location = find_parent_and_index(tree, command.target)
    if location is None:
        raise NodeNotFoundError(f"Replace command: node {command.target} not found")

    new_node = build_node(command.node)
    location.parent.children[location.index] = new_node

    logger.info("Replaced node %s with node %s", command.target, new_node.id)
    return new_node.id


_HANDLERS: dict[str, Callable[[MarkdownNode, Command], str | None]] = {
    "insert": _handle_insert,
    "delete": _handle_delete,
    "move": _handle_move,
    "modify": _handle_modify,
    "replace": _handle_replace,
}


def _resolve_slot(
    tree: MarkdownNode,
    anchor: MarkdownNode,
    anchor_id: str,
    position: Position,
    label: str,
) -> tuple[list[MarkdownNode], int]:
    """Return the sibling list and index where a node placed at ``position`` goes."""
    if position in ("before", "after"):
        location = find_parent_and_index(tree, anchor_id)
        if location is None:
            raise NodeNotFoundError(f"{label} command: node {anchor_id} has no parent")
        offset = 1 if position == "after" else 0
        return location.parent.children, location.index + offset

    if anchor.children is None:
        raise InvalidTargetError(f"{label} command: node {anchor_id} cannot have children")
    if position == "firstChild":
        return anchor.children, 0
    if position == "lastChild":
        return anchor.children, len(anchor.children)
    if isinstance(position, int):
        return anchor.children, position
    raise InvalidCommandError(f"{label} command: invalid position {position!r}")


def build_node(payload: NodePayload) -> MarkdownNode:
    """Create a new node from a command payload.

    The node and all of its descendants get freshly generated ids; ids in the
    payload are ignored. A missing type defaults to ``paragraph`` and missing
    children to an empty list. Nested payloads without a type become text
    runs when they carry a value, and only valueless nested nodes get an
    empty children list.
    """
    node = MarkdownNode.model_validate(_node_data(payload.model_dump(exclude_none=True), top_level=True))
    for descendant in node.walk():
        descendant.id = generate_unique_id()
    return node


def _build_children(raw: Any) -> list[MarkdownNode]:
    payloads = _PAYLOAD_LIST_ADAPTER.validate_python(raw)
    children = []
    for payload in payloads:
        child = MarkdownNode.model_validate(_node_data(payload.model_dump(exclude_none=True), top_level=False))
        for descendant in child.walk():
            descendant.id = generate_unique_id()
        children.append(child)
    return children


def _node_data(data: dict[str, Any], *, top_level: bool) -> dict[str, Any]:
    data = dict(data)
    data.pop("id", None)
    if not data.get("type"):
        # Untyped nested nodes carrying a value are text runs.
        nested_text = not top_level and data.get("value") is not None
        data["type"] = NodeType.TEXT.value if nested_text else DEFAULT_NODE_TYPE
    if top_level or data.get("value") is None:
        data.setdefault("children", [])
    if data.get("children") is not None:
        data["children"] = [_node_data(child, top_level=False) for child in data["children"]]
    return data
