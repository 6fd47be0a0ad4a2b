"""Command models describing structural edits to a Markdown tree.

The JSON shape of each command is the wire format that text-generation
prompts ask for, so field names and action tags must not change:

    {"action": "insert", "target": "node-3", "position": "after", "node": {...}}
    {"action": "delete", "target": "node-7"}
    {"action": "move", "target": "node-7", "destination": "node-1", "position": 0}
    {"action": "modify", "target": "node-4", "properties": {...}, "value": "..."}
    {"action": "replace", "target": "node-4", "node": {...}}
"""

from __future__ import annotations

from typing import Annotated, Any, Final, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, TypeAdapter, ValidationError

from mdcommands.exceptions import InvalidCommandError, UnrecognizedActionError

COMMAND_ACTIONS: Final[tuple[str, ...]] = ("insert", "delete", "move", "modify", "replace")

RelativePosition = Literal["before", "after", "firstChild", "lastChild"]
Position = Union[RelativePosition, NonNegativeInt]


class NodePayload(BaseModel):
    """Partial node carried by insert and replace commands.

    Any ``id`` in the payload is ignored: inserted nodes always receive
    freshly generated ids.
    """

    model_config = ConfigDict(extra="allow")

    type: str | None = None
    depth: int | None = None
    value: str | None = None
    properties: dict[str, Any] | None = None
    children: list["NodePayload"] | None = None


class InsertCommand(BaseModel):
    """Insert a new node relative to ``target``."""

    action: Literal["insert"]
    target: str
    position: Position
    node: NodePayload


class DeleteCommand(BaseModel):
    """Remove ``target`` and its subtree."""

    action: Literal["delete"]
    target: str


class MoveCommand(BaseModel):
    """Detach ``target`` and reinsert it relative to ``destination``."""

    action: Literal["move"]
    target: str
    destination: str
    position: Position


class ModifyCommand(BaseModel):
    """Merge ``properties`` onto ``target`` and optionally overwrite its value."""

    action: Literal["modify"]
    target: str
    properties: dict[str, Any] | None = None
    value: str | None = None


class ReplaceCommand(BaseModel):
    """Swap ``target`` for a brand-new node."""

    action: Literal["replace"]
    target: str
    node: NodePayload


Command = Annotated[
    Union[InsertCommand, DeleteCommand, MoveCommand, ModifyCommand, ReplaceCommand],
    Field(discriminator="action"),
]

_COMMAND_ADAPTER: TypeAdapter[Command] = TypeAdapter(Command)


class CommandBatch(BaseModel):
    """An ordered batch of commands.

    Commands are kept as raw JSON objects and validated one at a time when
    executed, so a single bad command never invalidates the whole batch.
    """

    commands: list[Any] = Field(default_factory=list)


def parse_command(raw: Any) -> Command:
    """Validate one raw command object.

    Raises:
        UnrecognizedActionError: If ``action`` is missing or unknown.
        InvalidCommandError: If the command is not an object or its fields
            do not match its action.
    """
    if not isinstance(raw, dict):
        raise InvalidCommandError(f"Command must be a JSON object, got {type(raw).__name__}")

    action = raw.get("action")
    if not action:
        raise UnrecognizedActionError("Command is missing action property")
    if action not in COMMAND_ACTIONS:
        raise UnrecognizedActionError(f"Unknown command action: {action!r}")

    try:
        return _COMMAND_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'][1:]) or 'command'}: {error['msg']}"
            for error in exc.errors()
        )
        raise InvalidCommandError(f"Invalid {action} command: {problems}") from exc
