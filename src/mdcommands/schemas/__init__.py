"""Shared schemas for mdcommands."""

from mdcommands.schemas.commands import (
    COMMAND_ACTIONS,
    Command,
    CommandBatch,
    DeleteCommand,
    InsertCommand,
    ModifyCommand,
    MoveCommand,
    NodePayload,
    Position,
    ReplaceCommand,
    parse_command,
)
from mdcommands.schemas.nodes import MarkdownNode, NodeType
from mdcommands.schemas.results import CommandOutcome, EditResult, ExecutionReport

__all__ = [
    "COMMAND_ACTIONS",
    "Command",
    "CommandBatch",
    "CommandOutcome",
    "DeleteCommand",
    "EditResult",
    "ExecutionReport",
    "InsertCommand",
    "MarkdownNode",
    "ModifyCommand",
    "MoveCommand",
    "NodePayload",
    "NodeType",
    "Position",
    "ReplaceCommand",
    "parse_command",
]
