"""mdcommands: apply model-generated structural edit commands to Markdown."""

from mdcommands.command_parser import load_command_batch, parse_command_batch
from mdcommands.editor import (
    EditOptions,
    apply_commands_to_markdown,
    edit_markdown,
    edit_markdown_file,
    load_tree,
)
from mdcommands.exceptions import (
    CommandError,
    InvalidCommandError,
    InvalidTargetError,
    LLMError,
    MalformedBatchError,
    MdCommandsError,
    NodeNotFoundError,
    PromptTooLargeError,
    UnrecognizedActionError,
)
from mdcommands.executor import execute_commands
from mdcommands.id_assigner import assign_node_ids, generate_unique_id
from mdcommands.markdown import add_timestamp, insert_heading, parse_markdown, serialize_markdown
from mdcommands.operations import OPERATIONS, run_operation
from mdcommands.schemas import CommandBatch, CommandOutcome, EditResult, ExecutionReport, MarkdownNode
from mdcommands.tree_utils import find_node_and_parent, find_node_by_id, find_parent_and_index

__all__ = [
    "CommandBatch",
    "CommandError",
    "CommandOutcome",
    "EditOptions",
    "EditResult",
    "ExecutionReport",
    "InvalidCommandError",
    "InvalidTargetError",
    "LLMError",
    "MalformedBatchError",
    "MarkdownNode",
    "MdCommandsError",
    "NodeNotFoundError",
    "OPERATIONS",
    "PromptTooLargeError",
    "UnrecognizedActionError",
    "add_timestamp",
    "apply_commands_to_markdown",
    "assign_node_ids",
    "edit_markdown",
    "edit_markdown_file",
    "execute_commands",
    "find_node_and_parent",
    "find_node_by_id",
    "find_parent_and_index",
    "generate_unique_id",
    "insert_heading",
    "load_command_batch",
    "load_tree",
    "parse_command_batch",
    "parse_markdown",
    "run_operation",
    "serialize_markdown",
]
