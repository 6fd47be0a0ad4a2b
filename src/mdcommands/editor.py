"""Edit pipeline: Markdown text -> tree -> model commands -> Markdown text."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from mdcommands.command_parser import parse_command_batch
from mdcommands.config import MDCOMMANDS_MAX_TEXT_LENGTH
from mdcommands.executor import execute_commands
from mdcommands.file_io import read_markdown, write_markdown
from mdcommands.id_assigner import assign_node_ids
from mdcommands.llm import LLMSettings, generate as generate_reply
from mdcommands.markdown import parse_markdown, serialize_markdown
from mdcommands.prompts import build_command_prompt
from mdcommands.schemas import CommandBatch, EditResult, MarkdownNode
from mdcommands.tree_utils import truncate_text_nodes
from mdcommands.utils.logging_config import get_logger

logger = get_logger(__name__)

GenerateFn = Callable[[str], Awaitable[str]]


@dataclass
class EditOptions:
    """Options for a model-driven edit.

    Attributes:
        max_text_length: Text values in the tree shown to the model are cut to
            this many characters. The edited tree keeps full text.
        request_id: Identifier attached to log records. Generated if empty.
        settings: Model endpoint settings. Defaults to the environment.
    """

    max_text_length: int = MDCOMMANDS_MAX_TEXT_LENGTH
    request_id: str = ""
    settings: LLMSettings | None = None


def load_tree(text: str) -> MarkdownNode:
    """Parse Markdown text and assign node ids."""
    tree = parse_markdown(text)
    assign_node_ids(tree)
    return tree


def apply_commands_to_markdown(text: str, batch: CommandBatch | Mapping[str, Any]) -> EditResult:
    """Apply a command batch to Markdown text without calling a model.

    Ids referenced by ``batch`` must be the ones ``load_tree`` assigns to
    the same text.
    """
    tree = load_tree(text)
    report = execute_commands(tree, batch)
    return EditResult(markdown=serialize_markdown(tree), report=report)


async def edit_markdown(
    text: str,
    instruction: str,
    *,
    generate: GenerateFn | None = None,
    options: EditOptions | None = None,
) -> EditResult:
    """Ask a model for a command batch implementing ``instruction`` and apply it.

    Args:
        text: Markdown source.
        instruction: Edit request passed to the model.
        generate: Async callable mapping a prompt to reply text. Defaults to
            the configured chat completion API.
        options: Edit options. Uses defaults if None.

    Returns:
        The edited Markdown and the per-command report.

    Raises:
        MalformedBatchError: If the reply holds no usable command batch. The
            document is left unedited.
        LLMError: If the model call fails.
    """
    opts = options or EditOptions()
    request_id = opts.request_id or f"edit-{int(time.time() * 1000)}"

    if generate is None:

        async def generate(prompt: str) -> str:
            return await generate_reply(prompt, request_id=request_id, settings=opts.settings)

    tree = load_tree(text)

    # The model sees a truncated copy; commands are applied to the full tree.
    prompt_tree = tree.model_copy(deep=True)
    truncated = truncate_text_nodes(prompt_tree, opts.max_text_length)
    logger.info(
        "Generating command prompt",
        extra={"request_id": request_id, "truncated_text_nodes": truncated},
    )
    prompt = build_command_prompt(prompt_tree, instruction)

    reply = await generate(prompt)
    batch = parse_command_batch(reply)
    logger.info("Executing commands", extra={"request_id": request_id, "commands": len(batch.commands)})
    report = execute_commands(tree, batch)

    return EditResult(markdown=serialize_markdown(tree), report=report)


async def edit_markdown_file(
    input_path: str | Path,
    output_path: str | Path,
    instruction: str,
    *,
    generate: GenerateFn | None = None,
    options: EditOptions | None = None,
) -> EditResult:
    """Run ``edit_markdown`` on a file and write the result to ``output_path``."""
    text = await read_markdown(input_path)
    result = await edit_markdown(text, instruction, generate=generate, options=options)
    await write_markdown(output_path, result.markdown)
    return result
