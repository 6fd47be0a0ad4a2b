"""Model-driven whole-document operations.

Each operation sends the serialized document to the text-generation API with
a task-specific instruction. Rewriting operations return a revised document,
which is normalized through ``parse_markdown``/``serialize_markdown``; report
operations (summary, glossary, developmental notes, fact check) return the
model's reply as is.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Final

from mdcommands.editor import GenerateFn
from mdcommands.llm import LLMSettings, extract_code_block, generate as generate_reply
from mdcommands.markdown import parse_markdown, serialize_markdown
from mdcommands.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Operation:
    """A prompt template and whether the reply is a revised document."""

    name: str
    instruction: str
    rewrites: bool


_OPERATION_LIST: Final[tuple[Operation, ...]] = (
    Operation("summarize", "Please provide a concise summary of the following Markdown content.", False),
    Operation(
        "improve-style",
        "Please review the following Markdown content for style improvements and provide a revised version.",
        True,
    ),
    Operation(
        "check-grammar",
        "Please review the following Markdown content for grammatical errors and provide a corrected version.",
        True,
    ),
    Operation(
        "developmental-edit",
        "As a developmental editor, please analyze the structure and content of the following Markdown "
        "and suggest improvements.",
        False,
    ),
    Operation(
        "line-edit",
        "As a line editor, please improve the sentence structure, tone, and style of the following "
        "Markdown content.",
        True,
    ),
    Operation(
        "copy-edit",
        "As a copy editor, please correct any grammatical errors, punctuation, and syntax in the following "
        "Markdown content.",
        True,
    ),
    Operation(
        "proofread",
        "As a proofreader, please check for any typos or formatting errors in the following Markdown content "
        "and correct them.",
        True,
    ),
    Operation(
        "technical-edit",
        "As a technical editor, please ensure the technical accuracy and clarity of the following Markdown content.",
        True,
    ),
    Operation(
        "fact-check",
        "As a fact checker, please verify the correctness of claims, data, and references in the following "
        "Markdown content.",
        False,
    ),
    Operation(
        "glossary",
        "Extract key terms from the following Markdown content and provide a glossary with definitions.",
        False,
    ),
    Operation("rewrite", "Rewrite the following Markdown content to be suitable for {audience}.", True),
)

OPERATIONS: Final[dict[str, Operation]] = {operation.name: operation for operation in _OPERATION_LIST}

_REVISED_SUFFIX = "Reply with the complete revised document as Markdown and nothing else."


def build_operation_prompt(operation: Operation, markdown: str, *, audience: str | None = None) -> str:
    """Fill in the prompt for ``operation`` over ``markdown``.

    Raises:
        ValueError: If the operation needs an audience and none is given.
    """
    if "{audience}" in operation.instruction:
        if not audience or not audience.strip():
            raise ValueError(f"Operation {operation.name!r} needs an audience")
        instruction = operation.instruction.format(audience=audience.strip())
    else:
        instruction = operation.instruction

    if operation.rewrites:
        instruction = f"{instruction} {_REVISED_SUFFIX}"
    return f"{instruction}\n\n{markdown}"


async def run_operation(
    markdown: str,
    name: str,
    *,
    audience: str | None = None,
    generate: GenerateFn | None = None,
    request_id: str = "",
    settings: LLMSettings | None = None,
) -> str:
    """Run the operation called ``name`` over a Markdown document.

    Args:
        markdown: Markdown source.
        name: A key of ``OPERATIONS``.
        audience: Target audience, required by ``rewrite``.
        generate: Async callable mapping a prompt to reply text. Defaults to
            the configured chat completion API.
        request_id: Identifier attached to log records. Generated if empty.
        settings: Model endpoint settings. Defaults to the environment.

    Returns:
        The revised document for rewriting operations, otherwise the reply.

    Raises:
        ValueError: If ``name`` is unknown or a required audience is missing.
        LLMError: If the model call fails.
    """
    operation = OPERATIONS.get(name)
    if operation is None:
        raise ValueError(f"Unknown operation {name!r}; choose from {', '.join(OPERATIONS)}")

    request_id = request_id or f"{name}-{int(time.time() * 1000)}"
    if generate is None:

        async def generate(prompt: str) -> str:
            return await generate_reply(prompt, request_id=request_id, settings=settings)

    # Round-trip the source so the model sees the same normalized text the tree produces.
    prompt = build_operation_prompt(operation, serialize_markdown(parse_markdown(markdown)), audience=audience)
    logger.info("Running document operation", extra={"request_id": request_id, "operation": name})

    try:
        reply = await generate(prompt)
    except Exception as exc:
        logger.error(
            "Document operation failed",
            extra={"request_id": request_id, "operation": name, "error": str(exc)},
        )
        raise

    if not operation.rewrites:
        return reply.strip()
    revised = extract_code_block(reply, "markdown") or extract_code_block(reply, "md") or reply
    return serialize_markdown(parse_markdown(revised))


async def summarize_content(markdown: str, **kwargs) -> str:
    return await run_operation(markdown, "summarize", **kwargs)


async def generate_glossary(markdown: str, **kwargs) -> str:
    return await run_operation(markdown, "glossary", **kwargs)


async def rewrite_for_audience(markdown: str, audience: str, **kwargs) -> str:
    """Rewrite ``markdown`` for ``audience`` and return the revised document."""
    return await run_operation(markdown, "rewrite", audience=audience, **kwargs)
