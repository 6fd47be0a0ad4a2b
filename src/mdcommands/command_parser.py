"""Decode command batches from model replies and JSON documents."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from mdcommands.exceptions import MalformedBatchError
from mdcommands.llm import extract_code_block
from mdcommands.schemas import CommandBatch

logger = logging.getLogger(__name__)


def parse_command_batch(text: str) -> CommandBatch:
    """Parse a model reply into a command batch.

    A fenced ```` ```json ```` block is used when present; otherwise decoding
    starts at the first ``{`` and anything after the closing brace is ignored.

    Args:
        text: Raw reply text.

    Returns:
        The batch, with commands still unvalidated.

    Raises:
        MalformedBatchError: If no JSON object with a ``commands`` list can be
            recovered from the text.
    """
    candidate = extract_code_block(text, "json")
    if candidate is None:
        start = text.find("{")
        if start == -1:
            raise MalformedBatchError("Unable to parse commands: reply contains no JSON object")
        candidate = text[start:]

    try:
        data, _ = json.JSONDecoder().raw_decode(candidate.strip())
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse commands from model reply: %s", exc)
        raise MalformedBatchError(f"Unable to parse commands: {exc}") from exc

    return load_command_batch(data)


def load_command_batch(data: Any) -> CommandBatch:
    """Validate already-decoded JSON as a command batch.

    Raises:
        MalformedBatchError: If ``data`` is not an object whose ``commands``
            member is a list.
    """
    if not isinstance(data, dict) or not isinstance(data.get("commands"), list):
        raise MalformedBatchError("Invalid command batch: expected an object with a 'commands' list")
    try:
        return CommandBatch.model_validate(data)
    except ValidationError as exc:
        raise MalformedBatchError(f"Invalid command batch: {exc}") from exc
