"""Token counting for prompts sent to the text-generation API."""

from __future__ import annotations

import logging

import tiktoken

logger = logging.getLogger(__name__)

_ENCODING_NAME = "o200k_base"


def count_tokens(text: str) -> int | None:
    """Count tokens in ``text``.

    Returns:
        The token count, or None if the encoding could not be loaded.
    """
    if not isinstance(text, str):
        raise TypeError(f"Expected a string, got {type(text).__name__}")
    try:
        encoding = tiktoken.get_encoding(_ENCODING_NAME)
        return len(encoding.encode(text, disallowed_special=()))
    except Exception as exc:  # noqa: BLE001 - encoding download can fail offline
        logger.warning("Token count unavailable: %s", exc)
        return None


def format_token_count(total_tokens: int) -> str:
    if total_tokens >= 1_000_000:
        return f"{total_tokens / 1_000_000:.1f}M"
    if total_tokens >= 1_000:
        return f"{total_tokens / 1_000:.1f}k"
    return str(total_tokens)
