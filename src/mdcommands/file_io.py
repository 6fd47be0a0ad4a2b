"""Async Markdown file helpers."""

from __future__ import annotations

import asyncio
from pathlib import Path

from mdcommands.config import MDCOMMANDS_MARKDOWN_DIR
from mdcommands.utils.logging_config import get_logger

logger = get_logger(__name__)


def resolve_markdown_path(path: str | Path, base_dir: Path | None = None) -> Path:
    """Resolve ``path`` against ``base_dir`` (default ``MDCOMMANDS_MARKDOWN_DIR``)."""
    return ((base_dir or MDCOMMANDS_MARKDOWN_DIR) / Path(path).expanduser()).resolve()


async def read_markdown(path: str | Path, base_dir: Path | None = None) -> str:
    """Read a Markdown file.

    Args:
        path: File path, absolute or relative to ``base_dir``.
        base_dir: Directory for relative paths.

    Returns:
        The file contents, or an empty string if the file does not exist.
    """
    absolute_path = resolve_markdown_path(path, base_dir)
    logger.debug("Reading Markdown file", extra={"path": str(absolute_path)})
    try:
        return await asyncio.to_thread(absolute_path.read_text, encoding="utf-8")
    except FileNotFoundError:
        logger.warning("Markdown file not found", extra={"path": str(absolute_path)})
        return ""


async def write_markdown(path: str | Path, content: str, base_dir: Path | None = None) -> Path:
    """Write ``content`` to a Markdown file, creating parent directories.

    Returns:
        The absolute path written.
    """
    absolute_path = resolve_markdown_path(path, base_dir)
    await asyncio.to_thread(absolute_path.parent.mkdir, parents=True, exist_ok=True)
    await asyncio.to_thread(absolute_path.write_text, content, encoding="utf-8")
    logger.info("Wrote Markdown file", extra={"path": str(absolute_path)})
    return absolute_path
