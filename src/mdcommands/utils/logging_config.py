"""Logging setup shared by the library, CLI and server."""

from __future__ import annotations

import logging
import sys
from typing import Any

from mdcommands.config import MDCOMMANDS_LOG_LEVEL, MDCOMMANDS_MAX_LOG_ENTRY_LENGTH

_MARKER = "...TRUNCATED..."

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


def truncate_entry(text: str, max_length: int = MDCOMMANDS_MAX_LOG_ENTRY_LENGTH) -> str:
    """Shorten ``text`` to about ``max_length`` characters, eliding the middle.

    A ``max_length`` of zero or less disables truncation.
    """
    if max_length <= 0 or len(text) <= max_length:
        return text
    half = max(max_length // 2, 1)
    return f"{text[:half]} {_MARKER} {text[-half:]}"


class ExtraFieldsFormatter(logging.Formatter):
    """Formatter that appends ``extra`` fields as ``key=value`` pairs.

    The rendered message and every extra value are truncated so one huge
    command or model reply cannot flood the log.
    """

    def __init__(self, fmt: str | None = None, max_length: int = MDCOMMANDS_MAX_LOG_ENTRY_LENGTH) -> None:
        super().__init__(fmt or "%(asctime)s %(levelname)s %(name)s: %(message)s")
        self.max_length = max_length

    def format(self, record: logging.LogRecord) -> str:
        record.msg = truncate_entry(record.getMessage(), self.max_length)
        record.args = None
        line = super().format(record)
        extras = _extra_fields(record)
        if extras:
            rendered = " ".join(
                f"{key}={truncate_entry(str(value), self.max_length)}" for key, value in extras.items()
            )
            line = f"{line} [{rendered}]"
        return line


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS}


def configure_logging(level: str | int = MDCOMMANDS_LOG_LEVEL) -> None:
    """Install a single stderr handler on the root logger.

    Calling this again replaces the handler instead of stacking another one.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_mdcommands", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ExtraFieldsFormatter())
    handler._mdcommands = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)


def get_logger(name: str) -> logging.Logger:
    """Return the module logger for ``name``."""
    return logging.getLogger(name)
