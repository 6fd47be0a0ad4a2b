"""Tests for logging setup."""

from __future__ import annotations

import logging

from mdcommands.utils.logging_config import ExtraFieldsFormatter, configure_logging, truncate_entry


def _record(msg: str, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("mdcommands.test", logging.INFO, __file__, 1, msg, None, None)
    record.__dict__.update(extra)
    return record


class TestTruncateEntry:
    """Tests for truncate_entry."""

    def test_short_text_unchanged(self) -> None:
        assert truncate_entry("short", 10) == "short"

    def test_long_text_elides_middle(self) -> None:
        """Keeps both ends around a marker."""
        assert truncate_entry("abcdefghij", 4) == "ab ...TRUNCATED... ij"

    def test_non_positive_limit_disables(self) -> None:
        assert truncate_entry("x" * 50, 0) == "x" * 50


class TestExtraFieldsFormatter:
    """Tests for ExtraFieldsFormatter."""

    def test_appends_extra_fields(self) -> None:
        """Extra fields render as key=value after the message."""
        formatter = ExtraFieldsFormatter("%(message)s")

        line = formatter.format(_record("Executing commands", request_id="r1", commands=3))

        assert line == "Executing commands [request_id=r1 commands=3]"

    def test_truncates_long_values(self) -> None:
        formatter = ExtraFieldsFormatter("%(message)s", max_length=4)

        line = formatter.format(_record("abcdefgh", reply="0123456789"))

        assert line == "ab ...TRUNCATED... gh [reply=01 ...TRUNCATED... 89]"


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_does_not_stack_handlers(self) -> None:
        """Repeated calls keep a single mdcommands handler."""
        root = logging.getLogger()
        configure_logging("DEBUG")
        configure_logging("WARNING")

        ours = [handler for handler in root.handlers if getattr(handler, "_mdcommands", False)]
        assert len(ours) == 1
        assert root.level == logging.WARNING
