"""Command-line interface for mdcommands."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from mdcommands.command_parser import load_command_batch
from mdcommands.config import MDCOMMANDS_LOG_LEVEL, MDCOMMANDS_MAX_TEXT_LENGTH
from mdcommands.editor import EditOptions, apply_commands_to_markdown, edit_markdown, load_tree
from mdcommands.exceptions import LLMError, MalformedBatchError
from mdcommands.markdown import add_timestamp, serialize_markdown
from mdcommands.operations import OPERATIONS, run_operation
from mdcommands.schemas import EditResult
from mdcommands.utils.logging_config import configure_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdcommands",
        description="Apply structural edit commands to Markdown documents.",
    )
    parser.add_argument("--log-level", default=MDCOMMANDS_LOG_LEVEL, help="Logging level (default: %(default)s)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ids_parser = subparsers.add_parser("ids", help="Print the parsed tree with node ids as JSON")
    ids_parser.add_argument("file", type=Path, help="Markdown file")

    apply_parser = subparsers.add_parser("apply", help="Apply a JSON command batch")
    apply_parser.add_argument("file", type=Path, help="Markdown file")
    apply_parser.add_argument("--commands", type=Path, required=True, help="JSON file holding {\"commands\": [...]}")
    _add_output_arguments(apply_parser)

    edit_parser = subparsers.add_parser("edit", help="Ask a model for commands and apply them")
    edit_parser.add_argument("file", type=Path, help="Markdown file")
    edit_parser.add_argument("--instruction", required=True, help="Edit request for the model")
    edit_parser.add_argument(
        "--max-text-length",
        type=int,
        default=MDCOMMANDS_MAX_TEXT_LENGTH,
        help="Truncate text values shown to the model (default: %(default)s)",
    )
    _add_output_arguments(edit_parser)

    run_parser = subparsers.add_parser("run", help="Run a model-driven document operation")
    run_parser.add_argument("operation", choices=sorted(OPERATIONS), help="Operation to run")
    run_parser.add_argument("file", type=Path, help="Markdown file")
    run_parser.add_argument("--audience", help="Target audience for the rewrite operation")
    run_parser.add_argument("-o", "--output", type=Path, help="Write the result here instead of stdout")

    timestamp_parser = subparsers.add_parser("timestamp", help="Add a 'Last updated on' paragraph")
    timestamp_parser.add_argument("file", type=Path, help="Markdown file")
    timestamp_parser.add_argument("--position", choices=("start", "end"), default="start", help="Where to add it")
    timestamp_parser.add_argument("-o", "--output", type=Path, help="Write Markdown here instead of stdout")

    return parser


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-o", "--output", type=Path, help="Write Markdown here instead of stdout")
    parser.add_argument("--strict", action="store_true", help="Exit with status 1 if any command is skipped")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        if args.command == "ids":
            tree = load_tree(_read(args.file))
            print(json.dumps(tree.to_json_dict(), indent=2, ensure_ascii=False))
            return 0

        if args.command == "run":
            text = asyncio.run(run_operation(_read(args.file), args.operation, audience=args.audience))
            _write_output(text if text.endswith("\n") else f"{text}\n", args.output)
            return 0

        if args.command == "timestamp":
            tree = load_tree(_read(args.file))
            add_timestamp(tree, args.position)
            _write_output(serialize_markdown(tree), args.output)
            return 0

        if args.command == "apply":
            batch = load_command_batch(json.loads(_read(args.commands)))
            result = apply_commands_to_markdown(_read(args.file), batch)
        else:
            options = EditOptions(max_text_length=args.max_text_length)
            result = asyncio.run(edit_markdown(_read(args.file), args.instruction, options=options))
    except (OSError, json.JSONDecodeError, MalformedBatchError, LLMError, ValueError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1

    return _emit(result, args.output, strict=args.strict)


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _write_output(text: str, output: Path | None) -> None:
    if output is None:
        sys.stdout.write(text)
    else:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")


def _emit(result: EditResult, output: Path | None, *, strict: bool) -> int:
    _write_output(result.markdown, output)

    report = result.report
    for outcome in report.skipped:
        print(f"skipped command {outcome.index} ({outcome.action}): {outcome.error}", file=sys.stderr)
    print(f"{report.applied} applied, {report.failed} skipped", file=sys.stderr)

    return 1 if strict and not report.ok else 0
