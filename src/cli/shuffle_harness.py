# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Run CSS name obfuscation over a static site build."""

import argparse
import logging
import sys
from pathlib import Path
from typing import TextIO

from cssshuffle import OrchestrationError, ShuffleConfig, obfuscate_directory
from cssshuffle.stats import render_stats
from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger(__name__)


class ValidationError(RuntimeError):
    """Represent user input validation failure."""


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(prog="css-shuffle")
    parser.add_argument("--input", required=True, help="Build output directory.")
    parser.add_argument(
        "--output",
        required=False,
        help="Destination directory; the input is rewritten in place when omitted.",
    )
    parser.add_argument(
        "--mapping", required=False, help="Optional path for the JSON mapping export."
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        help="Gitignore-style pattern of files to skip (repeatable).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Threads used for per-file discovery and rewriting.",
    )
    parser.add_argument(
        "--no-stats",
        action="store_true",
        help="Do not print the size-reduction table.",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging."
    )
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run obfuscation command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning("Argument parsing failed (argv=%s)", argv)
        return 2
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    console = Console(file=stdout, force_terminal=False, highlight=False)
    _emit_marker(console=console, phase="validation", state="start")
    try:
        config = _build_config(args)
        input_path = _validate_input(Path(args.input))
    except ValidationError as exc:
        logger.warning("Validation failed (error=%s)", exc)
        stderr.write(f"{exc}\n")
        return 2
    _emit_marker(console=console, phase="validation", state="done")

    _emit_marker(console=console, phase="obfuscate", state="start")
    output_path = Path(args.output) if args.output else None
    try:
        report = obfuscate_directory(
            input_dir=input_path, output_dir=output_path, config=config
        )
    except OrchestrationError as exc:
        logger.warning("Obfuscation failed (error=%s)", exc)
        stderr.write(f"Obfuscation failed: {exc}\n")
        return 2
    _emit_marker(console=console, phase="obfuscate", state="done")

    for problem in report.problems:
        stderr.write(f"{problem.kind} error in {problem.path}: {problem.message}\n")

    _emit_summary(
        console=console,
        summary={
            "css_files_discovered": report.css_files,
            "html_files_discovered": report.html_files,
            "files_rewritten": report.files_rewritten,
            "aliases_assigned": len(report.registry),
            "identifiers_renamed": report.identifiers_renamed,
            "problems": len(report.problems),
            "elapsed_ms": report.elapsed_ms,
        },
    )
    if not args.no_stats:
        render_stats(report, console)
    console.print("status=success")
    return 0


def _emit_marker(console: Console, phase: str, state: str) -> None:
    console.print(f"{phase}:{state}")


def _emit_summary(console: Console, summary: dict[str, int]) -> None:
    fields = " ".join(f"{key}={value}" for key, value in summary.items())
    console.print(fields)


def _build_config(args: argparse.Namespace) -> ShuffleConfig:
    """Map parsed arguments to run configuration.

    Args:
        args: Parsed CLI arguments.

    Returns:
        Run configuration.

    Raises:
        ValidationError: If an option value is out of range.
    """
    if args.workers < 1:
        raise ValidationError(f"Workers must be at least 1: {args.workers}")
    mapping_path = Path(args.mapping).resolve() if args.mapping else None
    return ShuffleConfig(
        exclude=tuple(args.exclude),
        workers=args.workers,
        mapping_path=mapping_path,
    )


def _validate_input(input_path: Path) -> Path:
    input_abs = input_path.resolve()
    if not input_abs.exists():
        raise ValidationError(f"Input path does not exist: {input_abs}")
    if not input_abs.is_dir():
        raise ValidationError(f"Input path must be a directory: {input_abs}")
    return input_abs


def main() -> None:
    """Run css-shuffle CLI."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
