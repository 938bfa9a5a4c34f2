"""CLI entry point for tscan — I/O boundary only."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from treescan import TreescanError
from treescan.filter import PathFilter, PatternFilter
from treescan.gitignore import GitignoreFilter, load_gitignore_spec
from treescan.handler import FilteringHandler, Handler, MemoryHandler
from treescan.scanner import Scanner


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser.

    Returns:
        argparse.ArgumentParser: Configured parser for the ``tscan`` command.
    """
    parser = argparse.ArgumentParser(
        prog="tscan",
        description="recursively list files, handling them with bounded concurrency",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Root directory to scan (default: current directory)",
    )
    parser.add_argument(
        "-c",
        "--concurrency",
        type=int,
        default=1,
        help="Maximum number of files handled at once (default: 1)",
    )
    parser.add_argument(
        "-I",
        "--exclude",
        action="append",
        default=[],
        dest="patterns",
        help="Exclude files with a path component matching pattern "
        "(can be specified multiple times)",
    )
    parser.add_argument(
        "--gitignore",
        action="store_true",
        help="Exclude files matched by the root directory's .gitignore",
    )
    parser.add_argument(
        "--sort",
        action="store_true",
        help="Sort output paths (output order varies when concurrency > 1)",
    )
    parser.add_argument(
        "--errors",
        action="store_true",
        dest="show_errors",
        help="List directories that could not be read",
    )
    parser.add_argument(
        "--noreport",
        action="store_true",
        dest="no_report",
        help="Omit the file/error count report at the end",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        dest="output_file",
        help="Write output to a file instead of stdout",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log scan progress to stderr",
    )
    return parser


def run_tscan(argv: list[str] | None = None) -> str:
    """Run tscan with provided CLI args and return formatted output.

    Args:
        argv: Command-line argument list without program name. If ``None``,
            uses process arguments via ``argparse`` defaults.

    Returns:
        str: Final rendered output.

    Raises:
        TreescanError: On invalid options.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    return _run_with_args(args)


def _build_filters(args: argparse.Namespace) -> list[PathFilter]:
    filters: list[PathFilter] = []
    if args.patterns:
        filters.append(PatternFilter(args.patterns))
    if args.gitignore:
        spec = load_gitignore_spec(args.directory)
        if spec is not None:
            filters.append(GitignoreFilter(spec))
    return filters


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def _format_output(args: argparse.Namespace, collector: MemoryHandler) -> str:
    """Render collected files and errors.

    Args:
        args: Parsed CLI namespace.
        collector: Handler holding the scan results.

    Returns:
        str: Rendered output.
    """
    files = sorted(collector.files) if args.sort else list(collector.files)
    errors = collector.errors
    if args.sort:
        errors = sorted(errors, key=lambda e: e.path)

    lines = list(files)
    if args.show_errors:
        lines.extend(f"error: {err}" for err in errors)
    if not args.no_report:
        if lines:
            lines.append("")
        lines.append(
            f"{_plural(len(files), 'file')}, {_plural(len(errors), 'error')}"
        )
    return "\n".join(lines)


def _run_with_args(args: argparse.Namespace) -> str:
    """Run the scan pipeline for parsed arguments.

    Args:
        args: Parsed CLI namespace.

    Returns:
        str: Rendered output.

    Raises:
        TreescanError: On invalid options.
    """
    collector = MemoryHandler()
    handler: Handler = collector
    filters = _build_filters(args)
    if filters:
        handler = FilteringHandler(collector, args.directory, filters)

    Scanner(args.directory, concurrency=args.concurrency).scan(handler)
    return _format_output(args, collector)


def main() -> None:
    """Run the CLI entry point with process arguments.

    Writes output to stdout or the ``-o`` file. Exits with code 1 on
    user-facing errors.
    """
    parser = build_parser()
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    try:
        output = _run_with_args(args)
    except TreescanError as exc:
        sys.stderr.write(f"tscan: {exc}\n")
        sys.exit(1)

    if args.output_file:
        try:
            Path(args.output_file).write_text(
                output + "\n", encoding="utf-8", newline=""
            )
        except OSError as exc:
            sys.stderr.write(f"tscan: cannot write to '{args.output_file}': {exc}\n")
            sys.exit(1)
    else:
        sys.stdout.write(output + "\n")
