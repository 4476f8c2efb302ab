"""CLI entry point for tree-print — I/O boundary only."""

from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from collections.abc import Iterator
from pathlib import Path

from treeprint import TreePrintError, __version__
from treeprint.formatter.count import format_count
from treeprint.formatter.tree import RenderLine, render
from treeprint.scanner import TraversalConfig, check_root
from treeprint.style import strip_styles

logger = logging.getLogger(__name__)

_EPILOG = """\
examples:
  tree-print /mnt/media                     Basic tree of media library
  tree-print -d 2 -s /mnt/media             Shallow tree with file sizes
  tree-print -e mp4,mkv /mnt/media/Movies   Only show video files
  tree-print -D /mnt/media                  Directories only
  tree-print --count /mnt/media             File type breakdown
  tree-print -a -s -p -t ~/projects         Full details including hidden files
  tree-print -o tree.txt /mnt/media         Save to file
"""


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser.

    Returns:
        argparse.ArgumentParser: Configured parser for the ``tree-print`` command.
    """
    parser = argparse.ArgumentParser(
        prog="tree-print",
        description="Pretty folder and file structure printer",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Root directory to display (default: current directory)",
    )
    parser.add_argument(
        "-d",
        "--depth",
        type=int,
        default=3,
        dest="max_depth",
        metavar="N",
        help="Max depth to recurse (default: 3)",
    )
    parser.add_argument(
        "-a",
        "--all",
        action="store_true",
        dest="show_hidden",
        help="Show hidden files/directories",
    )
    parser.add_argument(
        "-s", "--size", action="store_true", dest="show_size", help="Show file sizes"
    )
    parser.add_argument(
        "-p", "--perms", action="store_true", dest="show_perms", help="Show permissions"
    )
    parser.add_argument(
        "-t",
        "--time",
        action="store_true",
        dest="show_time",
        help="Show modification times",
    )
    parser.add_argument(
        "-D",
        "--dirs-only",
        action="store_true",
        dest="dirs_only",
        help="Show only directories",
    )
    parser.add_argument(
        "-F",
        "--files-only",
        action="store_true",
        dest="files_only",
        help="Show only files (skip directory entries)",
    )
    parser.add_argument(
        "-e",
        "--ext",
        default="",
        dest="extensions",
        metavar="EXT",
        help="Filter by extension(s), comma-separated (e.g. mp4,mkv)",
    )
    parser.add_argument(
        "-x",
        "--exclude",
        default=None,
        dest="exclude",
        metavar="PAT",
        help="Exclude entries matching regex pattern",
    )
    parser.add_argument(
        "-g",
        "--gitignore",
        action="store_true",
        dest="use_gitignore",
        help="Also exclude entries matched by the root's .gitignore",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        dest="output_file",
        metavar="FILE",
        help="Save output to file (strips color codes)",
    )
    parser.add_argument(
        "-c",
        "--count",
        action="store_true",
        dest="count_mode",
        help="Show file type breakdown instead of tree",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        dest="no_color",
        help="Disable colors",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log skipped entries to stderr",
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"tree-print {__version__}"
    )
    return parser


def run_treeprint(argv: list[str] | None = None) -> str:
    """Run tree-print with provided CLI args and return formatted output.

    This function is side-effect free and is the primary test target
    for CLI behavior. ``-o`` is accepted but not acted upon here.

    Args:
        argv: Command-line argument list without program name. If ``None``,
            uses process arguments via ``argparse`` defaults.

    Returns:
        str: Final rendered output.

    Raises:
        TreePrintError: On any user-facing validation error.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = build_config(args)
    return "\n".join(line.format(config.color) for line in _run_with_args(args, config))


def _resolve_root(directory: str) -> Path:
    """Resolve directory and validate it is a readable directory.

    Raises:
        TreePrintError: If directory does not exist, is not a directory,
            or cannot be listed.
    """
    try:
        return check_root(Path(directory).expanduser())
    except NotADirectoryError as exc:
        raise TreePrintError(str(exc)) from exc


def parse_extensions(value: str) -> frozenset[str]:
    """Split a comma-separated extension list.

    Surrounding whitespace and a leading dot are dropped from each item.

    >>> sorted(parse_extensions("mp4, .mkv,,"))
    ['mkv', 'mp4']
    """
    items = (item.strip().lstrip(".") for item in value.split(","))
    return frozenset(item for item in items if item)


def _compile_exclude(pattern: str | None) -> re.Pattern[str] | None:
    """Compile the ``--exclude`` regex.

    Raises:
        TreePrintError: If the pattern is not a valid regular expression.
    """
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise TreePrintError(f"Invalid exclude pattern '{pattern}': {exc}") from exc


def build_config(args: argparse.Namespace) -> TraversalConfig:
    """Construct the immutable traversal configuration from parsed args.

    Raises:
        TreePrintError: If options are invalid or incompatible.
    """
    if args.max_depth < 0:
        raise TreePrintError("Invalid depth, must be 0 or greater.")
    if args.dirs_only and args.files_only:
        raise TreePrintError("--dirs-only (-D) is incompatible with --files-only (-F)")

    try:
        return TraversalConfig(
            max_depth=args.max_depth,
            show_hidden=args.show_hidden,
            extensions=parse_extensions(args.extensions),
            exclude=_compile_exclude(args.exclude),
            dirs_only=args.dirs_only,
            files_only=args.files_only,
            show_size=args.show_size,
            show_perms=args.show_perms,
            show_time=args.show_time,
            color=not args.no_color,
            use_gitignore=args.use_gitignore,
        )
    except ValueError as exc:
        raise TreePrintError(str(exc)) from exc


def _run_with_args(
    args: argparse.Namespace, config: TraversalConfig
) -> Iterator[RenderLine]:
    """Validate the target and start the selected renderer.

    The target is checked before any line is produced.

    Raises:
        TreePrintError: If the target is not a directory.
    """
    root = _resolve_root(args.directory)
    try:
        if args.count_mode:
            return format_count(root, config)
        return render(root, config)
    except NotADirectoryError as exc:
        raise TreePrintError(str(exc)) from exc


def _write_output_file(path: str, lines: Iterator[RenderLine], color: bool) -> None:
    """Write the rendered output with styling stripped.

    Raises:
        TreePrintError: If the file cannot be written.
    """
    try:
        with open(path, "w", encoding="utf-8", newline="") as fh:
            for line in lines:
                fh.write(strip_styles(line.format(color)) + "\n")
    except OSError as exc:
        raise TreePrintError(f"cannot write to '{path}': {exc}") from exc


def main() -> None:
    """Run the CLI entry point with process arguments.

    Streams output to stdout, or writes it to the ``-o`` file.
    Exits with code 1 on user-facing errors.
    """
    parser = build_parser()
    args = parser.parse_args()  # single parse

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    try:
        config = build_config(args)
        lines = _run_with_args(args, config)
        if args.output_file:
            _write_output_file(args.output_file, lines, config.color)
            sys.stdout.write(f"Saved to: {args.output_file}\n")
            return
        for line in lines:
            sys.stdout.write(line.format(config.color) + "\n")
        sys.stdout.flush()
    except TreePrintError as exc:
        sys.stderr.write(f"tree-print: {exc}\n")
        sys.exit(1)
    except BrokenPipeError:
        # Reader went away (e.g. piped to head); silence the flush at exit.
        logger.debug("Output pipe closed")
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        sys.exit(141)


if __name__ == "__main__":
    main()
