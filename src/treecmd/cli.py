"""CLI entry point for treecmd — I/O boundary only."""

from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from pathlib import Path

from tqdm import tqdm

from treecmd import TreecmdError
from treecmd.assembler import TreeItem, assemble, assemble_parallel
from treecmd.filter import EntryFilter, FilterOptions, load_gitignore_spec
from treecmd.formatter.label import LabelOptions
from treecmd.formatter.tree import TreeOptions, format_tree
from treecmd.scanner import DEFAULT_MAX_DEPTH, ScanOptions, scan


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser.

    Returns:
        argparse.ArgumentParser: Configured parser for the ``treecmd`` command.
    """
    parser = argparse.ArgumentParser(
        prog="treecmd",
        description="list directory contents as a tree or a JSON document",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Root directory to display (default: current directory)",
    )

    # traversal and filtering
    parser.add_argument(
        "-a",
        "--all",
        action="store_true",
        dest="show_hidden",
        help="Include hidden files and the contents of hidden directories",
    )
    parser.add_argument(
        "-d",
        "--dirs-only",
        action="store_true",
        dest="dirs_only",
        help="List directories only",
    )
    parser.add_argument(
        "-L",
        "--level",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        dest="max_depth",
        help=f"Max display depth of the tree (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "-l",
        "--follow-links",
        action="store_true",
        dest="follow_symlinks",
        help="Follow symbolic links to directories",
    )
    parser.add_argument(
        "-x",
        "--same-filesystem",
        action="store_true",
        dest="same_filesystem",
        help="Stay on the filesystem of the root directory",
    )
    parser.add_argument(
        "-I",
        "--exclude",
        default=None,
        metavar="REGEX",
        help="Exclude entries whose name matches the regular expression",
    )
    parser.add_argument(
        "-P",
        "--include",
        default=None,
        metavar="REGEX",
        help="Show only entries whose name matches the regular expression",
    )
    parser.add_argument(
        "--gitignore",
        action="store_true",
        help="Exclude entries matched by the root .gitignore",
    )
    parser.add_argument(
        "-t",
        "--sort",
        choices=["name", "time"],
        default="name",
        dest="sort_mode",
        help="Sort by name (default) or modification time, newest first",
    )

    # rendering
    parser.add_argument(
        "-A",
        "--ascii",
        action="store_true",
        help="Use ASCII characters for tree drawing",
    )
    parser.add_argument(
        "-i",
        "--noreport",
        action="store_true",
        dest="reduced",
        help="Print a flat list without indentation lines or summary "
        "(ignored with --json)",
    )
    parser.add_argument(
        "-f",
        "--full-path",
        action="store_true",
        dest="full_path",
        help="Print the full path prefix for each entry",
    )
    parser.add_argument(
        "-F",
        "--classify",
        action="store_true",
        help="Append '/' to directories, '@' to symlinks, '*' to executables",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Replace non-printable characters in names with '?'",
    )
    parser.add_argument(
        "-N",
        "--literal",
        action="store_true",
        help="Print names as-is (overrides -q)",
    )
    parser.add_argument(
        "-p", "--perms", action="store_true", help="Show file permissions"
    )
    parser.add_argument(
        "-u", "--uid", action="store_true", help="Show file owner"
    )
    parser.add_argument(
        "-g", "--gid", action="store_true", help="Show file group"
    )
    parser.add_argument(
        "-s", "--size", action="store_true", help="Show the size of each file"
    )
    parser.add_argument(
        "-D",
        "--mtime",
        action="store_true",
        help="Show last modification time",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_mode",
        help="Output the tree as a JSON document",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        dest="output_file",
        help="Write output to a file instead of stdout",
    )

    # execution
    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="Sort and group with a pool of N worker threads",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress indicator on stderr",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log skipped entries and other diagnostics to stderr",
    )
    return parser


def run_treecmd(argv: list[str] | None = None) -> str:
    """Run treecmd with provided CLI args and return formatted output.

    Args:
        argv: Command-line argument list without program name. If ``None``,
            uses process arguments via ``argparse`` defaults.

    Returns:
        str: Final rendered output.

    Raises:
        TreecmdError: On any user-facing validation or I/O error.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    return _run_with_args(args)


def _compile_pattern(pattern: str | None, option: str) -> re.Pattern[str] | None:
    """Compile a ``-I``/``-P`` regular expression.

    Raises:
        TreecmdError: If the pattern is malformed.
    """
    if pattern is None:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise TreecmdError(f"invalid {option} pattern '{pattern}': {exc}") from exc


def _resolve_root(directory: str) -> Path:
    """Validate that the root is a readable directory.

    The path is kept as given so that entry paths and the root line
    mirror the argument.

    Raises:
        TreecmdError: If directory does not exist, is not a directory,
            or cannot be listed.
    """
    root = Path(directory)
    if not root.is_dir():
        raise TreecmdError(f"'{directory}' is not a directory")
    try:
        with os.scandir(root):
            pass
    except OSError as exc:
        raise TreecmdError(f"cannot read '{directory}': {exc.strerror}") from exc
    return root


def _validate_options(args: argparse.Namespace) -> None:
    """Validate numeric options.

    Raises:
        TreecmdError: On invalid values.
    """
    if args.max_depth < 1:
        raise TreecmdError("Invalid level, must be greater than 0.")
    if args.threads is not None and args.threads < 1:
        raise TreecmdError("--threads must be a positive integer")


def _collect(
    args: argparse.Namespace,
    root: Path,
    entry_filter: EntryFilter,
) -> list[TreeItem]:
    """Scan, filter and assemble the ordered sequence."""
    scan_opts = ScanOptions(
        max_depth=args.max_depth,
        follow_symlinks=args.follow_symlinks,
        same_filesystem=args.same_filesystem,
    )
    stream = (
        entry
        for entry in scan(root, scan_opts, descend=entry_filter.keep)
        if entry_filter.keep(entry)
    )
    entries = list(
        tqdm(
            stream,
            desc="Scanning",
            unit=" items",
            disable=not args.progress,
            file=sys.stderr,
            leave=False,
        )
    )

    if args.threads is not None:
        return assemble_parallel(entries, args.sort_mode, workers=args.threads)
    return assemble(entries, args.sort_mode)


def _format_output(args: argparse.Namespace, items: list[TreeItem]) -> str:
    """Render the ordered sequence using the selected output mode."""
    if args.json_mode:
        from treecmd.formatter.json_ import format_json

        return format_json(items, root_text=args.directory)

    label_opts = LabelOptions(
        perms=args.perms,
        uid=args.uid,
        gid=args.gid,
        size=args.size,
        mtime=args.mtime,
        full_path=args.full_path,
        classify=args.classify,
        quiet=args.quiet and not args.literal,
        root_text=args.directory,
    )
    tree_opts = TreeOptions(
        charset="ascii" if args.ascii else "unicode",
        reduced=args.reduced,
        label=label_opts,
    )
    return format_tree(items, tree_opts)


def _run_with_args(args: argparse.Namespace) -> str:
    """Run the scan/filter/assemble/format pipeline for parsed arguments.

    Raises:
        TreecmdError: On any user-facing validation or I/O error.
    """
    _validate_options(args)
    exclude = _compile_pattern(args.exclude, "exclude")
    include = _compile_pattern(args.include, "include")
    root = _resolve_root(args.directory)

    entry_filter = EntryFilter(
        FilterOptions(
            show_hidden=args.show_hidden,
            dirs_only=args.dirs_only,
            exclude=exclude,
            include=include,
            gitignore=load_gitignore_spec(root) if args.gitignore else None,
        )
    )
    items = _collect(args, root, entry_filter)
    return _format_output(args, items)


def main() -> None:
    """Run the CLI entry point with process arguments.

    Parses args exactly once and writes output to stdout or ``-o`` file.
    Exits with code 1 on user-facing errors.
    """
    parser = build_parser()
    args = parser.parse_args()  # single parse

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        output = _run_with_args(args)
    except TreecmdError as exc:
        sys.stderr.write(f"treecmd: {exc}\n")
        sys.exit(1)

    if args.output_file:
        try:
            Path(args.output_file).write_text(
                output + "\n", encoding="utf-8", newline=""
            )
        except OSError as exc:
            sys.stderr.write(
                f"treecmd: cannot write to '{args.output_file}': {exc}\n"
            )
            sys.exit(1)
    else:
        sys.stdout.write(output + "\n")
