"""Per-entry label: metadata columns, display name, and type suffix."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass

from treecmd.scanner import Entry

COLUMN_SEPARATOR = "  "

_KB = 1024
_MB = _KB * 1024
_GB = _MB * 1024

_ASCII_WHITESPACE = " \t\n\f\r"


@dataclass(frozen=True, slots=True)
class LabelOptions:
    """Options controlling how a single entry is labelled.

    Attributes:
        perms: Prefix a permission string.
        uid: Prefix the owner name.
        gid: Prefix the group name.
        size: Prefix a human-readable size.
        mtime: Prefix the modification time (Unix seconds).
        full_path: Show the path instead of the base name.
        classify: Append ``/``, ``@`` or ``*`` by entry type.
        quiet: Replace non-printable characters with ``?``.
        root_text: Traversal root as typed by the user. Full paths are
            spelled from it so that ``.`` stays ``./name``.
    """

    perms: bool = False
    uid: bool = False
    gid: bool = False
    size: bool = False
    mtime: bool = False
    full_path: bool = False
    classify: bool = False
    quiet: bool = False
    root_text: str | None = None


def display_text(value: str) -> str:
    """Decode a filesystem string lossily for display."""
    return os.fsencode(value).decode("utf-8", "replace")


def path_text(entry: Entry, root_text: str | None = None) -> str:
    """Return the path of *entry*, joined onto *root_text* when given."""
    if root_text is None:
        return str(entry.path)
    if entry.depth == 0:
        return root_text
    return os.path.join(root_text, *entry.path.parts[-entry.depth :])


def humanize_size(size: int) -> str:
    if size < _KB:
        return f"{size} B"
    if size < _MB:
        return f"{size / _KB:.1f} KB"
    if size < _GB:
        return f"{size / _MB:.1f} MB"
    return f"{size / _GB:.1f} GB"


def format_perms(entry: Entry) -> str:
    # Permission resolution is not attempted; the string reflects the kind only.
    if entry.is_dir:
        return "drwxr-xr-x"
    if entry.kind == "symlink":
        return "lrwxrwxrwx"
    return "-rw-r--r--"


def format_size(entry: Entry) -> str:
    if entry.is_dir:
        return ""
    meta = entry.metadata()
    if meta is None:
        return ""
    return humanize_size(meta.st_size)


def format_mtime(entry: Entry) -> str:
    meta = entry.metadata()
    if meta is None or meta.st_mtime < 0:
        return ""
    return str(int(meta.st_mtime))


def is_executable(entry: Entry) -> bool:
    meta = entry.metadata()
    if meta is None or not stat.S_ISREG(meta.st_mode):
        return False
    return bool(meta.st_mode & 0o111)


def _replace_unprintable(text: str) -> str:
    return "".join(
        ch if ch.isascii() and (ch.isprintable() or ch in _ASCII_WHITESPACE) else "?"
        for ch in text
    )


def format_name(entry: Entry, options: LabelOptions) -> str:
    """Return the display name of *entry* with optional type suffix."""
    name = display_text(
        path_text(entry, options.root_text) if options.full_path else entry.name
    )

    if options.classify:
        if entry.is_dir:
            name += "/"
        elif entry.kind == "symlink":
            name += "@"
        elif is_executable(entry):
            name += "*"

    if options.quiet:
        name = _replace_unprintable(name)

    return name


def format_label(entry: Entry, options: LabelOptions | None = None) -> str:
    """Render the full label for one entry.

    Metadata columns come first, in ``perms``, ``uid``, ``gid``, ``size``,
    ``mtime`` order, each followed by two spaces. A column whose metadata
    cannot be resolved renders as an empty string.
    """
    opts = options or LabelOptions()
    columns: list[str] = []

    if opts.perms:
        columns.append(format_perms(entry))
    if opts.uid:
        columns.append("user")
    if opts.gid:
        columns.append("group")
    if opts.size:
        columns.append(format_size(entry))
    if opts.mtime:
        columns.append(format_mtime(entry))

    prefix = "".join(column + COLUMN_SEPARATOR for column in columns)
    return prefix + format_name(entry, opts)
