"""Entry filtering: visibility, type, regex include/exclude and gitignore."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from pathspec import GitIgnoreSpec

from treecmd.scanner import Entry

logger = logging.getLogger(__name__)

HIDDEN_MARKER = "."


@dataclass(frozen=True, slots=True)
class FilterOptions:
    """Options controlling which entries are retained.

    Attributes:
        show_hidden: Keep entries whose name, or any ancestor's name,
            starts with ``.``.
        dirs_only: Keep directories only.
        exclude: Drop entries whose base name matches.
        include: Keep only entries whose base name matches.
        gitignore: Drop entries matched by the root ``.gitignore``.
    """

    show_hidden: bool = False
    dirs_only: bool = False
    exclude: re.Pattern[str] | None = None
    include: re.Pattern[str] | None = None
    gitignore: GitIgnoreSpec | None = None


def load_gitignore_spec(root: Path) -> GitIgnoreSpec | None:
    """Load the ``.gitignore`` found directly under *root*.

    Returns:
        GitIgnoreSpec | None: Compiled spec, or ``None`` when the file is
        missing or unreadable.
    """
    gitignore_path = root / ".gitignore"
    try:
        lines = gitignore_path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError):
        logger.debug("Cannot read .gitignore: %s", gitignore_path)
        return None
    return GitIgnoreSpec.from_lines(lines)


def as_text(name: str) -> str | None:
    """Return *name* when it is representable as text, else ``None``.

    Names that were not valid in the filesystem encoding carry surrogate
    escapes and cannot be encoded back to UTF-8.
    """
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return None
    return name


def _relative_parts(entry: Entry) -> tuple[str, ...]:
    """Path components between the traversal root and *entry*, inclusive."""
    if entry.depth == 0:
        return ()
    return entry.path.parts[-entry.depth :]


class EntryFilter:
    """Pure keep/drop predicate over a single entry."""

    def __init__(self, options: FilterOptions | None = None) -> None:
        self._options = options or FilterOptions()

    def keep(self, entry: Entry) -> bool:
        """Return whether *entry* is retained.

        The traversal root is always kept. Exclude is evaluated before
        include, so a name matching both is dropped.
        """
        if entry.depth == 0:
            return True

        opts = self._options
        parts = _relative_parts(entry)

        if not opts.show_hidden and any(
            part.startswith(HIDDEN_MARKER) for part in parts
        ):
            return False

        if opts.dirs_only and not entry.is_dir:
            return False

        text_name = as_text(entry.name)

        if (
            opts.exclude is not None
            and text_name is not None
            and opts.exclude.search(text_name)
        ):
            return False

        if opts.include is not None:
            if text_name is None or not opts.include.search(text_name):
                return False

        if opts.gitignore is not None:
            rel = str(PurePosixPath(*parts))
            if entry.is_dir:
                rel += "/"
            if opts.gitignore.match_file(rel):
                return False

        return True
