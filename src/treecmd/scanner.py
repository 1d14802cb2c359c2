"""Entry source: depth-annotated directory walk using os.scandir (DFS)."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

logger = logging.getLogger(__name__)

EntryKind = Literal["dir", "file", "symlink"]

DEFAULT_MAX_DEPTH = 3


@dataclass(frozen=True, slots=True)
class Entry:
    """A single filesystem entry discovered during scanning.

    Attributes:
        path: Path of the entry, built from the traversal root as given.
        name: Basename of the entry. May hold surrogate escapes for
            names that are not valid in the filesystem encoding.
        kind: ``dir``, ``file`` or ``symlink`` (an unfollowed link).
        depth: Distance from the traversal root (root = 0).
        parent_path: Path of the containing directory.
        is_link: Whether the path itself is a symbolic link, even when
            it was followed and classified by its target.
    """

    path: Path
    name: str
    kind: EntryKind
    depth: int
    parent_path: Path
    is_link: bool = False

    @property
    def is_dir(self) -> bool:
        return self.kind == "dir"

    def metadata(self) -> os.stat_result | None:
        """Resolve metadata lazily.

        Returns:
            os.stat_result | None: Stat result, or ``None`` when it cannot
            be resolved (I/O error, race, permission denial).
        """
        try:
            if self.kind == "symlink":
                return os.lstat(self.path)
            return os.stat(self.path)
        except OSError:
            logger.debug("Cannot stat: %s", self.path)
            return None


@dataclass(frozen=True, slots=True)
class ScanOptions:
    """Options controlling scanner behavior.

    Attributes:
        max_depth: Deepest entry depth to yield. Directories at this depth
            are not opened.
        follow_symlinks: Treat links to directories as directories and
            descend into them.
        same_filesystem: Do not descend into directories on another device.
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    follow_symlinks: bool = False
    same_filesystem: bool = False


def _root_entry(root: Path) -> Entry:
    return Entry(
        path=root,
        name=root.name or str(root),
        kind="dir",
        depth=0,
        parent_path=root.parent,
        is_link=root.is_symlink(),
    )


def _dir_identity(path: Path | str) -> tuple[int, int] | None:
    try:
        st = os.stat(path)
    except OSError:
        return None
    return st.st_dev, st.st_ino


def scan(
    root: Path,
    options: ScanOptions | None = None,
    descend: Callable[[Entry], bool] | None = None,
) -> Iterator[Entry]:
    """Walk root and yield entries, root first.

    Children of one directory are yielded together in byte order of their
    names; consumers must not rely on any ordering beyond that.

    Args:
        root: Traversal root.
        options: Scanner options. Defaults to ``ScanOptions()``.
        descend: Optional predicate; directories for which it returns
            ``False`` are yielded but not opened.

    Yields:
        Entry: Discovered entries, starting with the depth-0 root.
    """
    scan_options = options or ScanOptions()

    if not root.is_dir():
        return

    yield _root_entry(root)

    root_identity = _dir_identity(root)
    root_device = root_identity[0] if root_identity else None

    # Stack items: (directory_path, depth, identities of it and its ancestors)
    stack: list[tuple[Path, int, frozenset[tuple[int, int]]]] = [
        (root, 0, frozenset([root_identity]) if root_identity else frozenset())
    ]

    while stack:
        current_dir, depth, lineage = stack.pop()

        if depth >= scan_options.max_depth:
            continue

        try:
            with os.scandir(current_dir) as it:
                raw_entries = list(it)
        except OSError:
            logger.debug("Cannot read directory: %s", current_dir)
            continue

        raw_entries.sort(key=lambda e: os.fsencode(e.name))

        child_dirs: list[tuple[Path, int, frozenset[tuple[int, int]]]] = []

        for dir_entry in raw_entries:
            try:
                is_link = dir_entry.is_symlink()
                is_dir = dir_entry.is_dir(
                    follow_symlinks=scan_options.follow_symlinks
                )
            except OSError:
                logger.debug("Cannot stat: %s", dir_entry.path)
                continue

            kind: EntryKind
            if is_dir:
                kind = "dir"
            elif is_link:
                kind = "symlink"
            else:
                kind = "file"

            entry = Entry(
                path=current_dir / dir_entry.name,
                name=dir_entry.name,
                kind=kind,
                depth=depth + 1,
                parent_path=current_dir,
                is_link=is_link,
            )
            yield entry

            if not is_dir or (descend is not None and not descend(entry)):
                continue

            identity = _dir_identity(entry.path)
            if identity is None:
                continue
            if scan_options.same_filesystem and identity[0] != root_device:
                logger.debug("Not crossing filesystem boundary: %s", entry.path)
                continue
            if identity in lineage:
                logger.debug("Symlink loop: %s", entry.path)
                continue
            child_dirs.append((entry.path, depth + 1, lineage | {identity}))

        # Push children in reverse so the first directory is popped first
        for child in reversed(child_dirs):
            stack.append(child)
