"""Tree assembly: group a flat entry stream by parent and order it pre-order.

The scanner and filter hand over entries in no guaranteed order. This module
rebuilds parent/child relationships from ``Entry.parent_path``, sorts each
sibling group with a total comparator, and walks the groups depth-first from
the traversal root.

Two variants exist. ``assemble`` does everything on the calling thread.
``assemble_parallel`` distributes grouping (by chunk) and per-group sorting
over a thread pool, then runs the same single-threaded walk, so both return
identical sequences for the same input.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from treecmd import TreecmdError
from treecmd.scanner import Entry

SortMode = Literal["name", "time"]

Groups = dict[Path, list[Entry]]


@dataclass(frozen=True, slots=True)
class TreeItem:
    """One position in the ordered sequence.

    Attributes:
        entry: The entry at this position.
        is_last: Whether the entry is the last member of its sibling
            group. Always ``True`` for the root.
    """

    entry: Entry
    is_last: bool


def sort_key(sort_mode: SortMode = "name") -> Callable[[Entry], tuple[Any, ...]]:
    """Return the sibling-group sort key for *sort_mode*.

    Directories always come first. In ``time`` mode newer entries come
    before older ones and entries without resolvable metadata sort last.
    Names break every remaining tie by filesystem byte order, which is
    total within one group.
    """

    def by_name(entry: Entry) -> tuple[Any, ...]:
        return (0 if entry.is_dir else 1, os.fsencode(entry.name))

    def by_time(entry: Entry) -> tuple[Any, ...]:
        meta = entry.metadata()
        if meta is None:
            return (0 if entry.is_dir else 1, 1, 0, os.fsencode(entry.name))
        return (
            0 if entry.is_dir else 1,
            0,
            -meta.st_mtime_ns,
            os.fsencode(entry.name),
        )

    return by_time if sort_mode == "time" else by_name


def find_root(entries: Sequence[Entry]) -> Entry:
    """Return the first depth-0 entry.

    Raises:
        TreecmdError: If there is none.
    """
    for entry in entries:
        if entry.depth == 0:
            return entry
    raise TreecmdError("no traversal root: the directory could not be read")


def group_by_parent(entries: Iterable[Entry]) -> Groups:
    """Partition non-root entries into sibling groups keyed by parent path."""
    groups: Groups = {}
    for entry in entries:
        if entry.depth == 0:
            continue
        groups.setdefault(entry.parent_path, []).append(entry)
    return groups


def _emit(root: Entry, groups: Groups) -> list[TreeItem]:
    """Walk already-sorted groups depth-first from *root*."""
    result: list[TreeItem] = [TreeItem(root, True)]

    # Push children in reverse order so that the first child is popped first.
    stack: list[TreeItem] = []
    children = groups.get(root.path, [])
    for i in range(len(children) - 1, -1, -1):
        stack.append(TreeItem(children[i], i == len(children) - 1))

    while stack:
        item = stack.pop()
        result.append(item)
        if not item.entry.is_dir:
            continue
        grandchildren = groups.get(item.entry.path, [])
        for j in range(len(grandchildren) - 1, -1, -1):
            stack.append(TreeItem(grandchildren[j], j == len(grandchildren) - 1))

    return result


def assemble(
    entries: Iterable[Entry],
    sort_mode: SortMode = "name",
) -> list[TreeItem]:
    """Build the ordered sequence on the calling thread.

    Args:
        entries: Filtered entries, in any order, including the root.
        sort_mode: ``name`` (default) or ``time``.

    Returns:
        list[TreeItem]: Pre-order sequence, root first.

    Raises:
        TreecmdError: If no depth-0 entry is present.
    """
    entries = list(entries)
    root = find_root(entries)
    key = sort_key(sort_mode)
    groups = group_by_parent(entries)
    for children in groups.values():
        children.sort(key=key)
    return _emit(root, groups)


def _chunks(entries: list[Entry], count: int) -> list[list[Entry]]:
    size = max(1, -(-len(entries) // count))
    return [entries[i : i + size] for i in range(0, len(entries), size)]


def assemble_parallel(
    entries: Iterable[Entry],
    sort_mode: SortMode = "name",
    workers: int | None = None,
) -> list[TreeItem]:
    """Build the ordered sequence using a worker pool.

    Each worker groups a disjoint chunk of entries; the partial maps are
    merged on the calling thread before any group is sorted. Groups are
    then sorted in the pool and the depth-first walk runs on the calling
    thread, so the result equals ``assemble(entries, sort_mode)``.

    Args:
        entries: Filtered entries, in any order, including the root.
        sort_mode: ``name`` (default) or ``time``.
        workers: Pool size. ``None`` uses the executor default formula.

    Returns:
        list[TreeItem]: Pre-order sequence, root first.

    Raises:
        TreecmdError: If no depth-0 entry is present.
    """
    entries = list(entries)
    root = find_root(entries)
    key = sort_key(sort_mode)

    pool_size = workers or min(32, (os.cpu_count() or 1) + 4)

    with ThreadPoolExecutor(max_workers=pool_size) as executor:
        groups: Groups = {}
        for partial in executor.map(group_by_parent, _chunks(entries, pool_size)):
            for parent, children in partial.items():
                groups.setdefault(parent, []).extend(children)

        parents = list(groups)
        sorted_children = executor.map(
            lambda children: sorted(children, key=key),
            [groups[parent] for parent in parents],
        )
        groups = dict(zip(parents, sorted_children))

    return _emit(root, groups)
