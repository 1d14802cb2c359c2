"""JSON document output formatter.

The ordered sequence is folded back into nested ``FileNode`` objects. Each
entry is attached to the node of its ``parent_path``; because parents always
precede their children in the sequence, the parent node already exists and
children are appended in sequence order.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path

from treecmd.assembler import TreeItem
from treecmd.formatter.label import display_text, path_text
from treecmd.scanner import Entry


@dataclass(slots=True)
class FileNode:
    """A node of the JSON document.

    Attributes:
        name: Base name of the entry.
        path: Path of the entry as walked from the root.
        is_dir: Whether the entry is a directory.
        size: Size in bytes, ``0`` when metadata is unavailable.
        modified: Modification time in Unix seconds, ``0`` when unavailable.
        children: Child nodes in display order.
    """

    name: str
    path: str
    is_dir: bool
    size: int = 0
    modified: int = 0
    children: list[FileNode] = field(default_factory=list)


def _node_for(entry: Entry, root_text: str | None) -> FileNode:
    meta = entry.metadata()
    size = meta.st_size if meta is not None else 0
    modified = int(meta.st_mtime) if meta is not None and meta.st_mtime > 0 else 0
    return FileNode(
        name=display_text(entry.name),
        path=display_text(path_text(entry, root_text)),
        is_dir=entry.is_dir,
        size=size,
        modified=modified,
    )


def build_document(
    items: list[TreeItem], root_text: str | None = None
) -> FileNode:
    """Nest the ordered sequence under its root node.

    Args:
        items: Ordered sequence from the assembler, root first.
        root_text: Root as typed by the user; node paths are spelled
            from it when given.

    Returns:
        FileNode: Root node. An empty sequence yields an empty ``.`` node.
    """
    if not items:
        return FileNode(name=".", path=".", is_dir=True)

    root = _node_for(items[0].entry, root_text)
    nodes: dict[Path, FileNode] = {items[0].entry.path: root}

    for item in items[1:]:
        entry = item.entry
        parent = nodes.get(entry.parent_path)
        if parent is None:
            continue
        node = _node_for(entry, root_text)
        parent.children.append(node)
        if entry.is_dir:
            nodes[entry.path] = node

    return root


def format_json(items: list[TreeItem], root_text: str | None = None) -> str:
    """Render the ordered sequence as a pretty-printed JSON document."""
    document = build_document(items, root_text)
    return json.dumps(asdict(document), indent=2, ensure_ascii=False)
