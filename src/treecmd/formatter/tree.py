"""Tree-drawing output formatter (box-drawing or ASCII) and reduced listing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from treecmd.assembler import TreeItem
from treecmd.formatter.label import (
    LabelOptions,
    display_text,
    format_label,
    path_text,
)


@dataclass(frozen=True, slots=True)
class Glyphs:
    """Box-drawing character set for tree rendering."""

    branch: str  # ├──
    last_branch: str  # └──
    vertical: str  # │
    space: str  # (indent)


UNICODE_GLYPHS = Glyphs(
    branch="├── ",
    last_branch="└── ",
    vertical="│   ",
    space="    ",
)

# Fixed character-for-character substitution for --ascii.
ASCII_TABLE = str.maketrans({"└": "`", "├": "|", "─": "-", "│": "|"})

ASCII_GLYPHS = Glyphs(
    branch=UNICODE_GLYPHS.branch.translate(ASCII_TABLE),
    last_branch=UNICODE_GLYPHS.last_branch.translate(ASCII_TABLE),
    vertical=UNICODE_GLYPHS.vertical.translate(ASCII_TABLE),
    space=UNICODE_GLYPHS.space.translate(ASCII_TABLE),
)


@dataclass(frozen=True, slots=True)
class TreeOptions:
    """Options for the tree formatter.

    Attributes:
        charset: Output charset, ``unicode`` or ``ascii``.
        reduced: Print one label per line with no glyphs, no root line
            and no summary.
        label: Per-entry label options.
    """

    charset: Literal["unicode", "ascii"] = "unicode"
    reduced: bool = False
    label: LabelOptions = field(default_factory=LabelOptions)


def _report_line(dir_count: int, file_count: int) -> str:
    """Build GNU tree-like summary line.

    Args:
        dir_count: Number of directories, excluding the root.
        file_count: Number of non-directory entries.

    Returns:
        str: Summary string with singular/plural inflection.
    """
    dir_word = "directory" if dir_count == 1 else "directories"
    file_word = "file" if file_count == 1 else "files"
    return f"{dir_count} {dir_word}, {file_count} {file_word}"


def _format_reduced(items: list[TreeItem], opts: TreeOptions) -> str:
    return "\n".join(
        format_label(item.entry, opts.label)
        for item in items
        if item.entry.depth > 0
    )


def format_tree(
    items: list[TreeItem],
    options: TreeOptions | None = None,
) -> str:
    """Render an ordered sequence as tree-drawing text.

    A stack of ``is_last`` flags, one per open ancestor directory, decides
    each prefix segment. Visiting depth ``d`` truncates the stack to
    ``d - 1`` entries, which closes every subtree finished since the
    previous line.

    Args:
        items: Ordered sequence from the assembler, root first.
        options: Rendering options.

    Returns:
        str: Root line, one line per entry and an optional summary report.
    """
    opts = options or TreeOptions()

    if opts.reduced:
        return _format_reduced(items, opts)

    glyphs = ASCII_GLYPHS if opts.charset == "ascii" else UNICODE_GLYPHS

    lines: list[str] = []
    ancestors_last: list[bool] = []
    dir_count = 0
    file_count = 0

    for item in items:
        entry = item.entry
        if entry.depth == 0:
            lines.append(display_text(path_text(entry, opts.label.root_text)))
            continue

        del ancestors_last[entry.depth - 1 :]

        prefix = "".join(
            glyphs.space if last else glyphs.vertical for last in ancestors_last
        )
        connector = glyphs.last_branch if item.is_last else glyphs.branch
        lines.append(f"{prefix}{connector}{format_label(entry, opts.label)}")

        if entry.is_dir:
            dir_count += 1
            ancestors_last.append(item.is_last)
        else:
            file_count += 1

    if dir_count or file_count:
        lines.append("")
        lines.append(_report_line(dir_count, file_count))

    return "\n".join(lines)
