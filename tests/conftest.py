"""Shared fixtures and entry builders for treecmd tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from treecmd.scanner import Entry, EntryKind


def make_entry(root: Path, rel: str, kind: EntryKind = "file") -> Entry:
    """Build an Entry for ``root / rel`` without touching the filesystem.

    Args:
        root: Traversal root.
        rel: POSIX path relative to root; ``""`` builds the root entry.
        kind: Entry kind.
    """
    if not rel:
        return Entry(
            path=root,
            name=root.name or str(root),
            kind="dir",
            depth=0,
            parent_path=root.parent,
        )
    parts = rel.split("/")
    path = root.joinpath(*parts)
    return Entry(
        path=path,
        name=parts[-1],
        kind=kind,
        depth=len(parts),
        parent_path=path.parent,
    )


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Create a standard test directory tree.

    Structure::

        root/
        ├── .git/
        │   └── config
        ├── docs/
        │   └── guide.md
        ├── src/
        │   ├── api/
        │   │   ├── auth.py
        │   │   └── user.py
        │   ├── models/
        │   │   └── user.py
        │   └── main.py
        ├── README.md
        └── setup.cfg
    """
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "config").write_text("[core]")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "guide.md").write_text("guide")
    (tmp_path / "src" / "api").mkdir(parents=True)
    (tmp_path / "src" / "api" / "auth.py").write_text("auth")
    (tmp_path / "src" / "api" / "user.py").write_text("user")
    (tmp_path / "src" / "models").mkdir()
    (tmp_path / "src" / "models" / "user.py").write_text("user")
    (tmp_path / "src" / "main.py").write_text("main")
    (tmp_path / "README.md").write_text("readme")
    (tmp_path / "setup.cfg").write_text("[metadata]")
    return tmp_path


@pytest.fixture
def summary_tree(tmp_path: Path) -> Path:
    """Two nested subdirectories and three top-level files.

    Structure::

        root/
        ├── outer/
        │   └── inner/
        ├── a.txt
        ├── b.txt
        └── c.txt
    """
    (tmp_path / "outer" / "inner").mkdir(parents=True)
    for name in ("a.txt", "b.txt", "c.txt"):
        (tmp_path / name).write_text(name)
    return tmp_path
