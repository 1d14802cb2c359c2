"""Tests for treecmd.filter."""

import os
import re
import sys
from pathlib import Path

import pytest
from pathspec import GitIgnoreSpec

from tests.conftest import make_entry
from treecmd.filter import EntryFilter, FilterOptions, as_text, load_gitignore_spec

ROOT = Path("/fake/root")


def _keep(rel: str, kind: str = "file", **options: object) -> bool:
    entry = make_entry(ROOT, rel, kind)  # type: ignore[arg-type]
    return EntryFilter(FilterOptions(**options)).keep(entry)  # type: ignore[arg-type]


class TestRootAlwaysKept:
    @pytest.mark.parametrize(
        "options",
        [
            {"dirs_only": True},
            {"include": re.compile("^nothing$")},
            {"exclude": re.compile(".*")},
        ],
    )
    def test_root_kept(self, options: dict[str, object]) -> None:
        assert _keep("", "dir", **options) is True

    def test_hidden_root_kept(self) -> None:
        root = Path("/fake/.hidden_root")
        entry = make_entry(root, "")
        assert EntryFilter().keep(entry) is True


class TestHidden:
    def test_hidden_name_dropped(self) -> None:
        assert _keep(".env") is False

    def test_hidden_ancestor_drops_visible_child(self) -> None:
        assert _keep(".git", "dir") is False
        assert _keep(".git/config") is False

    def test_deep_hidden_ancestor(self) -> None:
        assert _keep("src/.cache/objects/blob.bin") is False

    def test_show_hidden_keeps_everything(self) -> None:
        assert _keep(".git", "dir", show_hidden=True) is True
        assert _keep(".git/config", show_hidden=True) is True

    def test_hidden_directory_above_root_ignored(self) -> None:
        root = Path("/home/user/.config/project")
        entry = make_entry(root, "settings.toml")
        assert EntryFilter().keep(entry) is True

    def test_visible_names_kept(self) -> None:
        assert _keep("src/main.py") is True


class TestTypeAndPatterns:
    def test_dirs_only(self) -> None:
        assert _keep("src", "dir", dirs_only=True) is True
        assert _keep("src/main.py", dirs_only=True) is False
        assert _keep("link", "symlink", dirs_only=True) is False

    @pytest.mark.parametrize(
        ("pattern", "name", "expected"),
        [
            ("target", "target", False),
            ("target", "retargeted", False),
            ("^target$", "retargeted", True),
            (r"\.pyc$", "mod.pyc", False),
            (r"\.pyc$", "mod.py", True),
        ],
    )
    def test_exclude(self, pattern: str, name: str, expected: bool) -> None:
        assert _keep(name, exclude=re.compile(pattern)) is expected

    def test_exclude_matches_base_name_only(self) -> None:
        assert _keep("target/lib.rs", exclude=re.compile("^target$")) is True

    @pytest.mark.parametrize(
        ("pattern", "name", "expected"),
        [
            (r"\.py$", "main.py", True),
            (r"\.py$", "README.md", False),
            (".*", "anything", True),
        ],
    )
    def test_include(self, pattern: str, name: str, expected: bool) -> None:
        assert _keep(name, include=re.compile(pattern)) is expected

    def test_exclude_takes_precedence_over_include(self) -> None:
        assert (
            _keep(
                "target",
                exclude=re.compile("target"),
                include=re.compile(".*"),
            )
            is False
        )

    def test_filter_is_idempotent(self) -> None:
        entry_filter = EntryFilter(
            FilterOptions(exclude=re.compile("^build$"), include=re.compile("."))
        )
        for rel in ("build", "src", ".git/config", "a/b/c.txt"):
            entry = make_entry(ROOT, rel)
            assert entry_filter.keep(entry) == entry_filter.keep(entry)


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX byte names")
class TestNonTextNames:
    BAD = os.fsdecode(b"bad\xff.txt")

    def test_as_text(self) -> None:
        assert as_text("plain.txt") == "plain.txt"
        assert as_text(self.BAD) is None

    def test_include_drops_non_text_name(self) -> None:
        assert _keep(self.BAD, include=re.compile(".*")) is False

    def test_exclude_does_not_apply_to_non_text_name(self) -> None:
        assert _keep(self.BAD, exclude=re.compile(".*")) is True

    def test_kept_without_patterns(self) -> None:
        assert _keep(self.BAD) is True


class TestGitignore:
    def _spec(self, *lines: str) -> GitIgnoreSpec:
        return GitIgnoreSpec.from_lines(list(lines))

    def test_file_pattern(self) -> None:
        spec = self._spec("*.pyc")
        assert _keep("src/app.pyc", gitignore=spec) is False
        assert _keep("src/app.py", gitignore=spec) is True

    def test_directory_pattern_matches_directories_only(self) -> None:
        spec = self._spec("dist/")
        assert _keep("dist", "dir", gitignore=spec) is False
        assert _keep("dist", "file", gitignore=spec) is True

    def test_anchored_pattern_uses_root_relative_path(self) -> None:
        spec = self._spec("/build")
        assert _keep("build", "dir", gitignore=spec) is False
        assert _keep("src/build", "dir", gitignore=spec) is True


class TestLoadGitignoreSpec:
    def test_no_gitignore_returns_none(self, tmp_path: Path) -> None:
        assert load_gitignore_spec(tmp_path) is None

    @pytest.mark.parametrize("content", ["*.pyc\n__pycache__/\n", "", "# comment\n"])
    def test_gitignore_file_returns_spec(self, tmp_path: Path, content: str) -> None:
        (tmp_path / ".gitignore").write_text(content)
        assert load_gitignore_spec(tmp_path) is not None

    def test_loaded_spec_matches(self, tmp_path: Path) -> None:
        (tmp_path / ".gitignore").write_text("*.log\n")
        spec = load_gitignore_spec(tmp_path)
        assert spec is not None
        assert spec.match_file("debug.log")
        assert not spec.match_file("debug.txt")
