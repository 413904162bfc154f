"""Tests for file discovery and copying."""

import logging
import os
from pathlib import Path

import pytest

from gwt.files import (
    FileEntry,
    copy_files,
    discover_files,
    is_glob_pattern,
    select_files_to_copy_non_interactive,
)


@pytest.fixture
def source(tmp_path: Path) -> Path:
    root = tmp_path / "source"
    root.mkdir()
    (root / ".git").mkdir()
    (root / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    (root / ".env").write_text("SECRET=1\n")
    (root / ".env.local").write_text("LOCAL=1\n")
    (root / "README.md").write_text("# readme\n")
    (root / ".idea").mkdir()
    (root / ".idea" / "workspace.xml").write_text("<project/>\n")
    (root / "config").mkdir()
    (root / "config" / "app.yml").write_text("debug: true\n")
    return root


def names(entries: list[FileEntry]) -> list[str]:
    return [entry.name for entry in entries]


def test_discover_files_recursive(source: Path) -> None:
    entries = discover_files(source)

    assert names(entries) == [
        ".env",
        ".env.local",
        ".idea",
        ".idea/workspace.xml",
        "config",
        "config/app.yml",
        "README.md",
    ]
    assert FileEntry(name=".idea", is_directory=True) in entries
    assert FileEntry(name="config/app.yml", is_directory=False) in entries


def test_discover_files_top_level_only(source: Path) -> None:
    assert names(discover_files(source, max_depth=0)) == [
        ".env",
        ".env.local",
        ".idea",
        "config",
        "README.md",
    ]


def test_discover_files_skips_git(source: Path) -> None:
    assert not any(name.startswith(".git") for name in names(discover_files(source)))


def test_discover_files_missing_directory(tmp_path: Path) -> None:
    assert discover_files(tmp_path / "missing") == []


def test_discover_files_does_not_follow_directory_symlinks(source: Path, tmp_path: Path) -> None:
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "big.bin").write_text("x")
    os.symlink(outside, source / "linked")

    discovered = names(discover_files(source))

    assert "linked" in discovered
    assert "linked/big.bin" not in discovered


def test_select_files_to_copy_non_interactive(source: Path) -> None:
    files = discover_files(source)

    selected = select_files_to_copy_non_interactive(files, [".idea", "missing.txt", ".env"])

    assert selected == [".idea", ".env"]


@pytest.mark.parametrize("pattern, expected", [(".env*", True), ("file?.txt", True), ("[ab].txt", True), (".env", False)])
def test_is_glob_pattern(pattern: str, expected: bool) -> None:
    assert is_glob_pattern(pattern) is expected


def test_copy_files_literal_and_directory(source: Path, tmp_path: Path) -> None:
    dest = tmp_path / "dest"
    dest.mkdir()

    copied = copy_files(source, dest, [".env", ".idea", "config/app.yml"])

    assert copied == [".env", ".idea", "config/app.yml"]
    assert (dest / ".env").read_text() == "SECRET=1\n"
    assert (dest / ".idea" / "workspace.xml").read_text() == "<project/>\n"
    assert (dest / "config" / "app.yml").read_text() == "debug: true\n"


def test_copy_files_glob(source: Path, tmp_path: Path) -> None:
    dest = tmp_path / "dest"
    dest.mkdir()

    copied = copy_files(source, dest, [".env*"])

    assert copied == [".env", ".env.local"]
    assert (dest / ".env.local").exists()
    assert not (dest / "README.md").exists()


def test_copy_files_skips_missing(source: Path, tmp_path: Path) -> None:
    dest = tmp_path / "dest"
    dest.mkdir()

    assert copy_files(source, dest, ["nope.txt", "*.nothing"]) == []


def test_copy_files_overwrites_existing(source: Path, tmp_path: Path) -> None:
    dest = tmp_path / "dest"
    (dest / ".idea").mkdir(parents=True)
    (dest / ".env").write_text("OLD=1\n")
    (dest / ".idea" / "workspace.xml").write_text("<old/>\n")

    copy_files(source, dest, [".env", ".idea"])

    assert (dest / ".env").read_text() == "SECRET=1\n"
    assert (dest / ".idea" / "workspace.xml").read_text() == "<project/>\n"


def test_copy_files_never_copies_git_dir(source: Path, tmp_path: Path) -> None:
    dest = tmp_path / "dest"
    dest.mkdir()

    copy_files(source, dest, [".git", ".gi*"])

    assert not (dest / ".git").exists()


def test_copy_files_logs_failures(
    source: Path, tmp_path: Path, caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A failing entry is reported and the rest are still copied."""
    dest = tmp_path / "dest"
    dest.mkdir()
    # A file where a directory is needed makes the nested copy fail
    (dest / "config").write_text("in the way")

    monkeypatch.setattr(logging.getLogger("gwt"), "propagate", True)

    with caplog.at_level("WARNING", logger="gwt"):
        copied = copy_files(source, dest, ["config/app.yml", ".env"])

    assert copied == [".env"]
    assert "config/app.yml" in caplog.text
