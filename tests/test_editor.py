"""Tests for editor detection and launching."""

import os
from pathlib import Path

import pytest

from gwt import editor as editor_module
from gwt.config import EditorConfig
from gwt.editor import is_editor_available, launch_editor
from gwt.exceptions import ConfigError, EditorNotFoundError


@pytest.fixture
def launched(monkeypatch: pytest.MonkeyPatch) -> list[list[str]]:
    """Record detached launches instead of spawning processes."""
    calls: list[list[str]] = []
    monkeypatch.setattr(editor_module, "detach_process", lambda args, cwd=None: calls.append(args))
    monkeypatch.setattr(editor_module.time, "sleep", lambda seconds: None)
    return calls


@pytest.fixture
def fake_editor(tmp_path: Path) -> Path:
    script = tmp_path / "bin dir" / "my-editor"
    script.parent.mkdir()
    script.write_text("#!/bin/sh\nexit 0\n")
    script.chmod(0o755)
    return script


def test_is_editor_available_on_path() -> None:
    assert is_editor_available("git")
    assert is_editor_available("git --no-pager")


def test_is_editor_available_missing() -> None:
    assert not is_editor_available("definitely-not-an-editor-12345")
    assert not is_editor_available("/nonexistent/path/to/editor")


def test_is_editor_available_path_with_spaces(fake_editor: Path) -> None:
    assert is_editor_available(str(fake_editor))


def test_is_editor_available_home_relative(fake_editor: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOME", str(fake_editor.parent.parent))

    assert is_editor_available("~/bin dir/my-editor")


def test_launch_editor_none(launched: list[list[str]], tmp_path: Path) -> None:
    assert launch_editor(EditorConfig(type="none"), tmp_path) is False
    assert launched == []


def test_launch_editor_custom(launched: list[list[str]], tmp_path: Path) -> None:
    assert launch_editor(EditorConfig(type="custom", command="git"), tmp_path) is True
    assert launched == [["git", str(tmp_path)]]


def test_launch_editor_with_arguments(launched: list[list[str]], tmp_path: Path) -> None:
    launch_editor(EditorConfig(type="custom", command="git --no-pager"), tmp_path)

    assert launched == [["git", "--no-pager", str(tmp_path)]]


def test_launch_editor_path_with_spaces(launched: list[list[str]], fake_editor: Path, tmp_path: Path) -> None:
    launch_editor(EditorConfig(type="custom", command=str(fake_editor)), tmp_path)

    assert launched == [[str(fake_editor), str(tmp_path)]]


def test_launch_editor_missing_command(launched: list[list[str]], tmp_path: Path) -> None:
    with pytest.raises(EditorNotFoundError, match="definitely-not-an-editor"):
        launch_editor(EditorConfig(type="custom", command="definitely-not-an-editor-12345"), tmp_path)
    assert launched == []


def test_launch_editor_custom_without_command(launched: list[list[str]], tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Editor command is required"):
        launch_editor(EditorConfig(type="custom"), tmp_path)


def test_launch_editor_waits_briefly(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    sleeps: list[float] = []
    monkeypatch.setattr(editor_module, "detach_process", lambda args, cwd=None: None)
    monkeypatch.setattr(editor_module.time, "sleep", sleeps.append)

    launch_editor(EditorConfig(type="custom", command="git"), tmp_path)

    assert sleeps == [0.2]


@pytest.mark.skipif(os.name != "posix", reason="uses /bin/sh")
def test_detach_process_runs_in_new_session(tmp_path: Path) -> None:
    marker = tmp_path / "marker"

    process = editor_module.detach_process(["/bin/sh", "-c", f"touch '{marker}'"])
    process.wait(timeout=10)

    assert marker.exists()
