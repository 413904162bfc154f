"""Tests for the configuration wizard."""

from pathlib import Path

import pytest

from gwt import wizard
from gwt.config import Config, EditorConfig, load_config, save_config
from gwt.exceptions import ConfigError, PromptCancelledError
from gwt.wizard import run_config_wizard, run_config_wizard_non_interactive


def test_non_interactive_custom_editor(temp_git_repo: Path) -> None:
    config = run_config_wizard_non_interactive("custom", [".env"], editor_command="idea")

    assert config == Config(editor=EditorConfig(type="custom", command="idea"), files_to_copy=[".env"])
    assert load_config() == config


def test_non_interactive_no_editor(temp_git_repo: Path) -> None:
    config = run_config_wizard_non_interactive("none", [], editor_command="ignored")

    assert config.editor == EditorConfig(type="none")


def test_non_interactive_custom_requires_command(temp_git_repo: Path) -> None:
    with pytest.raises(ConfigError):
        run_config_wizard_non_interactive("custom", [])

    assert load_config() is None


def test_non_interactive_unknown_type(temp_git_repo: Path) -> None:
    with pytest.raises(ConfigError, match="Unknown editor type"):
        run_config_wizard_non_interactive("emacs", [])


@pytest.fixture
def prompts(monkeypatch: pytest.MonkeyPatch):
    """Script the wizard's prompts: returns a function taking the canned answers."""

    def script(editor_type: str, files: list[str], command: str = "") -> dict[str, list]:
        offered: dict[str, list] = {"files": []}

        def fake_select_many(message: str, options: list) -> list[str]:
            offered["files"] = options
            return files

        monkeypatch.setattr(wizard, "select", lambda message, options, default_index=0: editor_type)
        monkeypatch.setattr(wizard, "select_many", fake_select_many)
        monkeypatch.setattr(wizard, "ask_text", lambda message, default=None, validate=None: command)
        return offered

    return script


def test_wizard_saves_selection(temp_git_repo: Path, prompts) -> None:
    (temp_git_repo / ".env").write_text("A=1\n")
    (temp_git_repo / ".idea").mkdir()
    (temp_git_repo / ".idea" / "workspace.xml").write_text("<project/>\n")
    offered = prompts("custom", [".env", ".idea"], command="git")

    config = run_config_wizard()

    assert config == Config(editor=EditorConfig(type="custom", command="git"), files_to_copy=[".env", ".idea"])
    assert load_config() == config
    assert (".idea/", ".idea") in offered["files"]
    assert (".env", ".env") in offered["files"]
    # Only top-level entries are offered
    assert all("workspace.xml" not in label for label, _ in offered["files"])


def test_wizard_keeps_update_preference(temp_git_repo: Path, prompts) -> None:
    save_config(Config(check_for_updates=False))
    prompts("none", [])

    config = run_config_wizard()

    assert config.check_for_updates is False


def test_wizard_cancelled(temp_git_repo: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def cancel(*args, **kwargs):
        raise PromptCancelledError()

    monkeypatch.setattr(wizard, "select", cancel)

    with pytest.raises(PromptCancelledError):
        run_config_wizard()
    assert load_config() is None
