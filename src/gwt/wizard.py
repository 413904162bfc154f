"""Configuration setup wizard."""

from pathlib import Path
from typing import List, Optional, Sequence

from .config import (
    EDITOR_TYPE_CUSTOM,
    EDITOR_TYPE_NONE,
    Config,
    EditorConfig,
    load_config,
    save_config,
)
from .console import get_console
from .editor import is_editor_available
from .exceptions import ConfigError
from .files import FileEntry, discover_files
from .git_utils import get_repo_root
from .prompts import ask_text, select, select_many


def run_config_wizard_non_interactive(
    editor_type: str,
    files: Sequence[str],
    editor_command: Optional[str] = None,
    check_for_updates: Optional[bool] = None,
    cwd: Optional[Path] = None,
) -> Config:
    """
    Save a configuration without prompting.

    Raises:
        ConfigError: If a custom editor has no command or the type is unknown
    """
    if editor_type not in (EDITOR_TYPE_CUSTOM, EDITOR_TYPE_NONE):
        raise ConfigError(f"Unknown editor type: {editor_type}")
    if editor_type == EDITOR_TYPE_CUSTOM and not (editor_command and editor_command.strip()):
        raise ConfigError("A custom editor needs a command")

    config = Config(
        editor=EditorConfig(
            type=editor_type,
            command=editor_command.strip() if editor_type == EDITOR_TYPE_CUSTOM else None,
        ),
        files_to_copy=list(files),
        check_for_updates=check_for_updates,
    )
    save_config(config, cwd)
    return config


def _validate_command(value: str) -> Optional[str]:
    if not value:
        return "Command cannot be empty"
    return None


def _prompt_custom_editor() -> str:
    console = get_console()
    command = ask_text(
        'Enter editor command (e.g. "code", "/usr/bin/vim")',
        validate=_validate_command,
    )
    if not is_editor_available(command):
        console.print(
            f"[yellow]⚠[/yellow] Command '{command}' not found in PATH or as a file. "
            "Make sure to install it before creating worktrees."
        )
    return command


def _file_label(entry: FileEntry) -> str:
    return f"{entry.name}/" if entry.is_directory else entry.name


def run_config_wizard(cwd: Optional[Path] = None) -> Config:
    """
    Interactively choose the editor and the files copied into new worktrees.

    Only top-level entries of the repository are offered for copying; nested
    paths can still be added by editing .gwt/config.

    Returns:
        The saved config
    """
    console = get_console()
    console.print("\n[bold cyan]Configuration Setup[/bold cyan]\n")

    editor_type = select(
        "Select editor type:",
        [
            ("None (disable editor launching)", EDITOR_TYPE_NONE),
            ("Custom command", EDITOR_TYPE_CUSTOM),
        ],
    )

    editor_command: Optional[str] = None
    if editor_type == EDITOR_TYPE_CUSTOM:
        editor_command = _prompt_custom_editor()

    repo = get_repo_root(cwd)
    available = discover_files(repo, max_depth=0)
    selected: List[str] = []
    if available:
        selected = select_many(
            "Select files/directories to copy to new worktrees (space to toggle, enter to confirm):",
            [(_file_label(entry), entry.name) for entry in available],
        )

    existing = load_config(cwd)
    config = run_config_wizard_non_interactive(
        editor_type=editor_type,
        editor_command=editor_command,
        files=selected,
        check_for_updates=existing.check_for_updates if existing else None,
        cwd=cwd,
    )
    console.print("\n[bold green]✓[/bold green] Configuration saved\n")
    return config
