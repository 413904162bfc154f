"""Editor detection and detached launching."""

import os
import shlex
import subprocess
import time
from pathlib import Path
from typing import List, Optional

from .config import EDITOR_TYPE_NONE, EditorConfig
from .constants import EDITOR_LAUNCH_DELAY
from .exceptions import ConfigError, EditorNotFoundError
from .git_utils import has_command
from .logging_config import get_logger

logger = get_logger(__name__)


def _command_parts(command: str) -> List[str]:
    """Split an editor command, keeping a bare path with spaces intact."""
    expanded = Path(command).expanduser()
    if ("/" in command or "\\" in command) and expanded.exists():
        return [str(expanded)]
    try:
        parts = shlex.split(command)
    except ValueError:
        return [command]
    if parts and ("/" in parts[0] or "\\" in parts[0]):
        parts[0] = str(Path(parts[0]).expanduser())
    return parts


def is_editor_available(command: str) -> bool:
    """
    Check if an editor command or path can be launched.

    Args:
        command: Command name (e.g. 'code'), absolute or relative path, optionally
            followed by arguments

    Returns:
        True if the executable exists
    """
    parts = _command_parts(command)
    if not parts:
        return False

    executable = parts[0]
    if "/" in executable or "\\" in executable:
        return Path(executable).resolve().exists()
    return has_command(executable)


def detach_process(args: List[str], cwd: Optional[Path] = None) -> subprocess.Popen:
    """
    Start a process that outlives gwt, without ever waiting for it.

    The child runs in its own session with stdio detached from the terminal,
    so gwt can exit while a GUI editor keeps running. The returned handle is
    abandoned by callers; nothing reaps or monitors the child.
    """
    logger.debug("Detaching %s", " ".join(args))
    return subprocess.Popen(
        args,
        cwd=cwd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=os.name == "posix",
        close_fds=True,
    )


def launch_editor(editor: EditorConfig, path: Path) -> bool:
    """
    Open path in the configured editor.

    The editor is spawned detached and never awaited. A short fixed delay
    gives the child a chance to start before gwt exits.

    Args:
        editor: Editor configuration
        path: Directory to open

    Returns:
        True if an editor was launched, False if launching is disabled

    Raises:
        ConfigError: If a custom editor has no command
        EditorNotFoundError: If the editor command is not available
    """
    if editor.type == EDITOR_TYPE_NONE:
        return False

    if not editor.command:
        raise ConfigError(
            f"Editor command is required for type '{editor.type}'. Run 'gwt config set <editor>'"
        )

    if not is_editor_available(editor.command):
        raise EditorNotFoundError(editor.command)

    parts = _command_parts(editor.command)
    try:
        detach_process(parts + [str(path)])
    except OSError as e:
        raise EditorNotFoundError(f"{editor.command} ({e})") from e

    time.sleep(EDITOR_LAUNCH_DELAY)
    return True
