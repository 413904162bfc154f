"""Constants and default values for gwt."""

import re
from pathlib import Path

# Repo-local configuration, relative to the repository root
CONFIG_DIR = ".gwt"
CONFIG_FILE = "config"
UPDATE_STAMP_FILE = "last-update-check"

CONFIG_VERSION_V1 = "1.0"
CONFIG_VERSION = "2.0"

# Update check
GITHUB_API_URL = "https://api.github.com/repos/ggalmazor/gwt/releases/latest"
INSTALL_COMMAND = "curl -fsSL https://raw.githubusercontent.com/ggalmazor/gwt/main/install.sh | bash"
UPDATE_CHECK_INTERVAL_SECONDS = 24 * 60 * 60
UPDATE_CHECK_TIMEOUT_SECONDS = 3.0
NO_UPDATE_CHECK_ENV = "GWT_NO_UPDATE_CHECK"

# Seconds to wait after spawning a detached editor
EDITOR_LAUNCH_DELAY = 0.2

# git worktree remove failure signatures that a forced removal can resolve
UNCOMMITTED_WORK_MARKERS = ("uncommitted changes", "modified or untracked files")

_UNSAFE_PATH_CHARS = re.compile(r"[^\w.-]", re.ASCII)


def sanitize_branch_name(branch: str) -> str:
    """
    Make a branch name safe to use as a directory name.

    Slashes become hyphens and anything outside [A-Za-z0-9_.-] is dropped.

    Example:
        >>> sanitize_branch_name("feature/add-user")
        'feature-add-user'
    """
    return _UNSAFE_PATH_CHARS.sub("", branch.replace("/", "-"))


def default_worktree_path(repo_path: Path, branch_name: str) -> Path:
    """
    Generate the default worktree path for a branch.

    Format: ../<repo>-<sanitized branch>
    Example: /Users/dave/myproject + feature/api -> /Users/dave/myproject-feature-api

    Args:
        repo_path: Path to the repository root
        branch_name: Branch checked out in the new worktree

    Returns:
        Default worktree path
    """
    repo_path = repo_path.resolve()
    return repo_path.parent / f"{repo_path.name}-{sanitize_branch_name(branch_name)}"
