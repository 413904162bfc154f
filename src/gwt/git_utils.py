"""Git operations wrapper utilities."""

import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .exceptions import GitError, NotInGitRepoError
from .logging_config import get_logger

logger = get_logger(__name__)

_BRANCH_REF_PREFIX = "refs/heads/"


@dataclass(frozen=True)
class Worktree:
    """A worktree entry from `git worktree list --porcelain`."""

    path: Path
    commit: str
    branch: str

    @property
    def short_commit(self) -> str:
        return self.commit[:7]


@dataclass
class BranchList:
    """Local and remote branch names, in git's order."""

    local: List[str] = field(default_factory=list)
    remote: List[str] = field(default_factory=list)


def run_command(
    cmd: List[str],
    cwd: Optional[Path] = None,
    check: bool = True,
    capture: bool = False,
) -> subprocess.CompletedProcess:
    """
    Run a shell command.

    Args:
        cmd: Command and arguments as a list
        cwd: Working directory for the command
        check: Raise exception on non-zero exit code
        capture: Capture stdout/stderr

    Returns:
        CompletedProcess instance

    Raises:
        GitError: If command fails and check=True
    """
    kwargs = {}
    if capture:
        kwargs["stdout"] = subprocess.PIPE
        kwargs["stderr"] = subprocess.PIPE
        kwargs["text"] = True

    logger.debug("Running %s (cwd=%s)", " ".join(cmd), cwd or ".")
    try:
        result = subprocess.run(cmd, cwd=cwd, check=False, **kwargs)
    except FileNotFoundError as e:
        raise GitError(f"Command not found: {cmd[0]}") from e

    if check and result.returncode != 0:
        output = (result.stderr or result.stdout or "").strip() if capture else ""
        raise GitError(f"Command failed: {' '.join(cmd)}\n{output}".rstrip())
    return result


def git_command(
    *args: str,
    repo: Optional[Path] = None,
    check: bool = True,
    capture: bool = False,
) -> subprocess.CompletedProcess:
    """
    Run a git command.

    Args:
        *args: Git command arguments
        repo: Repository path (working directory for git)
        check: Raise exception on non-zero exit code
        capture: Capture stdout/stderr

    Returns:
        CompletedProcess instance

    Raises:
        GitError: If git command fails
    """
    cmd = ["git"] + list(args)
    return run_command(cmd, cwd=repo, check=check, capture=capture)


def is_git_repo(path: Optional[Path] = None) -> bool:
    """Check whether path (default: current directory) is inside a git repository."""
    try:
        result = git_command("rev-parse", "--git-dir", repo=path, check=False, capture=True)
    except GitError:
        return False
    return result.returncode == 0


def get_repo_root(path: Optional[Path] = None) -> Path:
    """
    Get the root directory of the git repository (or linked worktree).

    Args:
        path: Optional path to start from (defaults to current directory)

    Returns:
        Path to repository root

    Raises:
        NotInGitRepoError: If not in a git repository
    """
    try:
        result = git_command("rev-parse", "--show-toplevel", repo=path, capture=True)
    except GitError:
        raise NotInGitRepoError()
    return Path(result.stdout.strip()).resolve()


def get_git_common_dir(path: Optional[Path] = None) -> Path:
    """
    Get the .git directory shared by the main worktree and all linked worktrees.

    Raises:
        NotInGitRepoError: If not in a git repository
    """
    try:
        result = git_command(
            "rev-parse", "--path-format=absolute", "--git-common-dir", repo=path, capture=True
        )
    except GitError:
        raise NotInGitRepoError()
    return Path(result.stdout.strip()).resolve()


def get_main_repo_root(path: Optional[Path] = None) -> Path:
    """
    Get the root of the main worktree, even when called from a linked worktree.

    Raises:
        NotInGitRepoError: If not in a git repository
    """
    return get_git_common_dir(path).parent


def parse_worktree_list(output: str) -> List[Worktree]:
    """
    Parse the output of `git worktree list --porcelain`.

    Records are separated by blank lines:

        worktree /path/to/worktree
        HEAD <commit-sha>
        branch refs/heads/<branch-name>

    Records missing any of the three fields (detached HEAD, bare) are skipped.
    """
    worktrees: List[Worktree] = []

    for entry in output.strip().split("\n\n"):
        path = commit = branch = ""
        for line in entry.splitlines():
            if line.startswith("worktree "):
                path = line[len("worktree "):]
            elif line.startswith("HEAD "):
                commit = line[len("HEAD "):]
            elif line.startswith("branch "):
                branch = line[len("branch "):]
                if branch.startswith(_BRANCH_REF_PREFIX):
                    branch = branch[len(_BRANCH_REF_PREFIX):]

        if path and commit and branch:
            worktrees.append(Worktree(path=Path(path), commit=commit, branch=branch))

    return worktrees


def list_worktrees(repo: Optional[Path] = None) -> List[Worktree]:
    """
    List all worktrees of the repository, main worktree first.

    Raises:
        GitError: If git cannot list worktrees
    """
    result = git_command("worktree", "list", "--porcelain", repo=repo, capture=True)
    return parse_worktree_list(result.stdout)


def add_worktree(
    path: Path,
    branch: str,
    new_branch: Optional[str] = None,
    repo: Optional[Path] = None,
) -> None:
    """
    Add a worktree at path checking out branch.

    Args:
        path: Where the worktree will be created
        branch: Branch (or start point when new_branch is given) to check out
        new_branch: Optional name of a branch to create from branch
        repo: Repository path

    Raises:
        GitError: If git refuses to create the worktree
    """
    args = ["worktree", "add"]
    if new_branch:
        args += ["-b", new_branch]
    args += [str(path), branch]
    git_command(*args, repo=repo, capture=True)


def remove_worktree(path: Path, force: bool = False, repo: Optional[Path] = None) -> None:
    """
    Remove a worktree.

    Raises:
        GitError: If removal fails; the message carries git's stderr
    """
    args = ["worktree", "remove"]
    if force:
        args.append("--force")
    args.append(str(path))
    git_command(*args, repo=repo, capture=True)


def _output_lines(result: subprocess.CompletedProcess) -> List[str]:
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def list_branches(repo: Optional[Path] = None) -> BranchList:
    """
    List local and remote branches.

    A failing git call yields an empty list for that side. Symbolic remote
    references such as `origin/HEAD` are dropped.
    """
    branches = BranchList()

    result = git_command(
        "branch", "--list", "--format=%(refname:short)", repo=repo, check=False, capture=True
    )
    if result.returncode == 0:
        branches.local = _output_lines(result)
    else:
        logger.debug("Listing local branches failed: %s", result.stderr.strip())

    result = git_command(
        "branch", "-r", "--format=%(refname:short)", repo=repo, check=False, capture=True
    )
    if result.returncode == 0:
        # Newer git shortens refs/remotes/origin/HEAD to plain "origin"
        branches.remote = [
            line for line in _output_lines(result) if "HEAD" not in line and "/" in line
        ]
    else:
        logger.debug("Listing remote branches failed: %s", result.stderr.strip())

    return branches


def has_command(name: str) -> bool:
    """
    Check if a command is available in PATH.

    Args:
        name: Command name

    Returns:
        True if command exists, False otherwise
    """
    return bool(shutil.which(name))
