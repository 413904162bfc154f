"""Core business logic for gwt worktree commands."""

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Set, Union

from rich.table import Table

from .config import EDITOR_TYPE_NONE, Config, load_config
from .console import get_console
from .constants import UNCOMMITTED_WORK_MARKERS, default_worktree_path
from .editor import launch_editor
from .exceptions import (
    ConfigError,
    GitError,
    GwtError,
    NotInGitRepoError,
    WorktreeExistsError,
    WorktreeNotFoundError,
)
from .files import copy_files
from .git_utils import (
    BranchList,
    Worktree,
    add_worktree,
    get_git_common_dir,
    get_main_repo_root,
    get_repo_root,
    is_git_repo,
    list_branches,
    list_worktrees,
    remove_worktree,
)
from .logging_config import get_logger
from .prompts import ask_text, confirm, select_many, select_with_fuzzy_search
from .wizard import run_config_wizard

console = get_console()
logger = get_logger(__name__)

CREATE_NEW_BRANCH = "__CREATE_NEW__"
_LOCAL_PREFIX = "local:"
_REMOTE_PREFIX = "remote:"


@dataclass(frozen=True)
class ByPath:
    """Look a worktree up by its (symlink-resolved) directory."""

    path: Path


@dataclass(frozen=True)
class ByBranch:
    """Look a worktree up by the branch checked out in it."""

    name: str


WorktreeTarget = Union[ByPath, ByBranch]


def target_lookups(target: str, cwd: Optional[Path] = None) -> List[WorktreeTarget]:
    """
    Lookups to try for a user-supplied target, in priority order.

    An existing directory is tried as a path first; every target is also
    tried as a branch name.
    """
    lookups: List[WorktreeTarget] = []
    candidate = Path(target).expanduser()
    if not candidate.is_absolute():
        candidate = (cwd or Path.cwd()) / candidate
    if candidate.is_dir():
        lookups.append(ByPath(candidate.resolve()))
    lookups.append(ByBranch(target))
    return lookups


def find_worktree(lookup: WorktreeTarget, worktrees: Sequence[Worktree]) -> Optional[Worktree]:
    for worktree in worktrees:
        if isinstance(lookup, ByPath) and worktree.path.resolve() == lookup.path:
            return worktree
        if isinstance(lookup, ByBranch) and worktree.branch == lookup.name:
            return worktree
    return None


def resolve_worktree_target(
    target: str, worktrees: Sequence[Worktree], cwd: Optional[Path] = None
) -> Worktree:
    """
    Resolve a path or branch name to a worktree; a path match wins over a branch match.

    Raises:
        WorktreeNotFoundError: If nothing matches
    """
    for lookup in target_lookups(target, cwd):
        worktree = find_worktree(lookup, worktrees)
        if worktree is not None:
            return worktree
    raise WorktreeNotFoundError(target)


def require_repo(cwd: Optional[Path] = None) -> Path:
    """
    Return the repository root for cwd.

    Raises:
        NotInGitRepoError: If cwd is not inside a git repository
    """
    if not is_git_repo(cwd):
        raise NotInGitRepoError()
    return get_repo_root(cwd)


def _protected_roots(repo: Path) -> Set[Path]:
    return {repo.resolve(), get_main_repo_root(repo)}


def is_main_worktree(worktree: Worktree, repo: Path) -> bool:
    """True for the main worktree and for the worktree the command runs from."""
    return worktree.path.resolve() in _protected_roots(repo)


def _resolve_new_path(path: Union[str, Path], cwd: Optional[Path]) -> Path:
    candidate = Path(path).expanduser()
    if not candidate.is_absolute():
        candidate = (cwd or Path.cwd()) / candidate
    return candidate.resolve()


def _tracking_branch_name(remote_branch: str) -> str:
    """origin/feature/x -> feature/x"""
    return remote_branch.split("/", 1)[1] if "/" in remote_branch else remote_branch


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


def show_worktrees(cwd: Optional[Path] = None) -> List[Worktree]:
    """Print all worktrees of the current repository as a table."""
    repo = require_repo(cwd)
    worktrees = list_worktrees(repo)

    if not worktrees:
        console.print("No worktrees found.")
        return worktrees

    table = Table(show_lines=False)
    table.add_column("Path", style="blue", overflow="fold")
    table.add_column("Branch", style="green")
    table.add_column("Commit", style="dim")
    for worktree in worktrees:
        table.add_row(str(worktree.path), worktree.branch, worktree.short_commit)

    console.print(table)
    return worktrees


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


def _finish_setup(
    repo: Path, worktree_path: Path, config: Optional[Config], open_editor: bool
) -> None:
    """Copy configured files into the new worktree and open it."""
    if config is None:
        return

    if config.files_to_copy:
        console.print("Copying configured files...")
        copied = copy_files(repo, worktree_path, config.files_to_copy)
        console.print(f"[bold green]✓[/bold green] Copied {len(copied)} file(s)/directory(ies)")

    if open_editor and config.editor.type != EDITOR_TYPE_NONE:
        console.print(f"Launching {config.editor.command or 'editor'}...")
        launch_editor(config.editor, worktree_path)
        console.print("[bold green]✓[/bold green] Editor launched")


def create_worktree(
    branch: Optional[str] = None,
    new_branch: Optional[str] = None,
    base: Optional[str] = None,
    path: Optional[Union[str, Path]] = None,
    no_editor: bool = False,
    cwd: Optional[Path] = None,
) -> Path:
    """
    Create a worktree without prompting.

    Either check out an existing branch, or create new_branch from base.

    Args:
        branch: Existing branch to check out
        new_branch: Name of a branch to create
        base: Start point for new_branch
        path: Worktree location (default: ../<repo>-<branch>)
        no_editor: Skip launching the configured editor
        cwd: Directory inside the repository

    Returns:
        Path to the created worktree

    Raises:
        NotInGitRepoError: Outside a repository
        ConfigError: If the branch options are inconsistent
        WorktreeExistsError: If the path already exists
        GitError: If git refuses to create the worktree
    """
    repo = require_repo(cwd)

    if new_branch:
        if not base:
            raise ConfigError("--base is required when using --new-branch")
        target_branch = base
    elif branch:
        target_branch = branch
        branches = list_branches(repo)
        if branch in branches.remote and branch not in branches.local:
            new_branch = _tracking_branch_name(branch)
    else:
        raise ConfigError("Either --branch or --new-branch is required")

    if path is None:
        worktree_path = default_worktree_path(repo, new_branch or target_branch)
    else:
        worktree_path = _resolve_new_path(path, cwd)

    if worktree_path.exists():
        raise WorktreeExistsError(str(worktree_path))

    console.print(f"Creating worktree at: [blue]{worktree_path}[/blue]...")
    add_worktree(worktree_path, target_branch, new_branch, repo=repo)
    console.print("[bold green]✓[/bold green] Worktree created")

    _finish_setup(repo, worktree_path, load_config(repo), open_editor=not no_editor)
    return worktree_path


def _branch_options(branches: BranchList) -> List[tuple[str, str]]:
    options = [(name, f"{_LOCAL_PREFIX}{name}") for name in branches.local]
    options += [(name, f"{_REMOTE_PREFIX}{name}") for name in branches.remote]
    return options


def create_worktree_interactive(cwd: Optional[Path] = None) -> Path:
    """
    Create a worktree by prompting for branch, base and path.

    Runs the configuration wizard when the repository has no config yet.

    Returns:
        Path to the created worktree
    """
    repo = require_repo(cwd)
    branches = list_branches(repo)

    selection = select_with_fuzzy_search(
        "Select branch for new worktree:",
        _branch_options(branches),
        search_prompt="Filter branches (press Enter to skip)",
        pinned=[("✨ Create new branch...", CREATE_NEW_BRANCH)],
    )

    new_branch: Optional[str] = None
    if selection == CREATE_NEW_BRANCH:

        def validate_branch(value: str) -> Optional[str]:
            if not value:
                return "Branch name cannot be empty"
            if value in branches.local:
                return f"Branch '{value}' already exists"
            return None

        new_branch = ask_text("Enter new branch name", validate=validate_branch)
        target_branch = select_with_fuzzy_search(
            "Select base branch:",
            [(name, name) for name in branches.local + branches.remote],
            search_prompt="Filter base branches (press Enter to skip)",
        )
    elif selection.startswith(_LOCAL_PREFIX):
        target_branch = selection[len(_LOCAL_PREFIX):]
    elif selection.startswith(_REMOTE_PREFIX):
        target_branch = selection[len(_REMOTE_PREFIX):]
        new_branch = _tracking_branch_name(target_branch)
    else:
        raise GwtError(f"Invalid selection: {selection}")

    default_path = default_worktree_path(repo, new_branch or target_branch)

    def validate_path(value: str) -> Optional[str]:
        if not value:
            return "Path cannot be empty"
        if _resolve_new_path(value, cwd).exists():
            return f"Path already exists: {value}"
        return None

    worktree_path = _resolve_new_path(
        ask_text("Enter worktree path", default=str(default_path), validate=validate_path), cwd
    )

    console.print(f"Creating worktree at: [blue]{worktree_path}[/blue]...")
    add_worktree(worktree_path, target_branch, new_branch, repo=repo)
    console.print("[bold green]✓[/bold green] Worktree created")

    config = load_config(repo)
    if config is None:
        console.print("\nNo configuration found. Running setup wizard...")
        config = run_config_wizard(repo)

    _finish_setup(repo, worktree_path, config, open_editor=True)

    console.print(f"\nWorktree ready at: [blue]{worktree_path}[/blue]")
    return worktree_path


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


def _has_uncommitted_work(error: GitError) -> bool:
    message = str(error)
    return any(marker in message for marker in UNCOMMITTED_WORK_MARKERS)


def delete_worktree(target: str, force: bool = False, cwd: Optional[Path] = None) -> Worktree:
    """
    Delete a worktree by path or branch name without prompting.

    Args:
        target: Worktree path or branch name
        force: Remove even with uncommitted or untracked changes
        cwd: Directory inside the repository

    Returns:
        The removed worktree

    Raises:
        WorktreeNotFoundError: If target matches no worktree
        GwtError: If target is the main worktree
        GitError: If git refuses to remove the worktree
    """
    repo = require_repo(cwd)
    worktree = resolve_worktree_target(target, list_worktrees(repo), cwd)

    if is_main_worktree(worktree, repo):
        raise GwtError("Cannot delete the main worktree")

    remove_worktree(worktree.path, force=force, repo=repo)
    logger.info("Removed worktree %s (%s)", worktree.path, worktree.branch)
    return worktree


def _remove_with_force_prompt(worktree: Worktree, repo: Path) -> bool:
    """
    Remove a worktree, offering a forced removal when git reports local changes.

    Returns:
        True if the worktree was removed
    """
    try:
        remove_worktree(worktree.path, repo=repo)
    except GitError as e:
        if not _has_uncommitted_work(e):
            raise

        console.print(
            f"\n[yellow]⚠[/yellow]  Worktree at {worktree.path} has uncommitted or untracked changes."
        )
        console.print("Deleting it will permanently lose those changes.\n")
        if not confirm(f"Are you absolutely sure you want to force delete {worktree.path}?"):
            console.print("Skipped.")
            return False

        remove_worktree(worktree.path, force=True, repo=repo)
        console.print(f"[bold green]✓[/bold green] Worktree forcefully deleted: {worktree.path}")
        return True

    console.print(f"[bold green]✓[/bold green] Worktree deleted: {worktree.path}")
    return True


def delete_worktree_command(
    target: Optional[str] = None, force: bool = False, cwd: Optional[Path] = None
) -> List[Worktree]:
    """
    Delete worktrees, asking for confirmation.

    Without a target the user picks any number of linked worktrees. With
    force, a single target is removed with --force and no confirmation.

    Returns:
        Worktrees that were removed
    """
    repo = require_repo(cwd)
    worktrees = list_worktrees(repo)
    linked = [wt for wt in worktrees if not is_main_worktree(wt, repo)]

    if target:
        worktree = resolve_worktree_target(target, worktrees, cwd)
        if is_main_worktree(worktree, repo):
            raise GwtError("Cannot delete the main worktree")

        if force:
            remove_worktree(worktree.path, force=True, repo=repo)
            console.print(f"[bold green]✓[/bold green] Worktree deleted: {worktree.path}")
            return [worktree]

        if not confirm(f"Delete worktree at {worktree.path} (branch: {worktree.branch})?"):
            console.print("Deletion cancelled.")
            return []
        return [worktree] if _remove_with_force_prompt(worktree, repo) else []

    if not linked:
        console.print("No linked worktrees to delete.")
        console.print('Use "gwt create" to create a new worktree.')
        return []

    selected_paths = select_many(
        "Select worktrees to delete (space to toggle, enter to confirm):",
        [(f"{wt.branch} ({wt.path})", str(wt.path)) for wt in linked],
    )
    if not selected_paths:
        console.print("No worktrees selected.")
        return []

    selected = [wt for wt in linked if str(wt.path) in selected_paths]
    console.print("\n[bold yellow]Worktrees to delete:[/bold yellow]")
    for wt in selected:
        console.print(f"  - {wt.branch} ({wt.path})")
    console.print()

    plural = "s" if len(selected) > 1 else ""
    if not confirm(f"Delete {len(selected)} worktree{plural}?"):
        console.print("Deletion cancelled.")
        return []

    return [wt for wt in selected if _remove_with_force_prompt(wt, repo)]


# ---------------------------------------------------------------------------
# open
# ---------------------------------------------------------------------------


def open_worktree(target: str, cwd: Optional[Path] = None, run_wizard: bool = True) -> Worktree:
    """
    Open a worktree in the configured editor, or print how to cd into it.

    Args:
        target: Worktree path or branch name
        cwd: Directory inside the repository
        run_wizard: Run the configuration wizard when no config exists

    Raises:
        WorktreeNotFoundError: If target matches no worktree
        ConfigError: If there is no config and the wizard is not allowed
        EditorNotFoundError: If the configured editor is missing
    """
    repo = require_repo(cwd)
    worktree = resolve_worktree_target(target, list_worktrees(repo), cwd)

    if not worktree.path.exists():
        raise WorktreeNotFoundError(f"{target} (directory {worktree.path} is missing)")

    config = load_config(repo)
    if config is None:
        if not run_wizard:
            raise ConfigError("No configuration found. Run 'gwt config setup' first")
        console.print("\nNo configuration found. Running setup wizard...")
        config = run_config_wizard(repo)

    if config.editor.type != EDITOR_TYPE_NONE:
        console.print(f"Launching {config.editor.command or 'editor'}...")
        launch_editor(config.editor, worktree.path)
        console.print("[bold green]✓[/bold green] Editor launched")
    else:
        console.print("To navigate to this worktree, run:")
        console.print(f"  cd {worktree.path}", markup=False, soft_wrap=True)
    return worktree


def open_worktree_command(target: Optional[str] = None, cwd: Optional[Path] = None) -> Optional[Worktree]:
    """Open a worktree given as target, or picked from a fuzzy-filtered list."""
    repo = require_repo(cwd)

    if target is None:
        worktrees = list_worktrees(repo)
        if not worktrees:
            console.print("No worktrees found.")
            return None
        target = select_with_fuzzy_search(
            "Select worktree to open:",
            [(f"{wt.branch} ({wt.path})", str(wt.path)) for wt in worktrees],
            search_prompt="Filter worktrees (press Enter to skip)",
        )

    return open_worktree(target, cwd=cwd)


# ---------------------------------------------------------------------------
# clean
# ---------------------------------------------------------------------------


def _linked_git_dir(directory: Path) -> Optional[Path]:
    """Resolve the gitdir a linked worktree's .git file points to, if any."""
    git_file = directory / ".git"
    if not git_file.is_file():
        return None
    for line in git_file.read_text(encoding="utf-8", errors="replace").splitlines():
        if line.startswith("gitdir:"):
            gitdir = Path(line[len("gitdir:"):].strip())
            if not gitdir.is_absolute():
                gitdir = directory / gitdir
            return gitdir.resolve()
    return None


def find_orphaned_directories(cwd: Optional[Path] = None) -> List[Path]:
    """
    Find sibling directories that look like leftover worktrees.

    Candidates sit next to the repository, start with its name, hold a .git
    file (linked worktrees have a file, not a directory) pointing into this
    repository's .git/worktrees, and are no longer registered with git.
    Worktrees of other repositories with a similar name are never candidates.
    """
    repo = require_repo(cwd)
    common_dir = get_git_common_dir(repo)
    main_root = common_dir.parent
    worktrees_dir = common_dir / "worktrees"
    active = {wt.path.resolve() for wt in list_worktrees(repo)}

    orphaned: List[Path] = []
    try:
        entries = list(main_root.parent.iterdir())
    except OSError as e:
        logger.warning("Could not scan %s: %s", main_root.parent, e)
        return orphaned

    for entry in entries:
        try:
            if not entry.is_dir() or entry.resolve() == main_root:
                continue
            if not entry.name.startswith(main_root.name):
                continue
            if entry.resolve() in active:
                continue
            gitdir = _linked_git_dir(entry)
            if gitdir is not None and gitdir.parent == worktrees_dir:
                orphaned.append(entry)
        except OSError as e:
            logger.warning("Skipping %s: %s", entry, e)

    return sorted(orphaned)


def clean_orphaned_directories(paths: Sequence[Path], cwd: Optional[Path] = None) -> List[Path]:
    """
    Remove the given directories, never touching active worktrees.

    Returns:
        Directories that were removed
    """
    repo = require_repo(cwd)
    active = {wt.path.resolve() for wt in list_worktrees(repo)} | _protected_roots(repo)

    removed: List[Path] = []
    for path in paths:
        path = Path(path)
        if not path.exists():
            continue
        if path.resolve() in active:
            logger.info("Not removing active worktree %s", path)
            continue
        try:
            shutil.rmtree(path)
        except OSError as e:
            console.print(f"[bold red]✗[/bold red] Failed to remove {path}: {e}")
            continue
        console.print(f"[bold green]✓[/bold green] Removed: {path}")
        removed.append(path)

    return removed


def clean_command(remove_all: bool = False, cwd: Optional[Path] = None) -> List[Path]:
    """Find orphaned worktree directories and remove the selected ones."""
    require_repo(cwd)

    console.print("Scanning for orphaned worktree directories...")
    orphaned = find_orphaned_directories(cwd)
    if not orphaned:
        console.print("No orphaned worktree directories found.")
        return []

    noun = "directory" if len(orphaned) == 1 else "directories"
    console.print(f"Found {len(orphaned)} potential orphaned {noun}.")

    if remove_all:
        selected = orphaned
    else:
        picked = select_many(
            "Select directories to remove (space to toggle, enter to confirm):",
            [(str(path), str(path)) for path in orphaned],
        )
        selected = [path for path in orphaned if str(path) in picked]

    if not selected:
        console.print("No directories selected.")
        return []

    noun = "directory" if len(selected) == 1 else "directories"
    console.print(f"\nRemoving {len(selected)} {noun}...")
    removed = clean_orphaned_directories(selected, cwd)
    console.print("\n[bold green]✓[/bold green] Cleanup complete")
    return removed


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


def show_config(cwd: Optional[Path] = None) -> Optional[Config]:
    """Print the repository configuration."""
    require_repo(cwd)
    config = load_config(cwd)

    if config is None:
        console.print("No configuration found.")
        console.print('Run "gwt config setup" to configure gwt for this repository.')
        return None

    console.print("[bold cyan]Configuration:[/bold cyan]\n")
    console.print("[bold]Editor:[/bold]")
    if config.editor.type == EDITOR_TYPE_NONE:
        console.print("  Type: None (editor launching disabled)")
    else:
        console.print("  Type: Custom command")
        console.print(f"  Command: {config.editor.command}", markup=False)

    console.print("\n[bold]Files to copy:[/bold]")
    if not config.files_to_copy:
        console.print("  (none)")
    for pattern in config.files_to_copy:
        console.print(f"  - {pattern}", markup=False)

    updates = "disabled" if config.check_for_updates is False else "enabled"
    console.print(f"\n[bold]Update checks:[/bold] {updates}")
    console.print('\nRun "gwt config setup" to reconfigure.')
    return config
