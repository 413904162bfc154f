"""Typer-based CLI interface for gwt."""

import typer

from . import __version__
from .config import set_editor_command
from .console import get_console, get_err_console
from .core import (
    clean_command,
    create_worktree,
    create_worktree_interactive,
    delete_worktree_command,
    open_worktree_command,
    require_repo,
    show_config,
    show_worktrees,
)
from .exceptions import GwtError, PromptCancelledError
from .git_utils import get_repo_root, list_branches, list_worktrees
from .logging_config import setup_logging
from .update import auto_check_for_updates, upgrade
from .wizard import run_config_wizard

app = typer.Typer(
    name="gwt",
    help="Git worktree manager",
    no_args_is_help=True,
    add_completion=True,
)
console = get_console()
err_console = get_err_console()


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"gwt version {__version__}")
        raise typer.Exit()


def _fail(error: GwtError) -> None:
    if isinstance(error, PromptCancelledError):
        err_console.print("Cancelled")
    else:
        err_console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(code=1)


def complete_worktree_branches() -> list[str]:
    """Autocomplete function for worktree branch names."""
    try:
        return [wt.branch for wt in list_worktrees(get_repo_root())]
    except GwtError:
        return []


def complete_all_branches() -> list[str]:
    """Autocomplete function for local and remote branches."""
    try:
        branches = list_branches(get_repo_root())
    except GwtError:
        return []
    return branches.local + branches.remote


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Show informational log messages"),
    debug: bool = typer.Option(False, "--debug", help="Show debug log messages"),
) -> None:
    """Git worktree manager."""
    setup_logging(verbose=verbose, debug=debug)
    # Once a day, when the repository is configured
    if ctx.invoked_subcommand != "upgrade":
        auto_check_for_updates()


@app.command(name="list")
def list_cmd() -> None:
    """
    List all worktrees of the current repository.

    Example:
        gwt list
    """
    try:
        show_worktrees()
    except GwtError as e:
        _fail(e)


@app.command(name="ls", hidden=True)
def ls_cmd() -> None:
    """Alias for list."""
    list_cmd()


@app.command()
def create(
    branch: str | None = typer.Option(
        None,
        "--branch",
        "-b",
        help="Existing local or remote branch to check out",
        autocompletion=complete_all_branches,
    ),
    new_branch: str | None = typer.Option(
        None,
        "--new-branch",
        "-n",
        help="Name of a new branch to create (requires --base)",
    ),
    base: str | None = typer.Option(
        None,
        "--base",
        help="Base branch for --new-branch",
        autocompletion=complete_all_branches,
    ),
    path: str | None = typer.Option(
        None,
        "--path",
        "-p",
        help="Custom path for worktree (default: ../<repo>-<branch>)",
    ),
    no_editor: bool = typer.Option(
        False,
        "--no-editor",
        help="Don't launch the configured editor",
    ),
) -> None:
    """
    Create a new worktree.

    Without --branch or --new-branch, prompts for the branch, base and path.
    Configured files are copied into the worktree and the configured editor
    is launched.

    Example:
        gwt create
        gwt create --branch feature/login
        gwt create --new-branch fix-auth --base main --no-editor
    """
    try:
        if branch is None and new_branch is None:
            if base is not None or path is not None:
                raise GwtError("--base and --path need --branch or --new-branch")
            create_worktree_interactive()
        else:
            create_worktree(
                branch=branch,
                new_branch=new_branch,
                base=base,
                path=path,
                no_editor=no_editor,
            )
    except GwtError as e:
        _fail(e)


@app.command(name="add", hidden=True)
def add_cmd(
    branch: str | None = typer.Option(None, "--branch", "-b"),
    new_branch: str | None = typer.Option(None, "--new-branch", "-n"),
    base: str | None = typer.Option(None, "--base"),
    path: str | None = typer.Option(None, "--path", "-p"),
    no_editor: bool = typer.Option(False, "--no-editor"),
) -> None:
    """Alias for create."""
    create(branch=branch, new_branch=new_branch, base=base, path=path, no_editor=no_editor)


@app.command()
def delete(
    target: str | None = typer.Argument(
        None,
        help="Worktree path or branch name (default: choose interactively)",
        autocompletion=complete_worktree_branches,
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Delete without confirmation, even with uncommitted changes",
    ),
) -> None:
    """
    Delete worktrees.

    The main worktree can never be deleted.

    Example:
        gwt delete
        gwt delete feature/login
        gwt delete ../myrepo-feature-login --force
    """
    try:
        delete_worktree_command(target, force=force)
    except GwtError as e:
        _fail(e)


@app.command(name="remove", hidden=True)
def remove_cmd(
    target: str | None = typer.Argument(None),
    force: bool = typer.Option(False, "--force", "-f"),
) -> None:
    """Alias for delete."""
    delete(target=target, force=force)


@app.command(name="open")
def open_cmd(
    target: str | None = typer.Argument(
        None,
        help="Worktree path or branch name (default: choose interactively)",
        autocompletion=complete_worktree_branches,
    ),
) -> None:
    """
    Open a worktree in the configured editor.

    When editor launching is disabled, prints the cd command instead.

    Example:
        gwt open
        gwt open feature/login
    """
    try:
        open_worktree_command(target)
    except GwtError as e:
        _fail(e)


@app.command()
def clean(
    remove_all: bool = typer.Option(
        False,
        "--all",
        help="Remove all orphaned directories without asking which",
    ),
) -> None:
    """
    Remove leftover worktree directories.

    Finds directories next to the repository that were worktrees once but
    are no longer registered with git.

    Example:
        gwt clean
        gwt clean --all
    """
    try:
        clean_command(remove_all=remove_all)
    except GwtError as e:
        _fail(e)


@app.command(name="upgrade")
def upgrade_cmd() -> None:
    """
    Check whether a newer gwt release is available.

    Example:
        gwt upgrade
    """
    try:
        upgrade()
    except GwtError as e:
        _fail(e)


# Configuration commands
config_app = typer.Typer(
    name="config",
    help="Manage repository configuration",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")


@config_app.command()
def show() -> None:
    """
    Show the configuration of the current repository.

    Example:
        gwt config show
    """
    try:
        show_config()
    except GwtError as e:
        _fail(e)


@config_app.command()
def setup() -> None:
    """
    Run the interactive configuration wizard.

    Example:
        gwt config setup
    """
    try:
        require_repo()
        run_config_wizard()
    except GwtError as e:
        _fail(e)


@config_app.command(name="set")
def set_cmd(
    editor: str = typer.Argument(
        ...,
        help='Editor command, e.g. "code" or "idea"; "none" disables launching',
    ),
) -> None:
    """
    Set the editor command, keeping the rest of the configuration.

    Example:
        gwt config set code
        gwt config set "subl -n"
        gwt config set none
    """
    try:
        require_repo()
        config = set_editor_command(editor)
        if config.editor.command:
            console.print(f"[bold green]✓[/bold green] Editor set to: {config.editor.command}", highlight=False)
        else:
            console.print("[bold green]✓[/bold green] Editor launching disabled")
    except GwtError as e:
        _fail(e)


if __name__ == "__main__":
    app()
