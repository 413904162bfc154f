"""gwt - Git Worktree Manager."""

__version__ = "1.1.2"
