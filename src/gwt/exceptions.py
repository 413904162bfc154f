"""Exception hierarchy for gwt."""


class GwtError(Exception):
    """Base exception for all gwt errors."""

    pass


class GitError(GwtError):
    """A git command failed."""

    pass


class NotInGitRepoError(GwtError):
    """Raised when a command runs outside a git repository."""

    def __init__(self) -> None:
        super().__init__("Not in a git repository")


class WorktreeExistsError(GwtError):
    """Raised when the target path of a new worktree already exists."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Worktree already exists at: {path}")


class WorktreeNotFoundError(GwtError):
    """Raised when a path or branch does not match any worktree."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(f"Worktree not found: {target}")


class EditorNotFoundError(GwtError):
    """Raised when the configured editor command cannot be found."""

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(
            f"Editor command not found: {command}. Install it or run 'gwt config setup'"
        )


class InvalidConfigVersionError(GwtError):
    """Raised when the config file declares an unknown schema version."""

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(f"Unsupported config version: {version}")


class InvalidFilePatternError(GwtError):
    """Raised for a filesToCopy entry that cannot be copied safely."""

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        super().__init__(f"Invalid file pattern: {pattern}")


class ConfigError(GwtError):
    """Configuration could not be created or applied."""

    pass


class PromptCancelledError(GwtError):
    """The user cancelled an interactive prompt."""

    def __init__(self) -> None:
        super().__init__("Cancelled")
