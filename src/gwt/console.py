"""Shared rich consoles."""

from rich.console import Console

_console = Console()
_err_console = Console(stderr=True)


def get_console() -> Console:
    """Console for regular command output."""
    return _console


def get_err_console() -> Console:
    """Console bound to standard error, used for errors and warnings."""
    return _err_console
