"""Interactive prompts built on rich and the arrow-key selectors."""

from typing import Callable, List, Optional, Sequence, Tuple

from rich.prompt import Confirm, Prompt

from .console import get_console
from .exceptions import PromptCancelledError
from .fuzzy import fuzzy_search
from .tui import arrow_select, checkbox_select

# (label, value) pairs, as rendered by the selectors
Option = Tuple[str, str]


def select(message: str, options: Sequence[Option], default_index: int = 0) -> str:
    """
    Pick one option.

    Raises:
        PromptCancelledError: If the user cancels the selection
    """
    value = arrow_select(list(options), title=message, default_index=default_index)
    if value is None:
        raise PromptCancelledError()
    return value


def select_many(message: str, options: Sequence[Option]) -> List[str]:
    """
    Pick any number of options.

    Raises:
        PromptCancelledError: If the user cancels the selection
    """
    values = checkbox_select(list(options), title=message)
    if values is None:
        raise PromptCancelledError()
    return values


def select_with_fuzzy_search(
    message: str,
    options: Sequence[Option],
    search_prompt: str = "Filter (press Enter to skip)",
    pinned: Sequence[Option] = (),
) -> str:
    """
    Ask for a fuzzy filter first, then select among the options whose label matches.

    An empty filter shows everything. When nothing matches all options are
    shown again; a single match is selected without asking. Pinned options
    (e.g. "create new branch") are always offered first and never filtered.

    Returns:
        The selected option value
    """
    console = get_console()
    query = Prompt.ask(search_prompt, default="", show_default=False, console=console).strip()

    filtered = list(options)
    if query:
        by_label: dict[str, List[Option]] = {}
        for option in options:
            by_label.setdefault(option[0], []).append(option)
        ranked = fuzzy_search(query, list(by_label))
        filtered = [option for label in ranked for option in by_label[label]]

        if not filtered:
            console.print(f"[yellow]No matches found for \"{query}\". Showing all options.[/yellow]")
            filtered = list(options)
        elif len(filtered) == 1 and not pinned:
            console.print(f"Auto-selected: [green]{filtered[0][0]}[/green]")
            return filtered[0][1]

    return select(message, list(pinned) + filtered)


def confirm(message: str, default: bool = False) -> bool:
    """Yes/no question."""
    return Confirm.ask(message, default=default, console=get_console())


def ask_text(
    message: str,
    default: Optional[str] = None,
    validate: Optional[Callable[[str], Optional[str]]] = None,
) -> str:
    """
    Ask for free text, repeating until validate returns no error.

    Args:
        message: Prompt text
        default: Value used when the user just presses Enter
        validate: Returns an error message for invalid input, None otherwise
    """
    console = get_console()
    while True:
        if default is None:
            value = Prompt.ask(message, console=console)
        else:
            value = Prompt.ask(message, default=default, console=console)
        value = value.strip()
        error = validate(value) if validate else None
        if error is None:
            return value
        console.print(f"[red]{error}[/red]")
