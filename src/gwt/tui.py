"""Arrow-key TUI selectors rendered on stderr."""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager

_ANSI_RE = re.compile(r"\x1b\[[^m]*m")


def arrow_select(
    items: list[tuple[str, str]],
    title: str = "Select:",
    default_index: int = 0,
) -> str | None:
    """Single-choice selector.

    Args:
        items: List of (label, value) tuples to display.
        title: Title shown above the list.
        default_index: Initially highlighted item index.

    Returns:
        The value of the selected item, or None if cancelled.
    """
    if not items:
        return None

    default_index = max(0, min(default_index, len(items) - 1))

    if not sys.stderr.isatty() or not sys.stdin.isatty():
        return _select_fallback(items, title, default_index)

    try:
        with _raw_keys() as read_key:
            return _run(items, title, default_index, read_key, multi=False)
    except ImportError:
        return _select_fallback(items, title, default_index)


def checkbox_select(
    items: list[tuple[str, str]],
    title: str = "Select (space to toggle, enter to confirm):",
    checked: set[str] | None = None,
) -> list[str] | None:
    """Multi-choice selector.

    Space toggles the highlighted item, 'a' toggles all of them.

    Returns:
        Values of the checked items in list order, or None if cancelled.
    """
    if not items:
        return []

    if not sys.stderr.isatty() or not sys.stdin.isatty():
        return _checkbox_fallback(items, title)

    try:
        with _raw_keys() as read_key:
            return _run(items, title, 0, read_key, multi=True, checked=checked)
    except ImportError:
        return _checkbox_fallback(items, title)


def _get_terminal_width() -> int:
    """Get terminal width, defaulting to 80."""
    try:
        return os.get_terminal_size(sys.stderr.fileno()).columns
    except (OSError, ValueError):
        return 80


def _write_stderr(s: str) -> None:
    """Write raw bytes to stderr, bypassing buffered text wrapper."""
    os.write(sys.stderr.fileno(), s.encode())


def _truncate(text: str, width: int) -> str:
    """Truncate text to fit within terminal width."""
    visible = _ANSI_RE.sub("", text)
    if len(visible) <= width:
        return text
    vis_pos = 0
    i = 0
    while i < len(text) and vis_pos < width - 1:
        if text[i] == "\x1b":
            end = text.find("m", i)
            i = len(text) if end == -1 else end + 1
        else:
            vis_pos += 1
            i += 1
    return text[:i] + "\x1b[0m"


def _render(
    items: list[tuple[str, str]],
    title: str,
    selected: int,
    checked: set[str] | None,
    *,
    first_render: bool = False,
) -> None:
    """Render the list on stderr using ANSI escape codes."""
    width = _get_terminal_width()

    if not first_render:
        _write_stderr("\x1b[u")
    _write_stderr("\x1b[s")

    line = f"  \x1b[1m{title}\x1b[0m"
    _write_stderr(f"\x1b[2K{_truncate(line, width)}\r\n")
    _write_stderr("\x1b[2K\r\n")

    for i, (label, value) in enumerate(items):
        box = ""
        if checked is not None:
            box = "[x] " if value in checked else "[ ] "
        if i == selected:
            line = f"  \x1b[1;7m > {box}{label} \x1b[0m"
        else:
            line = f"    {box}{label}"
        _write_stderr(f"\x1b[2K{_truncate(line, width)}\r\n")

    for _ in range(2):
        _write_stderr("\x1b[2K\r\n")
    _write_stderr("\x1b[2A")


def _cleanup(total_lines: int) -> None:
    """Erase the rendered selector from stderr."""
    _write_stderr("\x1b[u")
    for _ in range(total_lines + 2):
        _write_stderr("\x1b[2K\r\n")
    _write_stderr("\x1b[u")


def _run(
    items: list[tuple[str, str]],
    title: str,
    selected: int,
    read_key: Callable[[], str],
    *,
    multi: bool,
    checked: set[str] | None = None,
) -> str | list[str] | None:
    marks: set[str] | None = set(checked or ()) if multi else None
    total_lines = len(items) + 2

    _write_stderr("\x1b[?25l")
    try:
        _render(items, title, selected, marks, first_render=True)
        while True:
            key = read_key()

            if key == "enter":
                _cleanup(total_lines)
                if marks is not None:
                    return [value for _, value in items if value in marks]
                return items[selected][1]

            if key in ("ctrl-c", "q", "esc"):
                _cleanup(total_lines)
                return None

            if key == "up":
                selected = (selected - 1) % len(items)
            elif key == "down":
                selected = (selected + 1) % len(items)
            elif key == "space" and marks is not None:
                marks ^= {items[selected][1]}
            elif key == "a" and marks is not None:
                values = {value for _, value in items}
                marks = set() if marks >= values else values
            elif key.isdigit() and marks is None:
                idx = int(key) - 1
                if 0 <= idx < len(items):
                    _cleanup(total_lines)
                    return items[idx][1]
            _render(items, title, selected, marks)
    except (KeyboardInterrupt, EOFError):
        _cleanup(total_lines)
        return None
    finally:
        _write_stderr("\x1b[?25h")


@contextmanager
def _raw_keys() -> Iterator[Callable[[], str]]:
    """Yield a key reader for the current platform.

    Raises:
        ImportError: If neither termios nor msvcrt is available.
    """
    try:
        import termios
        import tty
    except ImportError:
        import msvcrt  # raises ImportError on unsupported platforms

        def read_windows_key() -> str:
            ch = msvcrt.getwch()  # type: ignore[attr-defined]
            if ch in ("\x00", "\xe0"):
                code = msvcrt.getwch()  # type: ignore[attr-defined]
                return {"H": "up", "P": "down"}.get(code, "unknown")
            return _normalize_char(ch)

        yield read_windows_key
        return

    fd = sys.stdin.fileno()
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        yield lambda: _read_unix_key(fd)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


def _normalize_char(ch: str) -> str:
    if ch in ("\r", "\n"):
        return "enter"
    if ch == "\x03":
        return "ctrl-c"
    if ch == " ":
        return "space"
    if ch in ("q", "a") or ch in "123456789":
        return ch
    return "unknown"


def _read_unix_key(fd: int) -> str:
    """Read a single keypress from fd, handling escape sequences."""
    ch = os.read(fd, 1)
    if not ch:
        raise EOFError

    if ch == b"\x1b":
        import select

        readable, _, _ = select.select([fd], [], [], 0.05)
        if not readable:
            return "esc"
        if os.read(fd, 1) == b"[":
            return {b"A": "up", b"B": "down"}.get(os.read(fd, 1), "unknown")
        return "unknown"

    return _normalize_char(ch.decode(errors="ignore"))


def _select_fallback(
    items: list[tuple[str, str]],
    title: str,
    default_index: int,
) -> str | None:
    """Fallback: numbered list with text input."""
    out = sys.stderr

    out.write(f"\n  {title}\n\n")
    for i, (label, _value) in enumerate(items):
        marker = ">" if i == default_index else " "
        out.write(f"  {marker} [{i + 1}] {label}\n")
    out.write("\n")

    try:
        out.write(f"Select [1-{len(items)}]: ")
        out.flush()
        choice = sys.stdin.readline().strip()
        if not choice:
            return items[default_index][1]
        idx = int(choice) - 1
        if 0 <= idx < len(items):
            return items[idx][1]
    except (ValueError, KeyboardInterrupt, EOFError):
        pass

    return None


def _checkbox_fallback(items: list[tuple[str, str]], title: str) -> list[str] | None:
    """Fallback: numbered list, selection typed as space-separated numbers or 'all'."""
    out = sys.stderr

    out.write(f"\n  {title}\n\n")
    for i, (label, _value) in enumerate(items):
        out.write(f"    [{i + 1}] {label}\n")
    out.write("\n")

    try:
        out.write("Enter numbers (space-separated), 'all', or nothing: ")
        out.flush()
        choice = sys.stdin.readline().strip()
    except (KeyboardInterrupt, EOFError):
        return None

    if choice.lower() == "all":
        return [value for _, value in items]

    picked: set[int] = set()
    for token in choice.replace(",", " ").split():
        if token.isdigit() and 1 <= int(token) <= len(items):
            picked.add(int(token) - 1)
    return [value for i, (_, value) in enumerate(items) if i in picked]
