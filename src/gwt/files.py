"""Discovery and copying of untracked convenience files (.env, .idea, ...)."""

import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from .logging_config import get_logger

logger = get_logger(__name__)

_GLOB_CHARS = ("*", "?", "[")


@dataclass(frozen=True)
class FileEntry:
    """A file or directory relative to a scanned root, with forward slashes."""

    name: str
    is_directory: bool


def discover_files(path: Path, max_depth: Optional[int] = None) -> List[FileEntry]:
    """
    List files and directories under path, including hidden ones.

    The .git entry is skipped at every level and symlinked directories are
    not descended into. Unreadable directories are logged and skipped.

    Args:
        path: Directory to scan
        max_depth: Deepest level to list (0 = direct children only, None = unlimited)

    Returns:
        Entries sorted case-insensitively by relative name
    """
    entries: List[FileEntry] = []

    def _scan(current: Path, prefix: str, depth: int) -> None:
        try:
            children = list(os.scandir(current))
        except FileNotFoundError:
            return
        except OSError as e:
            logger.warning("Could not read %s: %s", current, e)
            return

        for child in children:
            if child.name == ".git":
                continue

            name = f"{prefix}{child.name}"
            try:
                is_dir = child.is_dir()
            except OSError:
                is_dir = False
            entries.append(FileEntry(name=name, is_directory=is_dir))

            if is_dir and not child.is_symlink() and (max_depth is None or depth < max_depth):
                _scan(Path(child.path), f"{name}/", depth + 1)

    _scan(path, "", 0)
    entries.sort(key=lambda entry: entry.name.lower())
    return entries


def select_files_to_copy_non_interactive(
    files: Iterable[FileEntry], selections: Iterable[str]
) -> List[str]:
    """Keep the selections that name a discovered entry, in selection order."""
    available = {entry.name for entry in files}
    return [name for name in selections if name in available]


def is_glob_pattern(pattern: str) -> bool:
    return any(char in pattern for char in _GLOB_CHARS)


def _copy_entry(source: Path, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    if source.is_dir() and not source.is_symlink():
        shutil.copytree(source, dest, symlinks=True, dirs_exist_ok=True)
    else:
        shutil.copy2(source, dest, follow_symlinks=False)


def copy_files(from_path: Path, to_path: Path, patterns: Iterable[str]) -> List[str]:
    """
    Copy files and directories from one worktree root to another.

    Patterns containing glob characters are matched against the top level of
    from_path only. Other entries are literal relative paths and may be nested.
    Missing sources are skipped and existing destinations are overwritten.
    Copy failures are logged as warnings and never raised.

    Args:
        from_path: Source directory (usually the repository root)
        to_path: Destination directory (the new worktree)
        patterns: File/directory names or glob patterns

    Returns:
        Relative names that were copied
    """
    copied: List[str] = []

    for pattern in patterns:
        if is_glob_pattern(pattern):
            try:
                sources = sorted(from_path.glob(pattern))
            except (OSError, ValueError) as e:
                logger.warning("Could not expand %s: %s", pattern, e)
                continue
        else:
            source = from_path / pattern
            sources = [source] if source.exists() or source.is_symlink() else []

        for source in sources:
            if source.name == ".git":
                continue
            name = source.relative_to(from_path).as_posix()
            try:
                _copy_entry(source, to_path / name)
            except (OSError, shutil.Error) as e:
                logger.warning("Could not copy %s: %s", name, e)
                continue
            copied.append(name)

    return copied
