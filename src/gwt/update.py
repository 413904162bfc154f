"""Release version checks against GitHub."""

import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx
from packaging.version import InvalidVersion, Version
from rich.console import Console
from rich.panel import Panel

from . import __version__
from .config import Config, get_config_path, load_config
from .console import get_console
from .constants import (
    GITHUB_API_URL,
    INSTALL_COMMAND,
    NO_UPDATE_CHECK_ENV,
    UPDATE_CHECK_INTERVAL_SECONDS,
    UPDATE_CHECK_TIMEOUT_SECONDS,
    UPDATE_STAMP_FILE,
)
from .exceptions import GwtError
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class UpdateInfo:
    current_version: str
    latest_version: str
    update_available: bool


def compare_versions(current: str, remote: str) -> int:
    """
    Compare two semantic versions.

    Versions are parsed with packaging (PEP 440). SemVer tags PEP 440 cannot
    express, such as "1.0.0-alpha.beta", are not compared identifier by
    identifier; they count as equal to anything.

    Returns:
        1 if remote is newer, 0 if equal (or unparsable), -1 if remote is older
    """
    try:
        current_v = Version(current)
        remote_v = Version(remote)
    except InvalidVersion:
        logger.debug("Cannot compare versions %r and %r", current, remote)
        return 0

    if remote_v > current_v:
        return 1
    if remote_v < current_v:
        return -1
    return 0


def needs_update_check(stamp_path: Path, now: Optional[float] = None) -> bool:
    """True if the stamp file is missing or older than one day."""
    try:
        mtime = stamp_path.stat().st_mtime
    except OSError:
        return True
    now = time.time() if now is None else now
    return now - mtime >= UPDATE_CHECK_INTERVAL_SECONDS


def touch_file(path: Path) -> None:
    """Create path or refresh its modification time, ignoring failures."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()
    except OSError as e:
        logger.debug("Could not touch %s: %s", path, e)


def should_check_for_updates(config: Config) -> bool:
    """Update checks are on unless the config explicitly disables them."""
    return config.check_for_updates is not False


def fetch_latest_version() -> Optional[str]:
    """
    Fetch the latest release tag from GitHub.

    Returns:
        The tag name, or None if GitHub could not be reached
    """
    try:
        response = httpx.get(
            GITHUB_API_URL,
            headers={"User-Agent": "gwt-cli", "Accept": "application/vnd.github+json"},
            timeout=UPDATE_CHECK_TIMEOUT_SECONDS,
            follow_redirects=True,
        )
        response.raise_for_status()
        tag = response.json().get("tag_name")
    except (httpx.HTTPError, ValueError) as e:
        logger.debug("Latest version lookup failed: %s", e)
        return None
    return tag or None


def check_for_updates(current_version: str = __version__) -> Optional[UpdateInfo]:
    """Look up the latest release and compare it with current_version."""
    latest = fetch_latest_version()
    if not latest:
        return None

    return UpdateInfo(
        current_version=current_version,
        latest_version=latest,
        update_available=compare_versions(current_version, latest) == 1,
    )


def display_update_notification(info: UpdateInfo, console: Optional[Console] = None) -> None:
    """Print an update banner if a newer version exists."""
    if not info.update_available:
        return

    console = console or get_console()
    console.print()
    console.print(
        Panel(
            f"[bold]Update available:[/bold] {info.current_version} → {info.latest_version}\n\n"
            f"To update, run:\n  [cyan]{INSTALL_COMMAND}[/cyan]",
            border_style="yellow",
            expand=False,
        )
    )
    console.print()


def auto_check_for_updates(cwd: Optional[Path] = None) -> None:
    """
    Check for a new release at most once a day per repository.

    Skipped outside repositories, without a config, when the config opts out,
    or when GWT_NO_UPDATE_CHECK is set. Never raises.
    """
    if os.environ.get(NO_UPDATE_CHECK_ENV):
        return

    try:
        config = load_config(cwd)
        config_path = get_config_path(cwd)
    except GwtError as e:
        logger.debug("Skipping update check: %s", e)
        return

    if config is None or config_path is None or not should_check_for_updates(config):
        return

    stamp_path = config_path.parent / UPDATE_STAMP_FILE
    if not needs_update_check(stamp_path):
        return

    touch_file(stamp_path)
    info = check_for_updates()
    if info is not None:
        display_update_notification(info)


def report_upgrade(
    current_version: str, latest_version: str, console: Optional[Console] = None
) -> bool:
    """
    Print whether latest_version supersedes current_version.

    Returns:
        True if an update is available
    """
    console = console or get_console()
    info = UpdateInfo(
        current_version=current_version,
        latest_version=latest_version,
        update_available=compare_versions(current_version, latest_version) == 1,
    )
    if info.update_available:
        display_update_notification(info, console)
    else:
        console.print(f"gwt {current_version} is up to date")
    return info.update_available


def upgrade(current_version: str = __version__) -> bool:
    """
    Check GitHub for a newer release.

    Raises:
        GwtError: If GitHub cannot be reached
    """
    latest = fetch_latest_version()
    if not latest:
        raise GwtError("Could not reach GitHub to check for updates")
    return report_upgrade(current_version, latest)
