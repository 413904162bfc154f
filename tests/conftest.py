"""Shared pytest fixtures."""

import subprocess
from pathlib import Path

import pytest


def _git(*args: str, cwd: Path) -> None:
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True)


@pytest.fixture(autouse=True)
def no_update_check(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests off the network."""
    monkeypatch.setenv("GWT_NO_UPDATE_CHECK", "1")
    monkeypatch.setattr("gwt.update.fetch_latest_version", lambda: None)


@pytest.fixture
def temp_git_repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """
    Create a repository with one commit on main and chdir into it.

    The repository lives in its own parent directory so that sibling
    worktrees created by the tests stay inside tmp_path.
    """
    repo = tmp_path / "workspace" / "myrepo"
    repo.mkdir(parents=True)

    _git("init", "-b", "main", cwd=repo)
    _git("config", "user.name", "Test User", cwd=repo)
    _git("config", "user.email", "test@example.com", cwd=repo)
    _git("config", "commit.gpgsign", "false", cwd=repo)

    (repo / "README.md").write_text("# Test Repository\n")
    _git("add", "README.md", cwd=repo)
    _git("commit", "-m", "Initial commit", cwd=repo)

    monkeypatch.chdir(repo)
    return repo.resolve()


@pytest.fixture
def git(temp_git_repo: Path):
    """Run git in the test repository and return its stdout."""

    def run(*args: str, cwd: Path | None = None) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd or temp_git_repo,
            check=True,
            capture_output=True,
            text=True,
        )
        return result.stdout

    return run
