"""Shared fixtures: throwaway git repositories and a fake assistant."""

import subprocess
from pathlib import Path
from unittest.mock import Mock

import pytest

from vibe.assistant import ClaudeAssistant
from vibe.config import Config
from vibe.context import RepoContext


def git(cwd: Path, *args: str) -> str:
    """Run a git command in ``cwd`` and return its stdout."""
    result = subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True)
    return result.stdout


def commit_file(repo: Path, name: str, content: str, message: str | None = None) -> None:
    """Write a file and commit it."""
    path = repo / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    git(repo, "add", name)
    git(repo, "commit", "-q", "-m", message or f"Add {name}")


def init_repo(path: Path, branch: str = "main") -> Path:
    """Create a repository with one commit on ``branch``."""
    path.mkdir(parents=True)
    git(path, "init", "-q")
    git(path, "symbolic-ref", "HEAD", f"refs/heads/{branch}")
    git(path, "config", "user.name", "Test")
    git(path, "config", "user.email", "test@test.com")
    git(path, "config", "commit.gpgsign", "false")
    commit_file(path, "README.md", "# Test Repository\n", "Initial commit")
    return path


@pytest.fixture
def temp_repo(tmp_path):
    """A repository at ``<tmp>/main`` on branch main; worktrees land in ``<tmp>``."""
    return init_repo(tmp_path / "main")


@pytest.fixture
def feature_worktree(temp_repo):
    """A ``feature-x`` worktree next to the main checkout with one extra commit."""
    path = temp_repo.parent / "feature-x"
    git(temp_repo, "worktree", "add", "-q", "-b", "feature-x", str(path), "main")
    commit_file(path, "feature.txt", "feature\n")
    return path


@pytest.fixture
def mock_assistant():
    """An assistant that is not installed."""
    assistant = Mock(spec=ClaudeAssistant)
    assistant.is_available.return_value = False
    return assistant


@pytest.fixture
def repo_context(temp_repo, mock_assistant):
    """Context rooted at the main checkout."""
    return RepoContext(temp_repo, config=Config(), assistant=mock_assistant,
                       environ={"SHELL": "/bin/zsh", "EDITOR": "vi"})
